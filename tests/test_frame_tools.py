import json

import pytest

from conftest import FakeLlm, FakeLlmFactory
from wizards.errors import GenerationFailedError, MissingFieldError, RecordNotFoundError
from wizards.frame_tools import FrameGenerator, FrameHelper

FRAME_TEXT = (
    "Titel: Idéstorm\nBeskrivning: Snabb idégenerering.\nSteg:\n1. Start (5 min)\n"
    "Reflektion: Vad överraskade dig?\nInteraktion: Smågrupper.\nNFI-index: 3\nEngagemangsnivå: 4"
)

SUGGESTIONS = {
    "reflection_suggestion": "Avsluta med en tyst minut.",
    "interaction_suggestion": "Byt grupper halvvägs.",
    "steps": [{"label": "Intro", "duration": 5}, {"label": "Arbete", "duration": "15"}],
    "nfi_index": 4,
    "engagement_level": 3,
}


class TestFrameGenerator:

    def test_requires_event_id(self, store):
        llm = FakeLlm(FRAME_TEXT)
        with pytest.raises(MissingFieldError):
            FrameGenerator(FakeLlmFactory(llm), store).handle({"bento_id": "b-1"})
        assert llm.call_count == 0

    def test_generates_with_bento(self, store):
        llm = FakeLlm(FRAME_TEXT)
        factory = FakeLlmFactory(llm)
        out = FrameGenerator(factory, store).handle({"event_id": "ev-1", "bento_id": "b-1"})
        assert out["next_step"] == "done"
        assert out["data"] == {"frame_proposal_raw": FRAME_TEXT}
        assert factory.purposes == ["frame_generator"]
        assert "Walk and talk" in llm.calls[0]["user"]

    def test_unknown_bento(self, store):
        with pytest.raises(RecordNotFoundError):
            FrameGenerator(FakeLlmFactory(FakeLlm(FRAME_TEXT)), store).handle({"event_id": "ev-1", "bento_id": "zzz"})


class TestFrameHelper:

    def test_returns_validated_suggestions(self):
        llm = FakeLlm("```json\n" + json.dumps(SUGGESTIONS, ensure_ascii=False) + "\n```")
        out = FrameHelper(FakeLlmFactory(llm)).handle({
            "frame_id": "f-1",
            "existing_data": {"title": "Idéstorm"},
            "context": {"purpose": "Nya idéer", "audience": "Säljteamet", "theme": "Framtid"},
        })
        assert out["ok"] is True
        assert out["frame_id"] == "f-1"
        assert out["suggestions"]["steps"][1] == {"label": "Arbete", "duration": 15}
        assert "Säljteamet" in llm.calls[0]["user"]
        assert "Idéstorm" in llm.calls[0]["user"]

    def test_requires_frame_id(self):
        llm = FakeLlm("{}")
        with pytest.raises(MissingFieldError):
            FrameHelper(FakeLlmFactory(llm)).handle({"context": {}})
        assert llm.call_count == 0

    @pytest.mark.parametrize("patch", [
        {"nfi_index": 7},
        {"engagement_level": 0},
        {"steps": [{"label": "Lång", "duration": 45}]},
        {"steps": []},
    ])
    def test_shape_mismatch_is_generation_failure(self, patch):
        llm = FakeLlm(json.dumps({**SUGGESTIONS, **patch}))
        with pytest.raises(GenerationFailedError):
            FrameHelper(FakeLlmFactory(llm)).handle({"frame_id": "f-1"})

    def test_unparsable_output(self):
        with pytest.raises(GenerationFailedError):
            FrameHelper(FakeLlmFactory(FakeLlm(""))).handle({"frame_id": "f-1"})
