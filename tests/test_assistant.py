import logging

import pytest

from conftest import FakeLlm, FakeLlmFactory
from wizards.assistant import AssistantChat, TipsSearch
from wizards.errors import MissingInputError, WizardError


class BrokenStore:
    def search_tips(self, query, limit=5):
        raise WizardError("Datastore error while loading tips")


def test_tips_search_matches_title_content_and_tags(store):
    assert [t["id"] for t in TipsSearch(store=store).handle({"query": "PAUSER"})["results"]] == ["t-1"]
    assert [t["id"] for t in TipsSearch(store=store).handle({"query": "agendan"})["results"]] == ["t-2"]
    assert [t["id"] for t in TipsSearch(store=store).handle({"query": "npf"})["results"]] == ["t-1"]


def test_tips_search_requires_query(store):
    with pytest.raises(MissingInputError, match="query"):
        TipsSearch(store=store).handle({"query": "  "})


def test_chat_requires_message(store):
    llm = FakeLlm("Hej!")
    with pytest.raises(MissingInputError):
        AssistantChat(FakeLlmFactory(llm), store).handle({"message": ""})
    assert llm.call_count == 0


def test_chat_uses_tips_context_and_history(store):
    llm = FakeLlm("Lägg in korta pauser.")
    out = AssistantChat(FakeLlmFactory(llm), store).handle({
        "message": "pauser",
        "context": {"page": "program"},
        "history": [
            {"role": "user", "content": "Hej"},
            {"role": "assistant", "text": "Hej! Vad vill du göra?"},
            {"role": "system", "content": "ignoreras"},
        ],
    })
    assert out == {"ok": True, "reply": "Lägg in korta pauser.", "tips_used": 1}

    call = llm.calls[0]
    assert "Planera in korta pauser varje timme." in call["system"]
    assert '"page": "program"' in call["system"]
    assert call["user"] == "pauser"
    assert [m.content for m in call["history"]] == ["Hej", "Hej! Vad vill du göra?"]


def test_chat_without_matching_tips(store):
    llm = FakeLlm("Svar")
    out = AssistantChat(FakeLlmFactory(llm), store).handle({"message": "helt orelaterat"})
    assert out["tips_used"] == 0
    assert "Inga relevanta interna tips hittades." in llm.calls[0]["system"]


def test_chat_degrades_when_tips_lookup_fails(caplog):
    llm = FakeLlm("Svar")
    with caplog.at_level(logging.WARNING, logger="ollo_backend"):
        out = AssistantChat(FakeLlmFactory(llm), BrokenStore()).handle({"message": "pauser"})
    assert out["tips_used"] == 0
    assert out["reply"] == "Svar"
    assert "tips lookup failed" in caplog.text
