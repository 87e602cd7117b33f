# wizards/frame_tools.py
"""
One-shot frame endpoints: a full frame proposal for an event (frame_generator)
and structured improvement suggestions for an existing frame (frame_helper).
"""
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from wizards.dispatcher import DONE
from wizards.errors import MissingFieldError
from wizards.frame_flow import FRAME_CONSTRAINTS, bento_block
from wizards.llm_client import LlmFactory
from wizards.prompts import (
    FRAME_CONTENT_SYSTEM,
    FRAME_CONTENT_USER,
    FRAME_HELPER_SYSTEM,
    FRAME_HELPER_USER,
    LANGUAGE_RULES,
)
from wizards.response_formatter import assistant, wizard_response
from wizards.utils import Utils
from wizards.validation_guard import generate_with_guard

logger = logging.getLogger("ollo_backend")

MAX_STEP_MINUTES = 20
DEFAULT_FRAME_PURPOSE = "Skapa en programpunkt som stödjer eventets syfte."


class FrameStep(BaseModel):
    label: str
    duration: int = Field(ge=1, le=MAX_STEP_MINUTES)


class FrameSuggestions(BaseModel):
    reflection_suggestion: str = Field(min_length=1)
    interaction_suggestion: str = Field(min_length=1)
    steps: List[FrameStep] = Field(min_length=1)
    nfi_index: int = Field(ge=1, le=5)
    engagement_level: int = Field(ge=1, le=5)


class FrameGenerator(Utils):

    def __init__(self, llm_for: LlmFactory, store=None):
        self.llm_for = llm_for
        self.store = store

    def handle(self, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        body = body or {}
        event_id = str(body.get("event_id") or "").strip()
        if not event_id:
            raise MissingFieldError("Missing event_id")
        bento_id = str(body.get("bento_id") or "").strip()
        frame_purpose = str(body.get("frame_purpose") or "").strip() or DEFAULT_FRAME_PURPOSE

        event = self.store.get_event_context(event_id)
        bento = self.store.get_bento(bento_id) if bento_id else None

        system = self.unsafe_string_format(FRAME_CONTENT_SYSTEM, LANGUAGE_RULES=LANGUAGE_RULES)
        user = self.unsafe_string_format(
            FRAME_CONTENT_USER,
            EVENT_PURPOSE=event["purpose"] or "Ej angivet",
            AUDIENCE_PROFILE=event["audience_profile"] or "Ej angiven",
            PROGRAM_NOTES=event["program_notes"] or "—",
            FRAME_PURPOSE=frame_purpose,
            BENTO_BLOCK=bento_block(self, bento),
        )
        llm = self.llm_for("frame_generator")
        output = generate_with_guard(
            lambda note: llm.generate(system if not note else f"{system}\n\n{note}", user),
            FRAME_CONSTRAINTS,
        )
        logger.info("[frame_generator] event=%s bento=%s chars=%d", event_id, bento_id or "-", len(output))
        return wizard_response(
            [assistant(output, id="frame_generated", value=output)],
            DONE,
            data={"frame_proposal_raw": output},
        )


class FrameHelper(Utils):

    def __init__(self, llm_for: LlmFactory, store=None):
        self.llm_for = llm_for
        self.store = store

    def handle(self, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        body = body or {}
        frame_id = str(body.get("frame_id") or "").strip()
        if not frame_id:
            raise MissingFieldError("Missing frame_id")
        context = body.get("context") if isinstance(body.get("context"), dict) else {}
        existing = body.get("existing_data") if isinstance(body.get("existing_data"), dict) else {}

        user = self.unsafe_string_format(
            FRAME_HELPER_USER,
            PURPOSE=self._coerce_field_to_str(context.get("purpose")) or "Ej angivet",
            AUDIENCE=self._coerce_field_to_str(context.get("audience")) or "Ej angiven",
            THEME=self._coerce_field_to_str(context.get("theme")) or "Ej angivet",
            EXISTING_DATA=json.dumps(existing, ensure_ascii=False),
        )
        raw = self.llm_for("frame_helper").generate(FRAME_HELPER_SYSTEM, user)
        suggestions = self.parse_structured_output(raw, FrameSuggestions)
        return {"ok": True, "frame_id": frame_id, "suggestions": suggestions.model_dump()}
