# wizards/frame_flow.py
"""
Program item ("frame") wizard backed by the bento library.

start -> suggest_bentos -> choose_or_custom (generates) -> refine* -> finalize
generate_content can also be called directly once frame_purpose is in state.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from wizards.dispatcher import FINALIZE, REFINE, START, WizardBase, WizardRequest
from wizards.errors import MissingFieldError, MissingInputError, RecordNotFoundError
from wizards.prompts import (
    BENTO_BLOCK,
    BENTO_RANKING_SYSTEM,
    BENTO_RANKING_USER,
    FRAME_CONTENT_SYSTEM,
    FRAME_CONTENT_USER,
    FRAME_Q_PURPOSE,
    FRAME_REFINE_USER,
    FRAME_SECTION_LABELS,
    LANGUAGE_RULES,
    NO_BENTO_BLOCK,
)
from wizards.response_formatter import assistant, button, wizard_response
from wizards.validation_guard import Constraints

FIELD = "frame_proposal_raw"
SUGGEST_BENTOS = "suggest_bentos"
CHOOSE_OR_CUSTOM = "choose_or_custom"
GENERATE_CONTENT = "generate_content"

MAX_SUGGESTIONS = 5
CUSTOM_CHOICES = {"", "custom", "egen", "skapa egen"}

FRAME_CONSTRAINTS = Constraints(must_include=FRAME_SECTION_LABELS)


class BentoPick(BaseModel):
    id: str
    motivation: str = ""


def bento_block(prompt_util, bento: Optional[Dict[str, Any]]) -> str:
    if not bento:
        return NO_BENTO_BLOCK
    return prompt_util.unsafe_string_format(
        BENTO_BLOCK,
        NAME=bento.get("name") or "",
        DESCRIPTION=bento.get("description") or "",
        CATEGORY=bento.get("category") or "",
        TYPE=bento.get("type") or "",
    )


def _bento_line(b: Dict[str, Any]) -> str:
    profiles = b.get("hopa_profiles") or []
    if not isinstance(profiles, list):
        profiles = [str(profiles)]
    profiles = ", ".join(str(p) for p in profiles)
    return (
        f"- [{b['id']}] {b['name']} ({b.get('purpose_category') or '-'}, HOPA: {profiles or '-'}, "
        f"ENG: {b.get('eng_level') or '-'}, NFI: {b.get('nfi_index') or '-'}) – {b.get('short_description') or ''}"
    )


class FrameFlow(WizardBase):

    name = "frame"
    entity = "frame"

    def steps(self):
        return {
            START: self.start,
            SUGGEST_BENTOS: self.suggest_bentos,
            CHOOSE_OR_CUSTOM: self.choose_or_custom,
            GENERATE_CONTENT: self.generate_content,
            REFINE: self.refine,
            FINALIZE: lambda r: self.finalize(r, FIELD),
        }

    def _event_id(self, request: WizardRequest) -> str:
        event_id = request.lookup("event_id")
        if not event_id:
            raise MissingFieldError("Missing field context: event_id")
        return str(event_id)

    def _frame_purpose(self, request: WizardRequest) -> str:
        purpose = str(request.state.get("frame_purpose") or "").strip()
        if not purpose:
            raise MissingInputError("Missing input (frame purpose)")
        return purpose

    # -----------------------
    # Steps
    # -----------------------

    def start(self, request: WizardRequest) -> Dict[str, Any]:
        return self.question("frame_purpose", FRAME_Q_PURPOSE, SUGGEST_BENTOS, request.state)

    def suggest_bentos(self, request: WizardRequest) -> Dict[str, Any]:
        frame_purpose = request.require_input("frame purpose")
        event_id = self._event_id(request)

        event = self.store.get_event_context(event_id)
        candidates = self.store.fetch_candidate_bentos()
        suggested = self._rank_bentos(candidates, frame_purpose, event) if candidates else []

        state = request.with_state(
            event_id=event_id,
            frame_purpose=frame_purpose,
            suggested_bento_ids=[b["id"] for b in suggested],
        )
        if not suggested:
            return wizard_response(
                [assistant(
                    "Jag hittade inga bentos som passar. Vill du att jag skapar en egen aktivitet?",
                    id="frame_no_bentos",
                    buttons=[button("Skapa egen", CHOOSE_OR_CUSTOM)],
                )],
                CHOOSE_OR_CUSTOM,
                state=state,
            )

        options = [{**b, "action": CHOOSE_OR_CUSTOM, "value": b["id"]} for b in suggested]
        return wizard_response(
            [
                assistant("Här är några bentos som passar bra för den här programpunkten:", id="frame_bentos", options=options),
                assistant(
                    "Vill du använda någon av dessa, eller skapa en egen aktivitet?",
                    buttons=[button("Skapa egen", CHOOSE_OR_CUSTOM)],
                ),
            ],
            CHOOSE_OR_CUSTOM,
            state=state,
            data={"bentos": suggested},
        )

    def choose_or_custom(self, request: WizardRequest) -> Dict[str, Any]:
        event_id = self._event_id(request)
        frame_purpose = self._frame_purpose(request)

        choice = request.input
        bento = None if choice.lower() in CUSTOM_CHOICES else self._resolve_bento(choice)
        state = request.with_state(
            event_id=event_id,
            frame_purpose=frame_purpose,
            selected_bento_id=bento["id"] if bento else None,
        )
        return self._generate_first(event_id, frame_purpose, bento, state)

    def generate_content(self, request: WizardRequest) -> Dict[str, Any]:
        event_id = self._event_id(request)
        frame_purpose = self._frame_purpose(request)
        selected = request.state.get("selected_bento_id")
        bento = self.store.get_bento(selected) if selected else None
        return self._generate_first(event_id, frame_purpose, bento, request.with_state(event_id=event_id))

    def refine(self, request: WizardRequest) -> Dict[str, Any]:
        if not request.input:
            return self.represent_last_proposal(request, FIELD)
        event_id = self._event_id(request)
        frame_purpose = self._frame_purpose(request)
        base = str(request.state.get("last_proposal") or "").strip()
        if not base:
            raise MissingInputError("Missing input or state for refinement")

        event = self.store.get_event_context(event_id)
        user = self.unsafe_string_format(
            FRAME_REFINE_USER,
            ADJUSTMENT=request.input,
            BASE=base,
            EVENT_PURPOSE=event["purpose"] or "Ej angivet",
            AUDIENCE_PROFILE=event["audience_profile"] or "Ej angiven",
            FRAME_PURPOSE=frame_purpose,
        )
        proposal = self._generate_frame(user)
        return self.present_proposal("frame_refined", "Uppdaterat förslag:", proposal, FIELD, request.state, "Justera mer")

    # -----------------------
    # Helpers
    # -----------------------

    def _resolve_bento(self, choice: str) -> Dict[str, Any]:
        try:
            return self.store.get_bento(choice)
        except RecordNotFoundError:
            matches = self.store.search_bentos(choice)
            if len(matches) != 1:
                raise
            return self.store.get_bento(matches[0]["id"])

    def _rank_bentos(self, candidates: List[Dict[str, Any]], frame_purpose: str, event: Dict[str, str]) -> List[Dict[str, Any]]:
        user = self.unsafe_string_format(
            BENTO_RANKING_USER,
            FRAME_PURPOSE=frame_purpose,
            EVENT_PURPOSE=event["purpose"] or "Ej angivet",
            AUDIENCE_PROFILE=event["audience_profile"] or "Ej angiven",
            BENTO_LINES="\n".join(_bento_line(b) for b in candidates),
        )
        raw = self.llm_for("bento_ranking").generate(BENTO_RANKING_SYSTEM, user)
        picks = self.parse_structured_output(raw, List[BentoPick])

        by_id = {str(b["id"]): b for b in candidates}
        suggested: List[Dict[str, Any]] = []
        for pick in picks:
            b = by_id.pop(pick.id, None)
            if b is None:
                continue
            suggested.append({**b, "motivation": pick.motivation})
            if len(suggested) == MAX_SUGGESTIONS:
                break
        return suggested

    def _generate_first(self, event_id: str, frame_purpose: str, bento: Optional[Dict[str, Any]], state: Dict[str, Any]):
        event = self.store.get_event_context(event_id)
        user = self.unsafe_string_format(
            FRAME_CONTENT_USER,
            EVENT_PURPOSE=event["purpose"] or "Ej angivet",
            AUDIENCE_PROFILE=event["audience_profile"] or "Ej angiven",
            PROGRAM_NOTES=event["program_notes"] or "—",
            FRAME_PURPOSE=frame_purpose,
            BENTO_BLOCK=bento_block(self, bento),
        )
        proposal = self._generate_frame(user)
        return self.present_proposal("frame_proposal", "Här är ett första förslag:", proposal, FIELD, state)

    def _generate_frame(self, user: str) -> str:
        system = self.unsafe_string_format(FRAME_CONTENT_SYSTEM, LANGUAGE_RULES=LANGUAGE_RULES)
        return self.generate_proposal("frame_content", system, user, FRAME_CONSTRAINTS)
