# wizards/event_data_wizard.py
"""
Generic helper for one event text field at a time. The field kind arrives in
state.field or context.field and selects an {instruction, constraints}
record from FIELD_SPECS.

start -> [analyze -> ask_clarifying] -> clarify (proposes) -> refine* -> finalize
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel

from wizards.dispatcher import DONE, FINALIZE, PROPOSE, REFINE, START, WizardBase, WizardRequest
from wizards.errors import MissingFieldError, MissingInputError
from wizards.prompts import (
    EVENT_FIELD_ANALYZE_SYSTEM,
    EVENT_FIELD_ANALYZE_USER,
    EVENT_FIELD_START_EXISTING,
    EVENT_FIELD_START_NEW,
    EVENT_FIELD_SYSTEM,
    EVENT_FIELD_USER,
    LANGUAGE_RULES,
)
from wizards.response_formatter import assistant, button, wizard_response
from wizards.validation_guard import Constraints, normalize_must_include

ANALYZE = "analyze"
ASK_CLARIFYING = "ask_clarifying"
CLARIFY = "clarify"
CANCEL = "cancel"


@dataclass(frozen=True)
class FieldSpec:
    label: str
    instruction: str
    constraints: Constraints


FIELD_SPECS: Dict[str, FieldSpec] = {
    "subtitle": FieldSpec(
        "en underrubrik",
        "Skapa en kort underrubrik som fångar eventets tema eller fokus.",
        Constraints(max_words=8),
    ),
    "target_group": FieldSpec(
        "en målgruppsbeskrivning",
        "Sammanfatta målgruppen i löpande text utifrån tre nivåer av deltagare: obligatoriska, gärna och i mån av plats.",
        Constraints(max_words=50),
    ),
    "previous_feedback": FieldSpec(
        "en sammanfattning av tidigare feedback",
        "Sammanfatta relevant deltagarfeedback från tidigare event.",
        Constraints(max_words=50),
    ),
    "purpose": FieldSpec(
        "en syftesbeskrivning",
        "Skapa en syftesbeskrivning baserad på användarens input och tidigare metadata.",
        Constraints(max_words=50),
    ),
    "audience_profile": FieldSpec(
        "en deltagarbeskrivning",
        "Skapa en deltagarbeskrivning som bygger på input och metadata.",
        Constraints(required_prefix="Deltagarna är", max_words=60),
    ),
    "program_notes": FieldSpec(
        "en programbeskrivning",
        "Skapa en objektiv beskrivning av eventet baserad på metadata.",
        Constraints(max_words=60),
    ),
    "public_description": FieldSpec(
        "en publik beskrivning",
        "Skapa en publik beskrivning som lockar deltagare och bygger på tidigare fält.",
        Constraints(max_words=80),
    ),
}

_METADATA_KEYS = ("event_name", "subtitle", "target_group", "previous_feedback", "purpose")


class ExistingTextAnalysis(BaseModel):
    needs_clarification: bool
    clarifying_question: str = ""


class EventDataWizard(WizardBase):

    name = "event_field"
    entity = "event"

    def steps(self):
        return {
            START: self.start,
            CANCEL: self.cancel,
            ANALYZE: self.analyze,
            ASK_CLARIFYING: self.ask_clarifying,
            CLARIFY: self.clarify,
            PROPOSE: self.propose,
            REFINE: self.refine,
            FINALIZE: lambda r: self.finalize(r, self._field(r)),
        }

    def validate_request(self, request: WizardRequest) -> None:
        field = request.lookup("field")
        if not field:
            raise MissingFieldError("Missing field context")
        if field not in FIELD_SPECS:
            raise MissingFieldError(f"Missing field context: unknown field '{field}'")

    def _field(self, request: WizardRequest) -> str:
        return str(request.lookup("field"))

    def _existing(self, request: WizardRequest) -> str:
        return str(request.lookup("existing_value") or "").strip()

    def _must_include(self, request: WizardRequest) -> list[str]:
        return normalize_must_include(request.state.get("must_include"))

    def _base_state(self, request: WizardRequest) -> Dict[str, Any]:
        return request.with_state(
            field=self._field(request),
            existing_value=self._existing(request),
            must_include=self._must_include(request),
        )

    # -----------------------
    # Steps
    # -----------------------

    def start(self, request: WizardRequest) -> Dict[str, Any]:
        field_spec = FIELD_SPECS[self._field(request)]
        existing = self._existing(request)
        if existing:
            text = self.unsafe_string_format(EVENT_FIELD_START_EXISTING, EXISTING=existing)
            next_step = ANALYZE
        else:
            text = self.unsafe_string_format(EVENT_FIELD_START_NEW, FIELD_LABEL=field_spec.label)
            next_step = CLARIFY
        return wizard_response(
            [assistant(text, id="field_start", buttons=[button("Ja, gärna", next_step), button("Nej tack", CANCEL)])],
            next_step,
            state=self._base_state(request),
        )

    def cancel(self, request: WizardRequest) -> Dict[str, Any]:
        return wizard_response([assistant("Okej, inget ändras.", id="field_cancel")], DONE)

    def analyze(self, request: WizardRequest) -> Dict[str, Any]:
        existing = self._existing(request)
        if not existing:
            raise MissingInputError("Missing input (existing value to analyze)")
        field_spec = FIELD_SPECS[self._field(request)]

        system = self.unsafe_string_format(EVENT_FIELD_ANALYZE_SYSTEM, FIELD_LABEL=field_spec.label)
        user = self.unsafe_string_format(EVENT_FIELD_ANALYZE_USER, EXISTING=existing)
        raw = self.llm_for("event_field_analysis").generate(system, user)
        analysis = self.parse_structured_output(raw, ExistingTextAnalysis)

        state = self._base_state(request)
        question = analysis.clarifying_question.strip()
        if analysis.needs_clarification and question:
            return wizard_response([assistant(question, id="field_clarifying")], ASK_CLARIFYING, state=state)

        return wizard_response(
            [assistant(
                "Texten ser tydlig ut. Finns det något uttryck som måste vara med i den nya versionen? "
                "Skriv det i så fall, annars kan du gå vidare direkt.",
                id="field_must_include",
            )],
            CLARIFY,
            state=state,
        )

    def ask_clarifying(self, request: WizardRequest) -> Dict[str, Any]:
        answer = request.require_input("answer to clarifying question")
        state = {**self._base_state(request), "clarification": answer}
        return self._propose(request, state, adjustment=answer, intro="Här är ett förbättrat förslag:")

    def clarify(self, request: WizardRequest) -> Dict[str, Any]:
        must = self._must_include(request)
        if request.input:
            must = normalize_must_include(must + [request.input])
        state = {**self._base_state(request), "must_include": must}
        return self._propose(request, state, adjustment=state.get("clarification"), intro="Här är ett förslag:")

    def propose(self, request: WizardRequest) -> Dict[str, Any]:
        state = self._base_state(request)
        return self._propose(request, state, adjustment=state.get("clarification"), intro="Här är ett förslag:")

    def refine(self, request: WizardRequest) -> Dict[str, Any]:
        field = self._field(request)
        if not request.input:
            return self.represent_last_proposal(request, field)
        state = self._base_state(request)
        base = str(state.get("last_proposal") or state.get("existing_value") or "")
        proposal = self._generate(request, state, base, request.input)
        return self.present_proposal("field_refined", "Uppdaterat förslag:", proposal, field, state, "Justera mer")

    # -----------------------
    # Generation
    # -----------------------

    def _propose(self, request: WizardRequest, state: Dict[str, Any], adjustment: Optional[str], intro: str):
        proposal = self._generate(request, state, str(state.get("existing_value") or ""), adjustment)
        return self.present_proposal("field_proposal", intro, proposal, state["field"], state)

    def _generate(self, request: WizardRequest, state: Dict[str, Any], base: str, adjustment: Optional[str]) -> str:
        field_spec = FIELD_SPECS[state["field"]]
        constraints = field_spec.constraints.with_must_include(state.get("must_include") or [])
        metadata = {k: self._coerce_field_to_str(request.context.get(k)) for k in _METADATA_KEYS}

        system = self.unsafe_string_format(
            EVENT_FIELD_SYSTEM,
            FIELD_INSTRUCTION=field_spec.instruction,
            LANGUAGE_RULES=LANGUAGE_RULES,
            CONSTRAINTS=constraints.describe(),
            EVENT_NAME=metadata["event_name"],
            SUBTITLE=metadata["subtitle"],
            TARGET_GROUP=metadata["target_group"],
            PREVIOUS_FEEDBACK=metadata["previous_feedback"],
            PURPOSE=metadata["purpose"],
        )
        user = self.unsafe_string_format(
            EVENT_FIELD_USER,
            BASE=base or "(tom)",
            ADJUSTMENT=adjustment or "Ingen särskild instruktion.",
        )
        return self.generate_proposal("event_field", system, user, constraints)
