# wizards/purpose_flow.py
from typing import Any, Dict

from wizards.dispatcher import FINALIZE, NEW, PROPOSE, REFINE, START, WizardBase, WizardRequest
from wizards.errors import MissingInputError
from wizards.prompts import (
    HOPA_PRIMER,
    LANGUAGE_RULES,
    PURPOSE_EXISTING,
    PURPOSE_Q_WHY1,
    PURPOSE_Q_WHY2,
    PURPOSE_SYSTEM,
    PURPOSE_USER,
)
from wizards.validation_guard import Constraints

FIELD = "purpose"
WHY1 = "why1"
WHY2 = "why2"

PURPOSE_CONSTRAINTS = Constraints(max_words=50)


class PurposeFlow(WizardBase):
    """start -> why1 -> why2 (proposes) -> refine* -> finalize"""

    name = "purpose"
    entity = "event"
    step_aliases = {"0": START, "1": WHY1, "2": WHY2, "refine_existing": REFINE}

    def steps(self):
        return {
            START: self.start,
            NEW: self.new,
            WHY1: self.why1,
            WHY2: self.why2,
            PROPOSE: self.propose,
            REFINE: self.refine,
            FINALIZE: lambda r: self.finalize(r, FIELD),
        }

    def _existing(self, request: WizardRequest) -> str:
        if not request.context.get("has_purpose"):
            return ""
        existing = request.context.get("existing_purpose") or request.context.get("existing_value") or ""
        return str(existing).strip()

    def start(self, request: WizardRequest) -> Dict[str, Any]:
        existing = self._existing(request)
        if existing:
            text = self.unsafe_string_format(PURPOSE_EXISTING, EXISTING=existing)
            return self.offer_refine_or_new("purpose_refine_intro", text, existing, request.state)
        return self.new(request)

    def new(self, request: WizardRequest) -> Dict[str, Any]:
        return self.question("pq1", PURPOSE_Q_WHY1, WHY1, {})

    def why1(self, request: WizardRequest) -> Dict[str, Any]:
        answer = request.require_input("why1")
        return self.question("pq2", PURPOSE_Q_WHY2, WHY2, request.with_state(why1=answer))

    def why2(self, request: WizardRequest) -> Dict[str, Any]:
        answer = request.require_input("why2")
        return self._propose(request.with_state(why2=answer))

    def propose(self, request: WizardRequest) -> Dict[str, Any]:
        return self._propose(request.state)

    def _propose(self, state: Dict[str, Any]) -> Dict[str, Any]:
        for key in (WHY1, WHY2):
            if not str(state.get(key) or "").strip():
                raise MissingInputError(f"Missing input ({key})")

        system = self.unsafe_string_format(
            PURPOSE_SYSTEM,
            HOPA=HOPA_PRIMER,
            LANGUAGE_RULES=LANGUAGE_RULES,
            CONSTRAINTS=PURPOSE_CONSTRAINTS.describe(),
        )
        user = self.unsafe_string_format(PURPOSE_USER, WHY1=state[WHY1], WHY2=state[WHY2])
        proposal = self.generate_proposal("purpose", system, user, PURPOSE_CONSTRAINTS)
        return self.present_proposal("purpose_final", "Då föreslår jag detta syfte:", proposal, FIELD, state)

    def refine(self, request: WizardRequest) -> Dict[str, Any]:
        # older clients seed refine_existing with the saved purpose as state.why1
        fallback = request.state.get(WHY1) or self._existing(request)
        return self.refine_proposal(
            request, "purpose", FIELD, "syftesbeskrivning", PURPOSE_CONSTRAINTS, fallback_base=fallback
        )
