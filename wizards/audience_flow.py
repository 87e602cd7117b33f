# wizards/audience_flow.py
from typing import Any, Dict

from wizards.dispatcher import FINALIZE, NEW, PROPOSE, REFINE, START, WizardBase, WizardRequest
from wizards.errors import MissingInputError
from wizards.prompts import (
    AUDIENCE_EXISTING,
    AUDIENCE_Q_ARCHETYPE,
    AUDIENCE_Q_WHO,
    AUDIENCE_SYSTEM,
    AUDIENCE_USER,
    HOPA_PRIMER,
    LANGUAGE_RULES,
)
from wizards.validation_guard import Constraints

FIELD = "audience_profile"
WHO = "who"
ARCHETYPE = "archetype"

AUDIENCE_CONSTRAINTS = Constraints(required_prefix="Deltagarna är", max_words=60)


class AudienceFlow(WizardBase):
    """start -> who -> archetype (proposes) -> refine* -> finalize"""

    name = "audience"
    entity = "event"
    step_aliases = {"0": START, "1": WHO, "2": ARCHETYPE, "refine_existing": REFINE}

    def steps(self):
        return {
            START: self.start,
            NEW: self.new,
            WHO: self.who,
            ARCHETYPE: self.archetype,
            PROPOSE: self.propose,
            REFINE: self.refine,
            FINALIZE: lambda r: self.finalize(r, FIELD),
        }

    def _existing(self, request: WizardRequest) -> str:
        if not request.context.get("has_audience"):
            return ""
        # older clients send existing_audience next to step/input
        existing = (
            request.context.get("existing_audience")
            or request.context.get("existing_value")
            or request.body.get("existing_audience")
            or ""
        )
        return str(existing).strip()

    def start(self, request: WizardRequest) -> Dict[str, Any]:
        existing = self._existing(request)
        if existing:
            text = self.unsafe_string_format(AUDIENCE_EXISTING, EXISTING=existing)
            return self.offer_refine_or_new("audience_existing", text, existing, request.state)
        return self.new(request)

    def new(self, request: WizardRequest) -> Dict[str, Any]:
        return self.question("audience_q1", AUDIENCE_Q_WHO, WHO, {})

    def who(self, request: WizardRequest) -> Dict[str, Any]:
        answer = request.require_input("who + needs")
        return self.question("audience_q2", AUDIENCE_Q_ARCHETYPE, ARCHETYPE, request.with_state(who=answer))

    def archetype(self, request: WizardRequest) -> Dict[str, Any]:
        answer = request.require_input("archetype")
        return self._propose(request.with_state(archetype=answer))

    def propose(self, request: WizardRequest) -> Dict[str, Any]:
        return self._propose(request.state)

    def _propose(self, state: Dict[str, Any]) -> Dict[str, Any]:
        for key in (WHO, ARCHETYPE):
            if not str(state.get(key) or "").strip():
                raise MissingInputError(f"Missing input ({key})")

        system = self.unsafe_string_format(
            AUDIENCE_SYSTEM,
            HOPA=HOPA_PRIMER,
            LANGUAGE_RULES=LANGUAGE_RULES,
            CONSTRAINTS=AUDIENCE_CONSTRAINTS.describe(),
        )
        user = self.unsafe_string_format(AUDIENCE_USER, WHO=state[WHO], ARCHETYPE=state[ARCHETYPE])
        proposal = self.generate_proposal("audience", system, user, AUDIENCE_CONSTRAINTS)
        return self.present_proposal("audience_final", "Jag föreslår denna deltagarbeskrivning:", proposal, FIELD, state)

    def refine(self, request: WizardRequest) -> Dict[str, Any]:
        return self.refine_proposal(
            request, "audience", FIELD, "deltagarbeskrivning", AUDIENCE_CONSTRAINTS,
            fallback_base=self._existing(request),
        )
