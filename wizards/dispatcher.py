# wizards/dispatcher.py
"""
Stateless, client-driven wizard machinery.

Every call carries (step, input, state, context). A wizard maps the step name
to a handler that validates what the step needs, merges new answers into a
copy of the state and returns the next step. Nothing is kept server-side.

Generic progression:

    start -> <question steps> -> propose -> refine (self-loop) -> finalize -> done
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from wizards.errors import InvalidStepError, MissingInputError
from wizards.llm_client import LlmFactory
from wizards.prompts import LANGUAGE_RULES, REFINE_SYSTEM, REFINE_USER
from wizards.response_formatter import assistant, button, save_action, wizard_response
from wizards.utils import Utils
from wizards.validation_guard import Constraints, generate_with_guard

logger = logging.getLogger("ollo_backend")

START = "start"
NEW = "new"
PROPOSE = "propose"
REFINE = "refine"
FINALIZE = "finalize"
DONE = "done"


def _clean_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True)
class WizardRequest:
    step: str
    input: str = ""
    state: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_body(cls, body: Optional[Dict[str, Any]], aliases: Optional[Dict[str, str]] = None) -> "WizardRequest":
        body = body or {}
        raw_step = body.get("step")
        step = START if raw_step is None or raw_step == "" else str(raw_step).strip()
        step = (aliases or {}).get(step, step)
        state = body.get("state") if isinstance(body.get("state"), dict) else {}
        context = body.get("context") if isinstance(body.get("context"), dict) else {}
        return cls(
            step=step,
            input=_clean_text(body.get("input")),
            state=dict(state),
            context=dict(context),
            body=body,
        )

    def require_input(self, what: str) -> str:
        if not self.input:
            raise MissingInputError(f"Missing input ({what})")
        return self.input

    def lookup(self, key: str, default=None):
        """State wins over context; empty strings count as absent."""
        for bag in (self.state, self.context):
            value = bag.get(key)
            if value not in (None, ""):
                return value
        return default

    def with_state(self, **updates) -> Dict[str, Any]:
        return {**self.state, **updates}


StepHandler = Callable[[WizardRequest], Dict[str, Any]]


class WizardBase(Utils):
    """
    Subclasses declare `name`, `entity`, optional `step_aliases` and implement
    steps() returning the step-name -> handler table.
    """

    name = "wizard"
    entity = "event"
    step_aliases: Dict[str, str] = {}

    def __init__(self, llm_for: LlmFactory, store=None):
        self.llm_for = llm_for
        self.store = store

    def steps(self) -> Dict[str, StepHandler]:
        raise NotImplementedError

    def handle(self, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        request = WizardRequest.from_body(body, self.step_aliases)
        self.validate_request(request)
        handler = self.steps().get(request.step)
        if handler is None:
            raise InvalidStepError(f"Invalid step: {request.step}")
        logger.info("[%s] step=%s input=%s", self.name, request.step, bool(request.input))
        return handler(request)

    def validate_request(self, request: WizardRequest) -> None:
        """Hook for checks that apply to every step (e.g. field context)."""

    # -----------------------
    # Generation
    # -----------------------

    def generate_proposal(self, purpose: str, system: str, user: str, constraints: Constraints) -> str:
        """
        One guarded generation: at most two provider calls, the second only
        when the first breaks a constraint.
        """
        llm = self.llm_for(purpose)

        def attempt(correction_note: Optional[str]) -> str:
            instruction = system if not correction_note else f"{system}\n\n{correction_note}"
            return llm.generate(instruction, user)

        return generate_with_guard(attempt, constraints)

    # -----------------------
    # Shared step shapes
    # -----------------------

    def question(self, qid: str, text: str, next_step: str, state: Dict[str, Any]) -> Dict[str, Any]:
        return wizard_response([assistant(text, id=qid)], next_step, state=state)

    def offer_refine_or_new(self, qid: str, text: str, existing: str, state: Dict[str, Any]) -> Dict[str, Any]:
        return wizard_response(
            [assistant(text, id=qid, buttons=[button("Förbättra", REFINE), button("Skapa nytt", NEW)])],
            REFINE,
            state={**state, "existing_value": existing, "last_proposal": existing},
        )

    def present_proposal(
        self,
        qid: str,
        intro: str,
        proposal: str,
        field_name: str,
        state: Dict[str, Any],
        refine_label: str = "Justera",
    ) -> Dict[str, Any]:
        return wizard_response(
            [
                assistant(f"{intro}\n\n{proposal}", id=qid, value=proposal),
                assistant(buttons=[button(refine_label, REFINE), button("Spara", FINALIZE)]),
            ],
            REFINE,
            state={**state, "last_proposal": proposal},
            data={"field": field_name, "candidate": proposal},
        )

    def represent_last_proposal(self, request: WizardRequest, field_name: str) -> Dict[str, Any]:
        """refine without an adjustment: show the last proposal again, no generation."""
        last = _clean_text(request.state.get("last_proposal"))
        if not last:
            raise MissingInputError("Missing input (requested change)")
        return self.present_proposal(f"{self.name}_refined", "Nuvarande förslag:", last, field_name, request.state, "Justera mer")

    def finalize(self, request: WizardRequest, field_name: str) -> Dict[str, Any]:
        value = request.input or _clean_text(request.state.get("last_proposal"))
        if not value:
            raise MissingInputError("Missing input (value to save)")
        return wizard_response(
            [assistant("Klart! Texten sparas.", id=f"{self.name}_saved")],
            DONE,
            actions=[save_action(self.entity, field_name, value)],
        )

    def refine_proposal(
        self,
        request: WizardRequest,
        purpose: str,
        field_name: str,
        field_label: str,
        constraints: Constraints,
        fallback_base: str = "",
    ) -> Dict[str, Any]:
        """
        fallback_base is the flow's own notion of the saved text, used when
        neither last_proposal nor existing_value came back with the request.
        """
        if not request.input:
            return self.represent_last_proposal(request, field_name)

        base = (
            _clean_text(request.state.get("last_proposal"))
            or _clean_text(request.lookup("existing_value"))
            or _clean_text(fallback_base)
        )
        if not base:
            raise MissingInputError("Missing input or state for refinement")

        system = self.unsafe_string_format(
            REFINE_SYSTEM,
            FIELD_LABEL=field_label,
            LANGUAGE_RULES=LANGUAGE_RULES,
            CONSTRAINTS=constraints.describe(),
        )
        user = self.unsafe_string_format(REFINE_USER, BASE=base, ADJUSTMENT=request.input)
        proposal = self.generate_proposal(purpose, system, user, constraints)
        return self.present_proposal(
            f"{self.name}_refined",
            "Här är ett uppdaterat förslag:",
            proposal,
            field_name,
            request.state,
            "Justera mer",
        )
