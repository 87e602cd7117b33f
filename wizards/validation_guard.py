# wizards/validation_guard.py
"""
Declarative checks on generated text plus the single corrective retry.

A proposal is checked against a Constraints record. When it fails, the
generation is reissued once with a correction note appended to the
instruction; whatever the second attempt returns is accepted (a warning is
logged if it still breaks a constraint).
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from wizards.errors import ValidationFailure

logger = logging.getLogger("ollo_backend")

# Phrases the product language rules ban in every generated text.
DEFAULT_FORBIDDEN_PATTERN = r"\b(allow|tända motivationen|synergi(?:er)?)\b"


def normalize_must_include(phrases: Optional[Iterable[str]]) -> list[str]:
    """Trim, drop empties and de-duplicate while keeping first-seen order."""
    seen: list[str] = []
    for p in phrases or []:
        if not isinstance(p, str):
            continue
        p = p.strip()
        if p and p not in seen:
            seen.append(p)
    return seen


def count_words(text: str) -> int:
    return len(text.split())


@dataclass(frozen=True)
class Constraints:
    must_include: tuple[str, ...] = ()
    required_prefix: Optional[str] = None
    forbidden_pattern: Optional[str] = DEFAULT_FORBIDDEN_PATTERN
    min_words: Optional[int] = None
    max_words: Optional[int] = None

    def with_must_include(self, phrases: Iterable[str]) -> "Constraints":
        merged = normalize_must_include(list(self.must_include) + list(phrases or []))
        return Constraints(
            must_include=tuple(merged),
            required_prefix=self.required_prefix,
            forbidden_pattern=self.forbidden_pattern,
            min_words=self.min_words,
            max_words=self.max_words,
        )

    def describe(self) -> str:
        """Constraint summary for the system instruction."""
        lines = []
        if self.must_include:
            lines.append("Följande uttryck MÅSTE finnas med exakt (stavning, versaler och ordning):")
            lines.extend(f"- {p}" for p in self.must_include)
        if self.required_prefix:
            lines.append(f"Texten ska börja med: \"{self.required_prefix}\"")
        if self.max_words:
            lines.append(f"Max {self.max_words} ord.")
        if self.min_words:
            lines.append(f"Minst {self.min_words} ord.")
        return "\n".join(lines)


@dataclass
class Verdict:
    passed: bool
    violations: list[str] = field(default_factory=list)

    @property
    def note(self) -> str:
        if self.passed:
            return ""
        return "FÖREGÅENDE FÖRSLAG UNDERKÄNDES:\n" + "\n".join(f"- {v}" for v in self.violations) + "\nFÖRSÖK IGEN."


def check(text: str, constraints: Constraints) -> Verdict:
    violations: list[str] = []
    text = (text or "").strip()

    if not text:
        return Verdict(False, ["Svaret var tomt."])

    for phrase in constraints.must_include:
        if phrase not in text:
            violations.append(f"Obligatoriskt uttryck saknas: \"{phrase}\"")

    if constraints.required_prefix and not text.startswith(constraints.required_prefix):
        violations.append(f"Texten måste börja med \"{constraints.required_prefix}\"")

    if constraints.forbidden_pattern:
        found = re.findall(constraints.forbidden_pattern, text, flags=re.IGNORECASE)
        if found:
            terms = sorted({f if isinstance(f, str) else f[0] for f in found})
            violations.append(f"Förbjudna ord används: {', '.join(terms)}")

    words = count_words(text)
    if constraints.max_words is not None and words > constraints.max_words:
        violations.append(f"Texten har {words} ord, max är {constraints.max_words}")
    if constraints.min_words is not None and words < constraints.min_words:
        violations.append(f"Texten har {words} ord, minst {constraints.min_words} krävs")

    return Verdict(not violations, violations)


def enforce(text: str, constraints: Constraints) -> str:
    verdict = check(text, constraints)
    if not verdict.passed:
        raise ValidationFailure(verdict.violations)
    return text.strip()


def generate_with_guard(
    generate: Callable[[Optional[str]], str],
    constraints: Constraints,
) -> str:
    """
    generate(correction_note) -> text. The first call gets None; a failing
    result triggers exactly one more call carrying the correction note.
    Transport errors raised by generate() propagate untouched.
    """
    text = generate(None)
    try:
        return enforce(text, constraints)
    except ValidationFailure as first:
        logger.warning("[guard] proposal rejected (%s), retrying once", first)
        text = generate(Verdict(False, first.violations).note)

    verdict = check(text, constraints)
    if not verdict.passed:
        logger.warning("[guard] accepting retry that still breaks constraints: %s", "; ".join(verdict.violations))
    return (text or "").strip()
