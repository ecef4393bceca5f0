"""Closed value domains for rounds, phases, statuses and decisions."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any

from ..errors import ValidationError


class ApplicationStatus(str, Enum):
    """Pipeline state of an application."""

    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    ROUND_3 = "ROUND_3"
    ROUND_4 = "ROUND_4"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WAITLISTED = "WAITLISTED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED, ApplicationStatus.WAITLISTED}
)


class Round(IntEnum):
    """Ordered evaluation stages of a recruiting cycle."""

    RESUME = 1
    COFFEE_CHAT = 2
    FIRST_ROUND = 3
    FINAL_ROUND = 4

    @property
    def label(self) -> str:
        return _ROUND_LABELS[self]

    @property
    def phase(self) -> "Phase":
        return _ROUND_TO_PHASE[self]

    @property
    def is_final(self) -> bool:
        return self is Round.FINAL_ROUND

    def next(self) -> "Round | None":
        if self.is_final:
            return None
        return Round(self.value + 1)


_ROUND_LABELS = {
    Round.RESUME: "Resume Review",
    Round.COFFEE_CHAT: "Coffee Chat",
    Round.FIRST_ROUND: "First Round",
    Round.FINAL_ROUND: "Final Round",
}


class Phase(str, Enum):
    """Decision-store key for a round."""

    RESUME = "resume"
    COFFEE = "coffee"
    FIRST_ROUND = "first_round"
    FINAL_ROUND = "final_round"

    @property
    def round(self) -> Round:
        return _PHASE_TO_ROUND[self]

    @classmethod
    def parse(cls, value: Any) -> "Phase":
        if isinstance(value, Phase):
            return value
        if isinstance(value, Round):
            return value.phase
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(p.value for p in cls)
            raise ValidationError(f"Unknown phase {value!r}; expected one of: {allowed}") from exc


_PHASE_TO_ROUND = {
    Phase.RESUME: Round.RESUME,
    Phase.COFFEE: Round.COFFEE_CHAT,
    Phase.FIRST_ROUND: Round.FIRST_ROUND,
    Phase.FINAL_ROUND: Round.FINAL_ROUND,
}
_ROUND_TO_PHASE = {round_: phase for phase, round_ in _PHASE_TO_ROUND.items()}


class Decision(str, Enum):
    """Admin decision for one application within one phase."""

    YES = "yes"
    MAYBE_YES = "maybe_yes"
    MAYBE_NO = "maybe_no"
    NO = "no"
    PENDING = ""

    @property
    def is_resolved(self) -> bool:
        return self in (Decision.YES, Decision.NO)

    @classmethod
    def parse(cls, value: Any) -> "Decision":
        if isinstance(value, Decision):
            return value
        if value is None:
            return cls.PENDING
        if not isinstance(value, str):
            raise ValidationError(f"Decision must be a string, got {type(value).__name__}")
        try:
            return cls(value)
        except ValueError as exc:
            allowed = ", ".join(repr(d.value) for d in cls)
            raise ValidationError(f"Invalid decision {value!r}; expected one of: {allowed}") from exc


class EvaluationDecision(str, Enum):
    """Interviewer recommendation recorded on an interview evaluation."""

    YES = "YES"
    MAYBE_YES = "MAYBE_YES"
    UNSURE = "UNSURE"
    MAYBE_NO = "MAYBE_NO"
    NO = "NO"


class InterviewType(str, Enum):
    COFFEE_CHAT = "COFFEE_CHAT"
    ROUND_ONE = "ROUND_ONE"
    ROUND_TWO = "ROUND_TWO"


class DocumentType(str, Enum):
    RESUME = "resume"
    COVER_LETTER = "cover_letter"
    VIDEO = "video"


__all__ = [
    "ApplicationStatus",
    "Decision",
    "DocumentType",
    "EvaluationDecision",
    "InterviewType",
    "Phase",
    "Round",
]
