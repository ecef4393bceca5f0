"""Error taxonomy shared by the pipeline services."""

from __future__ import annotations

from typing import Any, Sequence


class PipelineError(Exception):
    """Base class for recruitment pipeline failures."""


class ValidationError(PipelineError, ValueError):
    """Raised when a value is rejected locally before any store call."""


class PreconditionFailure(PipelineError):
    """Raised when bulk advancement is requested for an unresolved cohort."""

    def __init__(self, phase: Any, invalid: Sequence[Any]):
        self.phase = phase
        self.invalid = list(invalid)
        phase_name = getattr(phase, "value", phase)
        super().__init__(
            f"{len(self.invalid)} application(s) are not resolved to yes/no for phase {phase_name}"
        )

    @property
    def invalid_ids(self) -> list[str]:
        return [getattr(app, "application_id", str(app)) for app in self.invalid]


class NetworkError(PipelineError):
    """Raised when a store or notifier call fails in transit."""


class NotFoundError(PipelineError, KeyError):
    """Raised when a candidate, application or score id no longer exists."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key!r} not found")

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.args[0]


__all__ = [
    "PipelineError",
    "ValidationError",
    "PreconditionFailure",
    "NetworkError",
    "NotFoundError",
]
