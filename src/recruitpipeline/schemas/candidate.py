from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .rounds import ApplicationStatus, Round


class Application(BaseModel):
    """One submission within one recruiting cycle."""

    application_id: str
    candidate_id: str
    cycle_id: str | None = None
    current_round: Round = Round.RESUME
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    name: str | None = None
    email: str | None = None
    graduation_year: int | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="allow")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class Candidate(BaseModel):
    """Stable candidate identity owning zero or more applications."""

    candidate_id: str
    student_id: str | None = None
    name: str | None = None
    email: str | None = None
    application_ids: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class EventAttendance(BaseModel):
    """Point contribution from attending a recruiting event."""

    application_id: str
    event_id: str
    attended: bool = True
    points: float = 1.0

    model_config = ConfigDict(extra="forbid")
