from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .rounds import DocumentType, EvaluationDecision, InterviewType

SCORE_MIN = 0.0
SCORE_MAX = 10.0
SUBSCORE_MAX = 5


class DocumentScore(BaseModel):
    """Evaluator grade for a resume, cover letter or video."""

    score_id: str
    candidate_id: str
    evaluator_id: str | None = None
    document_type: DocumentType = DocumentType.RESUME
    cycle_id: str | None = None
    overall_score: float | None = None
    score_one: float | None = None
    score_two: float | None = None
    score_three: float | None = None
    admin_score: float | None = None
    admin_notes: str | None = None
    notes: str | None = None
    status: str = "completed"
    created_at: datetime | None = None

    model_config = ConfigDict(extra="allow")

    @property
    def effective_score(self) -> float:
        if self.admin_score is not None:
            return self.admin_score
        return self.overall_score if self.overall_score is not None else 0.0


class ScorePatch(BaseModel):
    """Partial update applied to a document score."""

    overall_score: float | None = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    score_one: float | None = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    score_two: float | None = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    score_three: float | None = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    admin_score: float | None = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    admin_notes: str | None = None
    notes: str | None = None

    model_config = ConfigDict(extra="forbid")

    def changes(self) -> dict[str, object]:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class InterviewEvaluation(BaseModel):
    """One evaluator's assessment of one application within one interview."""

    evaluation_id: str
    interview_id: str
    interview_type: InterviewType = InterviewType.COFFEE_CHAT
    application_id: str
    evaluator_id: str | None = None
    decision: str | None = None
    notes: str = ""
    behavioral_leadership: int | None = Field(default=None, ge=1, le=SUBSCORE_MAX)
    behavioral_problem_solving: int | None = Field(default=None, ge=1, le=SUBSCORE_MAX)
    behavioral_interest: int | None = Field(default=None, ge=1, le=SUBSCORE_MAX)
    behavioral_total: float | None = None
    market_sizing_teamwork: int | None = Field(default=None, ge=1, le=SUBSCORE_MAX)
    market_sizing_logic: int | None = Field(default=None, ge=1, le=SUBSCORE_MAX)
    market_sizing_creativity: int | None = Field(default=None, ge=1, le=SUBSCORE_MAX)
    market_sizing_total: float | None = None
    behavioral_notes: str | None = None
    market_sizing_notes: str | None = None
    additional_notes: str | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def _derive_totals(self) -> "InterviewEvaluation":
        if self.behavioral_total is None:
            self.behavioral_total = _sum_present(
                self.behavioral_leadership,
                self.behavioral_problem_solving,
                self.behavioral_interest,
            )
        if self.market_sizing_total is None:
            self.market_sizing_total = _sum_present(
                self.market_sizing_teamwork,
                self.market_sizing_logic,
                self.market_sizing_creativity,
            )
        return self

    @property
    def recognized_decision(self) -> EvaluationDecision | None:
        if not self.decision:
            return None
        try:
            return EvaluationDecision(self.decision.upper())
        except ValueError:
            return None


def _sum_present(*values: int | None) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return float(sum(present))
