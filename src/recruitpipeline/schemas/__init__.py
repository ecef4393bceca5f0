"""Pydantic schema definitions for recruitment records."""

from __future__ import annotations

from .candidate import Application, Candidate, EventAttendance
from .rounds import (
    ApplicationStatus,
    Decision,
    DocumentType,
    EvaluationDecision,
    InterviewType,
    Phase,
    Round,
)
from .scores import DocumentScore, InterviewEvaluation, ScorePatch

__all__ = [
    "Application",
    "ApplicationStatus",
    "Candidate",
    "Decision",
    "DocumentScore",
    "DocumentType",
    "EvaluationDecision",
    "EventAttendance",
    "InterviewEvaluation",
    "InterviewType",
    "Phase",
    "Round",
    "ScorePatch",
]
