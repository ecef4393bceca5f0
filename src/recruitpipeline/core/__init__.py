"""Evaluation aggregation and round advancement components."""

from __future__ import annotations

from .advancement import (
    AdvancementConfig,
    AdvancementSummary,
    CohortValidation,
    RoundAdvancementEngine,
    RoundState,
    TRANSITIONS,
    next_state,
)
from .autosave import AutoSaveConfig, AutoSaveCoordinator, SaveStatus, Scheduler, ThreadingScheduler
from .decisions import DecisionStore, DecisionStoreConfig
from .ranking import RankingConfig, RankingEngine, RankingRow
from .scores import ScoreAggregator
from .summaries import EvaluationSummaryService

__all__ = [
    "AdvancementConfig",
    "AdvancementSummary",
    "AutoSaveConfig",
    "AutoSaveCoordinator",
    "CohortValidation",
    "DecisionStore",
    "DecisionStoreConfig",
    "EvaluationSummaryService",
    "RankingConfig",
    "RankingEngine",
    "RankingRow",
    "RoundAdvancementEngine",
    "RoundState",
    "SaveStatus",
    "Scheduler",
    "ScoreAggregator",
    "TRANSITIONS",
    "ThreadingScheduler",
    "next_state",
]
