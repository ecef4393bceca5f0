"""Ranking numbers for the staging view."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from rapidfuzz import fuzz

from ..schemas import (
    Application,
    Decision,
    DocumentScore,
    DocumentType,
    EvaluationDecision,
    InterviewEvaluation,
    Phase,
)
from .scores import ScoreAggregator

EvaluationLike = InterviewEvaluation | Mapping[str, Any]

DEFAULT_DECISION_WEIGHTS: dict[str, float] = {
    EvaluationDecision.YES.value: 4.0,
    EvaluationDecision.MAYBE_YES.value: 3.0,
    EvaluationDecision.UNSURE.value: 2.0,
    EvaluationDecision.MAYBE_NO.value: 1.0,
    EvaluationDecision.NO.value: 0.0,
}


@dataclass
class RankingConfig:
    """Caps and scales used by the ranking formulas."""

    resume_max: float = 13.0
    video_max: float = 2.0
    cover_letter_max: float = 3.0
    composite_display_max: float = 18.0
    first_round_max_combined: float = 30.0
    first_round_scale: float = 10.0
    referral_adjustment: float = 0.0
    min_search_similarity: float = 80.0
    decision_weights: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_DECISION_WEIGHTS)
    )


@dataclass(slots=True)
class RankingRow:
    """One candidate line in a staging tab."""

    application_id: str
    candidate_id: str
    name: str | None
    email: str | None
    score: float
    display: str
    decision: Decision = Decision.PENDING
    components: dict[str, float] = field(default_factory=dict)


class RankingEngine:
    """Produce one sortable number per candidate per round."""

    def __init__(
        self,
        *,
        config: RankingConfig | None = None,
        aggregator: ScoreAggregator | None = None,
    ) -> None:
        self._config = config or RankingConfig()
        self._aggregator = aggregator or ScoreAggregator()

    def composite_total(
        self,
        resume_avg: float,
        video_avg: float,
        cover_letter_avg: float,
        event_points: float,
    ) -> float:
        """Additive sort key over differently scaled components.

        Not a percentage: the ``/18`` label is only the sum of the caps.
        """
        cfg = self._config
        return (
            min(float(resume_avg), cfg.resume_max)
            + min(float(video_avg), cfg.video_max)
            + min(float(cover_letter_avg), cfg.cover_letter_max)
            + float(event_points)
            + cfg.referral_adjustment
        )

    def decision_ranking_score(self, evaluations: Iterable[EvaluationLike]) -> float:
        weights = self._config.decision_weights
        values = [
            weights[decision]
            for decision in (_decision_of(e) for e in evaluations)
            if decision is not None and decision in weights
        ]
        if not values:
            return 0.0
        return sum(values) / len(values)

    def first_round_ranking_score(self, evaluations: Iterable[EvaluationLike]) -> float:
        evaluations = list(evaluations)
        scored = [
            (behavioral, market)
            for behavioral, market in (_totals_of(e) for e in evaluations)
            if behavioral is not None and market is not None
        ]
        if not scored:
            return self.decision_ranking_score(evaluations)
        avg_behavioral = sum(b for b, _ in scored) / len(scored)
        avg_market = sum(m for _, m in scored) / len(scored)
        cfg = self._config
        return ((avg_behavioral + avg_market) / cfg.first_round_max_combined) * cfg.first_round_scale

    @staticmethod
    def rank(rows: Iterable[RankingRow]) -> list[RankingRow]:
        """Sort descending by score; equal scores keep their incoming order."""
        return sorted(rows, key=lambda row: row.score, reverse=True)

    def staging_rows(
        self,
        applications: Sequence[Application],
        phase: Phase,
        *,
        document_scores: Mapping[str, Sequence[DocumentScore]] | None = None,
        event_points: Mapping[str, float] | None = None,
        evaluations: Mapping[str, Sequence[EvaluationLike]] | None = None,
        decisions: Mapping[str, Decision] | None = None,
    ) -> list[RankingRow]:
        document_scores = document_scores or {}
        event_points = event_points or {}
        evaluations = evaluations or {}
        decisions = decisions or {}

        rows: list[RankingRow] = []
        for app in applications:
            app_evaluations = evaluations.get(app.application_id, [])
            if phase is Phase.RESUME:
                components = self._resume_components(
                    document_scores.get(app.application_id, []),
                    event_points.get(app.application_id, 0.0),
                )
                score = self.composite_total(
                    components["resume"],
                    components["video"],
                    components["cover_letter"],
                    components["events"],
                )
                display = f"{score:.1f}/{self._config.composite_display_max:g}"
            elif phase is Phase.FIRST_ROUND:
                components = {}
                score = self.first_round_ranking_score(app_evaluations)
                display = f"{score:.1f}/{self._config.first_round_scale:g}"
            else:
                components = {}
                score = self.decision_ranking_score(app_evaluations)
                display = f"{score:.2f}"
            rows.append(
                RankingRow(
                    application_id=app.application_id,
                    candidate_id=app.candidate_id,
                    name=app.name,
                    email=app.email,
                    score=score,
                    display=display,
                    decision=decisions.get(app.application_id, Decision.PENDING),
                    components=components,
                )
            )
        return self.rank(rows)

    def filter_rows(self, rows: Iterable[RankingRow], search: str | None) -> list[RankingRow]:
        """Keep rows whose name or email matches ``search``, tolerating typos."""
        if not search or not search.strip():
            return list(rows)
        needle = search.strip().lower()
        threshold = self._config.min_search_similarity
        matched: list[RankingRow] = []
        for row in rows:
            haystacks = [text.lower() for text in (row.name, row.email) if text]
            if any(needle in text for text in haystacks) or any(
                fuzz.partial_ratio(needle, text) >= threshold for text in haystacks
            ):
                matched.append(row)
        return matched

    def _resume_components(
        self,
        scores: Sequence[DocumentScore],
        events: float,
    ) -> dict[str, float]:
        averages = self._aggregator.averages_by_type(scores)
        return {
            "resume": averages[DocumentType.RESUME],
            "video": averages[DocumentType.VIDEO],
            "cover_letter": averages[DocumentType.COVER_LETTER],
            "events": float(events),
        }


def _decision_of(evaluation: EvaluationLike) -> str | None:
    if isinstance(evaluation, InterviewEvaluation):
        recognized = evaluation.recognized_decision
        return recognized.value if recognized else None
    raw = evaluation.get("decision")
    if not isinstance(raw, str):
        return None
    return raw.strip().upper() or None


def _totals_of(evaluation: EvaluationLike) -> tuple[float | None, float | None]:
    if isinstance(evaluation, InterviewEvaluation):
        return evaluation.behavioral_total, evaluation.market_sizing_total
    behavioral = evaluation.get("behavioral_total", evaluation.get("behavioralTotal"))
    market = evaluation.get("market_sizing_total", evaluation.get("marketSizingTotal"))
    return _as_float(behavioral), _as_float(market)


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
