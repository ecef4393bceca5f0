"""Document score aggregation."""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Any, Iterable, Mapping

from ..schemas import DocumentScore, DocumentType

ScoreLike = DocumentScore | Mapping[str, Any]


class ScoreAggregator:
    """Reduce per-evaluator document scores to a single number.

    The admin override always replaces the evaluator's score for that record;
    the two are never averaged together.
    """

    def effective_score(self, score: ScoreLike) -> float:
        value = self._raw_effective(score)
        return 0.0 if value is None else value

    def average(self, scores: Iterable[ScoreLike]) -> float:
        values = [v for v in (self._raw_effective(s) for s in scores) if v is not None]
        if not values:
            return 0.0
        return sum(values) / len(values)

    def averages_by_type(self, scores: Iterable[ScoreLike]) -> dict[DocumentType, float]:
        grouped: dict[DocumentType, list[ScoreLike]] = defaultdict(list)
        for score in scores:
            grouped[_document_type(score)].append(score)
        return {doc_type: self.average(grouped.get(doc_type, [])) for doc_type in DocumentType}

    @staticmethod
    def overall_from_subscores(*subscores: float | None) -> float:
        """Mean of the sub-scores an evaluator filled in, 0 when none."""
        present = [float(v) for v in subscores if v is not None]
        if not present:
            return 0.0
        return sum(present) / len(present)

    def _raw_effective(self, score: ScoreLike) -> float | None:
        if isinstance(score, DocumentScore):
            admin, overall = score.admin_score, score.overall_score
        else:
            admin = _first_present(score, "admin_score", "adminScore")
            overall = _first_present(score, "overall_score", "overallScore")
        chosen = admin if admin is not None else overall
        return _to_number(chosen)


def _first_present(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _document_type(score: ScoreLike) -> DocumentType:
    if isinstance(score, DocumentScore):
        return score.document_type
    raw = score.get("document_type") or score.get("documentType") or DocumentType.RESUME.value
    return DocumentType(raw)
