"""Batched interview evaluation lookups."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

import structlog

from ..schemas import InterviewEvaluation, InterviewType
from ..store import RecordStore

COLLECTION = "interview_evaluations"


class EvaluationSummaryService:
    """Group structured interview evaluations by application."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._logger = structlog.get_logger(__name__)

    def summaries(
        self,
        application_ids: Iterable[str],
        interview_type: InterviewType | str | None = None,
    ) -> dict[str, list[InterviewEvaluation]]:
        """Return every requested id, with an empty list when it has no activity."""
        ids = list(dict.fromkeys(application_ids))
        if not ids:
            return {}

        filters: dict[str, object] = {"application_id": ids}
        if interview_type is not None:
            filters["interview_type"] = InterviewType(interview_type).value

        grouped: dict[str, list[InterviewEvaluation]] = {application_id: [] for application_id in ids}
        for record in self._store.query(COLLECTION, **filters):
            evaluation = InterviewEvaluation.model_validate(record)
            grouped[evaluation.application_id].append(evaluation)

        self._logger.debug(
            "summaries.fetched",
            applications=len(ids),
            interview_type=filters.get("interview_type"),
            evaluations=sum(len(items) for items in grouped.values()),
        )
        return grouped

    def by_type(
        self,
        application_ids: Iterable[str],
    ) -> dict[str, dict[InterviewType, list[InterviewEvaluation]]]:
        ids = list(dict.fromkeys(application_ids))
        nested: dict[str, dict[InterviewType, list[InterviewEvaluation]]] = {
            application_id: defaultdict(list) for application_id in ids
        }
        for application_id, evaluations in self.summaries(ids).items():
            for evaluation in evaluations:
                nested[application_id][evaluation.interview_type].append(evaluation)
        return {application_id: dict(groups) for application_id, groups in nested.items()}
