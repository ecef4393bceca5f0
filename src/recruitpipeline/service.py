"""Operation surface consumed by the admin and evaluator front ends."""

from __future__ import annotations

import uuid
from typing import Any, Mapping

import pendulum
import pydantic
import structlog

from .core import (
    AdvancementSummary,
    AutoSaveConfig,
    AutoSaveCoordinator,
    CohortValidation,
    DecisionStore,
    EvaluationSummaryService,
    RankingEngine,
    RankingRow,
    RoundAdvancementEngine,
    Scheduler,
    ScoreAggregator,
)
from .errors import NotFoundError, ValidationError
from .schemas import (
    Application,
    Decision,
    DocumentScore,
    DocumentType,
    EventAttendance,
    InterviewEvaluation,
    InterviewType,
    Phase,
    ScorePatch,
)
from .store import RecordStore

PHASE_INTERVIEW_TYPES: dict[Phase, InterviewType] = {
    Phase.COFFEE: InterviewType.COFFEE_CHAT,
    Phase.FIRST_ROUND: InterviewType.ROUND_ONE,
    Phase.FINAL_ROUND: InterviewType.ROUND_TWO,
}

_TOTAL_PARTS: dict[str, tuple[str, ...]] = {
    "behavioral_total": (
        "behavioral_leadership",
        "behavioral_problem_solving",
        "behavioral_interest",
    ),
    "market_sizing_total": (
        "market_sizing_teamwork",
        "market_sizing_logic",
        "market_sizing_creativity",
    ),
}


class RecruitmentService:
    """Facade wiring scores, rankings, decisions and round pushes to one store."""

    def __init__(
        self,
        *,
        store: RecordStore,
        aggregator: ScoreAggregator,
        ranking: RankingEngine,
        decisions: DecisionStore,
        summaries: EvaluationSummaryService,
        advancement: RoundAdvancementEngine,
        autosave_config: AutoSaveConfig | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._store = store
        self._aggregator = aggregator
        self._ranking = ranking
        self._decisions = decisions
        self._summaries = summaries
        self._advancement = advancement
        self._autosave_config = autosave_config or AutoSaveConfig()
        self._scheduler = scheduler
        self._logger = structlog.get_logger(__name__)

    # Document scores

    def scores(
        self,
        document_type: DocumentType | str,
        candidate_id: str,
        cycle_id: str | None = None,
    ) -> list[DocumentScore]:
        filters: dict[str, Any] = {
            "document_type": DocumentType(document_type).value,
            "candidate_id": candidate_id,
        }
        if cycle_id is not None:
            filters["cycle_id"] = cycle_id
        records = [DocumentScore.model_validate(r) for r in self._store.query("document_scores", **filters)]
        records.sort(key=lambda s: s.created_at.timestamp() if s.created_at else 0.0, reverse=True)
        return records

    def submit_score(
        self,
        *,
        candidate_id: str,
        evaluator_id: str,
        document_type: DocumentType | str,
        score_one: float | None = None,
        score_two: float | None = None,
        score_three: float | None = None,
        notes: str | None = None,
        cycle_id: str | None = None,
    ) -> DocumentScore:
        """Create or replace an evaluator's grade for one document."""
        document_type = DocumentType(document_type)
        _validated_patch(
            {"score_one": score_one, "score_two": score_two, "score_three": score_three}
        )
        existing = self._store.query(
            "document_scores",
            candidate_id=candidate_id,
            evaluator_id=evaluator_id,
            document_type=document_type.value,
            cycle_id=cycle_id,
        )
        record = existing[0] if existing else {
            "score_id": uuid.uuid4().hex,
            "candidate_id": candidate_id,
            "evaluator_id": evaluator_id,
            "document_type": document_type.value,
            "cycle_id": cycle_id,
            "created_at": pendulum.now().to_iso8601_string(),
        }
        record.update(
            {
                "score_one": score_one,
                "score_two": score_two,
                "score_three": score_three,
                "overall_score": self._aggregator.overall_from_subscores(
                    score_one, score_two, score_three
                ),
                "notes": notes,
                "status": "completed",
            }
        )
        score = DocumentScore.model_validate(record)
        self._store.set("document_scores", score.score_id, score.model_dump(mode="json"))
        self._logger.info(
            "score.submitted",
            score_id=score.score_id,
            candidate_id=candidate_id,
            document_type=document_type.value,
        )
        return score

    def patch_score(self, score_id: str, patch: ScorePatch | Mapping[str, Any]) -> DocumentScore:
        if not isinstance(patch, ScorePatch):
            patch = _validated_patch(patch)
        updated = self._store.patch("document_scores", score_id, patch.changes())
        self._logger.info("score.patched", score_id=score_id, fields=sorted(patch.changes()))
        return DocumentScore.model_validate(updated)

    def score_detail(self, score_id: str) -> DocumentScore | None:
        """Drill-down read; a vanished score yields None."""
        try:
            record = self._store.get("document_scores", score_id)
        except NotFoundError:
            record = None
        if record is None:
            self._logger.info("score.not_found", score_id=score_id)
            return None
        return DocumentScore.model_validate(record)

    def document_averages(self, candidate_id: str, cycle_id: str | None = None) -> dict[DocumentType, float]:
        filters: dict[str, Any] = {"candidate_id": candidate_id}
        if cycle_id is not None:
            filters["cycle_id"] = cycle_id
        records = [DocumentScore.model_validate(r) for r in self._store.query("document_scores", **filters)]
        return self._aggregator.averages_by_type(records)

    def event_points(self, application_id: str) -> float:
        """Attendance points are summed, never averaged."""
        records = self._store.query("event_attendance", application_id=application_id)
        return sum(
            attendance.points
            for attendance in (EventAttendance.model_validate(r) for r in records)
            if attendance.attended
        )

    # Applications and decisions

    def applications(self, cycle_id: str | None = None) -> list[Application]:
        filters = {"cycle_id": cycle_id} if cycle_id is not None else {}
        return [Application.model_validate(r) for r in self._store.query("applications", **filters)]

    def existing_decisions(self, phase: Phase | str) -> dict[str, Any]:
        decisions = self._decisions.existing_decisions(phase)
        return {"decisions": {app_id: decision.value for app_id, decision in decisions.items()}}

    def save_decision(self, application_id: str, decision: Decision | str, phase: Phase | str) -> Decision:
        return self._decisions.set(application_id, decision, phase)

    def validate(self, phase: Phase | str, cycle_id: str | None = None) -> CohortValidation:
        return self._advancement.validate_cohort(self.applications(cycle_id), phase)

    def advance(
        self,
        phase: Phase | str,
        *,
        send_emails: bool = False,
        cycle_id: str | None = None,
    ) -> AdvancementSummary:
        return self._advancement.advance_all(
            self.applications(cycle_id), phase, send_emails=send_emails
        )

    def process_decisions(self, *, send_emails: bool = False, cycle_id: str | None = None) -> dict[str, Any]:
        return _summary(self.advance(Phase.RESUME, send_emails=send_emails, cycle_id=cycle_id))

    def process_coffee_decisions(self, *, cycle_id: str | None = None) -> dict[str, Any]:
        return _summary(self.advance(Phase.COFFEE, cycle_id=cycle_id))

    def process_first_round_decisions(
        self, *, send_emails: bool = False, cycle_id: str | None = None
    ) -> dict[str, Any]:
        return _summary(self.advance(Phase.FIRST_ROUND, send_emails=send_emails, cycle_id=cycle_id))

    def process_final_decisions(self, *, send_emails: bool = True, cycle_id: str | None = None) -> dict[str, Any]:
        return _summary(self.advance(Phase.FINAL_ROUND, send_emails=send_emails, cycle_id=cycle_id))

    # Interview evaluations

    def evaluation_summaries(
        self,
        application_ids: list[str],
        interview_type: InterviewType | str | None = None,
    ) -> dict[str, dict[str, list[InterviewEvaluation]]]:
        grouped = self._summaries.summaries(application_ids, interview_type)
        return {app_id: {"evaluations": evaluations} for app_id, evaluations in grouped.items()}

    def save_evaluation(
        self,
        *,
        interview_id: str,
        application_id: str,
        evaluator_id: str,
        interview_type: InterviewType | str,
        fields: Mapping[str, Any],
    ) -> InterviewEvaluation:
        """Upsert one evaluator's evaluation, keeping fields the caller did not send."""
        evaluation_id = f"{interview_id}:{application_id}:{evaluator_id}"
        record = self._store.get("interview_evaluations", evaluation_id) or {
            "evaluation_id": evaluation_id,
            "interview_id": interview_id,
            "application_id": application_id,
            "evaluator_id": evaluator_id,
            "interview_type": InterviewType(interview_type).value,
        }
        record.update({k: v for k, v in fields.items() if v is not None})
        for total, parts in _TOTAL_PARTS.items():
            if total not in fields and any(part in fields for part in parts):
                record.pop(total, None)
        record["updated_at"] = pendulum.now().to_iso8601_string()
        try:
            evaluation = InterviewEvaluation.model_validate(record)
        except pydantic.ValidationError as exc:
            raise ValidationError(str(exc)) from exc
        self._store.set("interview_evaluations", evaluation_id, evaluation.model_dump(mode="json"))
        return evaluation

    def evaluation_autosave(
        self,
        *,
        interview_id: str,
        evaluator_id: str,
        interview_type: InterviewType | str,
    ) -> AutoSaveCoordinator:
        """Debounced saver for an evaluator's sheet, keyed by application id."""

        def persist(application_id: str, state: dict[str, Any]) -> None:
            self.save_evaluation(
                interview_id=interview_id,
                application_id=application_id,
                evaluator_id=evaluator_id,
                interview_type=interview_type,
                fields=state,
            )

        return AutoSaveCoordinator(
            persist,
            config=self._autosave_config,
            scheduler=self._scheduler,
        )

    # Staging

    def staging(
        self,
        phase: Phase | str,
        *,
        cycle_id: str | None = None,
        search: str | None = None,
    ) -> list[RankingRow]:
        phase = Phase.parse(phase)
        cohort = RoundAdvancementEngine.in_scope(self.applications(cycle_id), phase)
        ids = [app.application_id for app in cohort]

        document_scores: dict[str, list[DocumentScore]] = {}
        event_points: dict[str, float] = {}
        evaluations: dict[str, list[InterviewEvaluation]] = {}
        if phase is Phase.RESUME:
            # Scores belong to the application of the same cycle, never to a prior one.
            applications_by_key = {
                (app.candidate_id, app.cycle_id): app.application_id for app in cohort
            }
            candidate_ids = [app.candidate_id for app in cohort]
            for record in self._store.query("document_scores", candidate_id=candidate_ids):
                score = DocumentScore.model_validate(record)
                application_id = applications_by_key.get((score.candidate_id, score.cycle_id))
                if application_id is not None:
                    document_scores.setdefault(application_id, []).append(score)
            for record in self._store.query("event_attendance", application_id=ids):
                attendance = EventAttendance.model_validate(record)
                if attendance.attended:
                    event_points[attendance.application_id] = (
                        event_points.get(attendance.application_id, 0.0) + attendance.points
                    )
        else:
            evaluations = self._summaries.summaries(ids, PHASE_INTERVIEW_TYPES[phase])

        rows = self._ranking.staging_rows(
            cohort,
            phase,
            document_scores=document_scores,
            event_points=event_points,
            evaluations=evaluations,
            decisions=self._decisions.get_many(ids, phase),
        )
        return self._ranking.filter_rows(rows, search)


def _validated_patch(raw: Mapping[str, Any]) -> ScorePatch:
    try:
        return ScorePatch.model_validate(dict(raw))
    except pydantic.ValidationError as exc:
        raise ValidationError(str(exc)) from exc


def _summary(summary: AdvancementSummary) -> dict[str, Any]:
    return {"summary": summary.to_dict()}
