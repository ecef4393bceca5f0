"""Round state machine and bulk "push all" advancement."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

import pendulum
import structlog

from ..errors import PipelineError, PreconditionFailure, ValidationError
from ..schemas import Application, ApplicationStatus, Decision, Phase, Round
from ..store import RecordStore
from .decisions import DecisionStore


@dataclass(frozen=True, slots=True)
class RoundState:
    status: ApplicationStatus
    round: Round


ENTRY_STATES: dict[Round, RoundState] = {
    Round.RESUME: RoundState(ApplicationStatus.SUBMITTED, Round.RESUME),
    Round.COFFEE_CHAT: RoundState(ApplicationStatus.UNDER_REVIEW, Round.COFFEE_CHAT),
    Round.FIRST_ROUND: RoundState(ApplicationStatus.ROUND_3, Round.FIRST_ROUND),
    Round.FINAL_ROUND: RoundState(ApplicationStatus.ROUND_4, Round.FINAL_ROUND),
}

# (round being decided, decision) -> state after the push.
TRANSITIONS: dict[tuple[Round, Decision], RoundState] = {
    (Round.RESUME, Decision.YES): ENTRY_STATES[Round.COFFEE_CHAT],
    (Round.COFFEE_CHAT, Decision.YES): ENTRY_STATES[Round.FIRST_ROUND],
    (Round.FIRST_ROUND, Decision.YES): ENTRY_STATES[Round.FINAL_ROUND],
    (Round.FINAL_ROUND, Decision.YES): RoundState(ApplicationStatus.ACCEPTED, Round.FINAL_ROUND),
    **{
        (round_, Decision.NO): RoundState(ApplicationStatus.REJECTED, round_)
        for round_ in Round
    },
}


def next_state(round_: Round, decision: Decision) -> RoundState:
    try:
        return TRANSITIONS[(round_, decision)]
    except KeyError as exc:
        raise ValidationError(
            f"No transition from round {int(round_)} for decision {decision.value!r}"
        ) from exc


@dataclass
class AdvancementConfig:
    max_workers: int = 1


@dataclass(slots=True)
class CohortValidation:
    ok: bool
    invalid: list[Application] = field(default_factory=list)
    decisions: dict[str, Decision] = field(default_factory=dict)


@dataclass(slots=True)
class AdvancementSummary:
    phase: Phase
    total_applications: int = 0
    accepted: int = 0
    rejected: int = 0
    emails_sent: int = 0
    skipped: int = 0
    failed: int = 0
    requested: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_applications": self.total_applications,
            "accepted": self.accepted,
            "rejected": self.rejected,
            "emails_sent": self.emails_sent,
            "skipped": self.skipped,
            "failed": self.failed,
            "requested": self.requested,
        }


@dataclass(slots=True)
class _CommitResult:
    application: Application
    decision: Decision
    state: RoundState | None
    error: str | None = None


class RoundAdvancementEngine:
    """Validate-then-commit bulk transitions between rounds.

    Nothing is written unless every in-scope application is resolved to yes
    or no. Once committing starts, per-application failures are counted, not
    rolled back, so the caller compares ``total_applications`` with
    ``requested``. Applications already moved past the phase are skipped, so a
    retried push is safe.
    """

    def __init__(
        self,
        store: RecordStore,
        decisions: DecisionStore,
        *,
        notifier: Any | None = None,
        config: AdvancementConfig | None = None,
        audit_logger: Any | None = None,
        now_provider: Callable[[], pendulum.DateTime] | None = None,
    ) -> None:
        self._store = store
        self._decisions = decisions
        self._notifier = notifier
        self._config = config or AdvancementConfig()
        self._audit_logger = audit_logger
        self._now_provider = now_provider or pendulum.now
        self._logger = structlog.get_logger(__name__)

    @staticmethod
    def in_scope(applications: Iterable[Application], phase: Phase | str) -> list[Application]:
        phase = Phase.parse(phase)
        return [
            app
            for app in applications
            if not app.is_terminal and app.current_round == phase.round
        ]

    def validate_cohort(
        self,
        applications: Iterable[Application],
        phase: Phase | str,
    ) -> CohortValidation:
        phase = Phase.parse(phase)
        current = [self._current(app) for app in applications]
        scoped = self.in_scope(current, phase)
        decisions = self._decisions.get_many(
            [app.application_id for app in scoped], phase, fresh=True
        )
        invalid = [app for app in scoped if not decisions[app.application_id].is_resolved]
        return CohortValidation(ok=not invalid, invalid=invalid, decisions=decisions)

    def advance_all(
        self,
        applications: Iterable[Application],
        phase: Phase | str,
        *,
        send_emails: bool = False,
    ) -> AdvancementSummary:
        phase = Phase.parse(phase)
        current = [self._current(app) for app in applications]
        validation = self.validate_cohort(current, phase)
        if not validation.ok:
            self._logger.warning(
                "advance.rejected_cohort",
                phase=phase.value,
                invalid=[app.application_id for app in validation.invalid],
            )
            raise PreconditionFailure(phase, validation.invalid)

        pending = self.in_scope(current, phase)
        already = self._already_advanced(current, phase)
        summary = AdvancementSummary(
            phase=phase,
            skipped=len(already),
            requested=len(pending) + len(already),
        )

        results = self._commit(pending, validation.decisions, phase)
        notify = send_emails and phase.round.is_final and self._notifier is not None
        for result in results:
            if result.state is None:
                summary.failed += 1
                continue
            if result.state.status is ApplicationStatus.REJECTED:
                summary.rejected += 1
            else:
                summary.accepted += 1
            if notify and self._send_notification(result):
                summary.emails_sent += 1

        summary.total_applications = summary.accepted + summary.rejected + summary.skipped
        log = self._logger.warning if summary.failed else self._logger.info
        log(
            "advance.completed",
            phase=phase.value,
            total_applications=summary.total_applications,
            requested=summary.requested,
            accepted=summary.accepted,
            rejected=summary.rejected,
            skipped=summary.skipped,
            failed=summary.failed,
            emails_sent=summary.emails_sent,
        )
        return summary

    def _commit(
        self,
        pending: Sequence[Application],
        decisions: dict[str, Decision],
        phase: Phase,
    ) -> list[_CommitResult]:
        jobs = [(app, decisions[app.application_id]) for app in pending]
        if self._config.max_workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self._config.max_workers) as executor:
                return list(executor.map(lambda job: self._commit_one(*job, phase), jobs))
        return [self._commit_one(app, decision, phase) for app, decision in jobs]

    def _commit_one(self, app: Application, decision: Decision, phase: Phase) -> _CommitResult:
        try:
            return self._apply(app, decision, phase)
        except Exception as exc:  # noqa: BLE001
            self._logger.error(
                "advance.commit_failed",
                application_id=app.application_id,
                phase=phase.value,
                error=repr(exc),
            )
            return _CommitResult(app, decision, None, error=repr(exc))

    def _apply(self, app: Application, decision: Decision, phase: Phase) -> _CommitResult:
        state = next_state(phase.round, decision)
        timestamp = self._now_provider()
        try:
            self._store.patch(
                "applications",
                app.application_id,
                {
                    "status": state.status.value,
                    "current_round": int(state.round),
                    "updated_at": timestamp.to_iso8601_string(),
                },
            )
        except PipelineError as exc:
            self._logger.error(
                "advance.persist_failed",
                application_id=app.application_id,
                phase=phase.value,
                error=str(exc),
            )
            return _CommitResult(app, decision, None, error=str(exc))

        if self._audit_logger is not None:
            self._write_audit(
                {
                    "application_id": app.application_id,
                    "candidate_id": app.candidate_id,
                    "phase": phase.value,
                    "decision": decision.value,
                    "from_status": app.status.value,
                    "from_round": int(app.current_round),
                    "to_status": state.status.value,
                    "to_round": int(state.round),
                    "timestamp": timestamp.to_iso8601_string(),
                }
            )
        updated = app.model_copy(
            update={"status": state.status, "current_round": state.round}
        )
        return _CommitResult(updated, decision, state)

    def _write_audit(self, record: dict[str, Any]) -> None:
        # The transition is already persisted; a lost audit line does not undo it.
        try:
            self._audit_logger.append(record)
        except (OSError, TypeError, ValueError) as exc:
            self._logger.error(
                "advance.audit_failed",
                application_id=record.get("application_id"),
                error=repr(exc),
            )

    def _send_notification(self, result: _CommitResult) -> bool:
        try:
            return bool(self._notifier.notify(result.application, result.state.status))
        except Exception as exc:  # noqa: BLE001
            self._logger.warning(
                "advance.notify_failed",
                application_id=result.application.application_id,
                error=repr(exc),
            )
            return False

    def _already_advanced(self, applications: Sequence[Application], phase: Phase) -> list[Application]:
        candidates = [
            app
            for app in applications
            if app.current_round > phase.round
            or (app.is_terminal and app.current_round == phase.round)
        ]
        if not candidates:
            return []
        decisions = self._decisions.get_many(
            [app.application_id for app in candidates], phase, fresh=True
        )
        return [app for app in candidates if decisions[app.application_id].is_resolved]

    def _current(self, app: Application) -> Application:
        record = self._store.get("applications", app.application_id)
        if record is None:
            return app
        return Application.model_validate(record)
