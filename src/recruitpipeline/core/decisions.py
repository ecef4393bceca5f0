"""Per-application, per-phase decision storage with a short-lived cache."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

import pendulum
import structlog

from ..errors import ValidationError
from ..schemas import Application, Decision, Phase
from ..store import RecordStore, decision_key

COLLECTION = "decisions"


@dataclass
class DecisionStoreConfig:
    """Cache settings for decision reads."""

    cache_ttl_seconds: float = 120.0


@dataclass(slots=True)
class _CacheEntry:
    decision: Decision
    fetched_at: pendulum.DateTime


class DecisionStore:
    """Single current decision per (application, phase).

    Writes go straight to the record store with no debounce. Two admins
    editing the same decision race and the last write wins; there is no
    version token.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        config: DecisionStoreConfig | None = None,
        now_provider: Callable[[], pendulum.DateTime] | None = None,
    ) -> None:
        self._store = store
        self._config = config or DecisionStoreConfig()
        self._now_provider = now_provider or pendulum.now
        self._cache: dict[tuple[str, Phase], _CacheEntry] = {}
        self._logger = structlog.get_logger(__name__)

    def get(self, application_id: str, phase: Phase | str) -> Decision:
        phase = Phase.parse(phase)
        entry = self._cache.get((application_id, phase))
        if entry is not None and not self._is_stale(entry):
            return entry.decision
        return self.get_fresh(application_id, phase)

    def get_fresh(self, application_id: str, phase: Phase | str) -> Decision:
        phase = Phase.parse(phase)
        record = self._store.get(COLLECTION, decision_key(application_id, phase.value))
        decision = self._decode(record, application_id, phase)
        self._remember(application_id, phase, decision)
        return decision

    def get_many(
        self,
        application_ids: Iterable[str],
        phase: Phase | str,
        *,
        fresh: bool = False,
    ) -> dict[str, Decision]:
        """Resolve decisions for many applications with at most one store query."""
        phase = Phase.parse(phase)
        ids = list(dict.fromkeys(application_ids))
        result: dict[str, Decision] = {}
        missing: list[str] = []
        for application_id in ids:
            entry = self._cache.get((application_id, phase))
            if not fresh and entry is not None and not self._is_stale(entry):
                result[application_id] = entry.decision
            else:
                missing.append(application_id)

        if missing:
            records = self._store.query(COLLECTION, phase=phase.value, application_id=missing)
            found = {record.get("application_id"): record for record in records}
            for application_id in missing:
                decision = self._decode(found.get(application_id), application_id, phase)
                self._remember(application_id, phase, decision)
                result[application_id] = decision

        return {application_id: result[application_id] for application_id in ids}

    def set(self, application_id: str, decision: Decision | str, phase: Phase | str) -> Decision:
        phase = Phase.parse(phase)
        if not isinstance(decision, str):
            raise ValidationError(f"Decision must be a string, got {type(decision).__name__}")
        value = Decision.parse(decision)
        self._ensure_editable(application_id, phase)

        timestamp = self._now_provider()
        self._store.set(
            COLLECTION,
            decision_key(application_id, phase.value),
            {
                "application_id": application_id,
                "phase": phase.value,
                "decision": value.value,
                "updated_at": timestamp.to_iso8601_string(),
            },
        )
        self._cache[(application_id, phase)] = _CacheEntry(value, timestamp)
        self._logger.info(
            "decision.saved",
            application_id=application_id,
            phase=phase.value,
            decision=value.value,
        )
        return value

    def existing_decisions(self, phase: Phase | str) -> dict[str, Decision]:
        phase = Phase.parse(phase)
        decisions: dict[str, Decision] = {}
        for record in self._store.query(COLLECTION, phase=phase.value):
            application_id = record.get("application_id")
            if not application_id:
                continue
            decision = self._decode(record, application_id, phase)
            self._remember(application_id, phase, decision)
            decisions[application_id] = decision
        return decisions

    def invalidate(self, application_id: str | None = None) -> None:
        if application_id is None:
            self._cache.clear()
            return
        for key in [k for k in self._cache if k[0] == application_id]:
            del self._cache[key]

    def _ensure_editable(self, application_id: str, phase: Phase) -> None:
        record = self._store.get("applications", application_id)
        if record is None:
            return
        application = Application.model_validate(record)
        if application.is_terminal or application.current_round > phase.round:
            raise ValidationError(
                f"Decision for {application_id!r} in phase {phase.value!r} is historical; "
                f"application is {application.status.value} in round {int(application.current_round)}"
            )

    def _decode(self, record: dict[str, Any] | None, application_id: str, phase: Phase) -> Decision:
        if record is None:
            return Decision.PENDING
        try:
            return Decision.parse(record.get("decision"))
        except ValidationError:
            self._logger.warning(
                "decision.invalid_persisted_value",
                application_id=application_id,
                phase=phase.value,
                value=record.get("decision"),
            )
            return Decision.PENDING

    def _remember(self, application_id: str, phase: Phase, decision: Decision) -> None:
        self._cache[(application_id, phase)] = _CacheEntry(decision, self._now_provider())

    def _is_stale(self, entry: _CacheEntry) -> bool:
        age = (self._now_provider() - entry.fetched_at).total_seconds()
        return age > self._config.cache_ttl_seconds
