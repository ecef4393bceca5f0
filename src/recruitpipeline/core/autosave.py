"""Debounced persistence of in-progress evaluation edits."""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass
from typing import Any, Callable, Literal, Protocol, runtime_checkable

import pendulum
import structlog

SaveStatusType = Literal["saved", "error"]
PersistCallback = Callable[[str, dict[str, Any]], None]


@runtime_checkable
class TimerHandle(Protocol):
    def cancel(self) -> None:
        """Prevent the scheduled callback from running."""


@runtime_checkable
class Scheduler(Protocol):
    """Source of cancellable delayed calls."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_seconds``."""


class ThreadingScheduler:
    """Scheduler backed by daemon ``threading.Timer`` instances."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass
class AutoSaveConfig:
    delay_ms: int = 5000


@dataclass(slots=True)
class SaveStatus:
    type: SaveStatusType
    message: str
    timestamp: pendulum.DateTime


class AutoSaveCoordinator:
    """One cancellable delayed save per key.

    The save reads the state held at fire time, so several edits made inside
    one window produce a single write carrying all of them. A failed save is
    recorded as an error status and is not retried; the edits stay in memory
    until the next edit or an explicit ``flush``.
    """

    def __init__(
        self,
        persist: PersistCallback,
        *,
        config: AutoSaveConfig | None = None,
        scheduler: Scheduler | None = None,
        now_provider: Callable[[], pendulum.DateTime] | None = None,
    ) -> None:
        self._persist = persist
        self._config = config or AutoSaveConfig()
        self._scheduler = scheduler or ThreadingScheduler()
        self._now_provider = now_provider or pendulum.now
        self._state: dict[str, dict[str, Any]] = {}
        self._pending: dict[str, TimerHandle] = {}
        self._status: dict[str, SaveStatus] = {}
        self._generations: dict[str, int] = {}
        self._save_locks: dict[str, threading.Lock] = {}
        self._lock = threading.RLock()
        self._logger = structlog.get_logger(__name__)

    def update(self, key: str, **fields: Any) -> None:
        """Apply an edit to the in-memory state and restart the key's timer."""
        with self._lock:
            self._state.setdefault(key, {}).update(fields)
        self.schedule_save(key)

    def state(self, key: str) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._state.get(key, {}))

    def schedule_save(self, key: str, delay_ms: int | None = None) -> None:
        delay = self._config.delay_ms if delay_ms is None else delay_ms
        with self._lock:
            previous = self._pending.pop(key, None)
            if previous is not None:
                previous.cancel()
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
            handle = self._scheduler.call_later(delay / 1000.0, lambda: self._fire(key, generation))
            self._pending[key] = handle

    def flush(self, key: str) -> SaveStatus:
        """Save immediately, cancelling any pending timer for ``key``."""
        with self._lock:
            previous = self._pending.pop(key, None)
            if previous is not None:
                previous.cancel()
        return self._save(key)

    def is_pending(self, key: str) -> bool:
        with self._lock:
            return key in self._pending

    def status(self, key: str) -> SaveStatus | None:
        with self._lock:
            return self._status.get(key)

    def cancel_all(self) -> None:
        with self._lock:
            for handle in self._pending.values():
                handle.cancel()
            self._pending.clear()

    def _fire(self, key: str, generation: int) -> None:
        with self._lock:
            # A timer that was superseded or cancelled after it started firing.
            if self._generations.get(key) != generation or key not in self._pending:
                return
            self._pending.pop(key)
        self._save(key)

    def _save(self, key: str) -> SaveStatus:
        with self._lock:
            save_lock = self._save_locks.setdefault(key, threading.Lock())
        # Snapshot and write under one per-key lock so an older snapshot never lands last.
        with save_lock:
            with self._lock:
                snapshot = copy.deepcopy(self._state.get(key, {}))
            try:
                self._persist(key, snapshot)
            except Exception as exc:  # noqa: BLE001
                status = SaveStatus("error", f"Auto-save failed: {exc}", self._now_provider())
                self._logger.warning("autosave.failed", key=key, error=str(exc))
            else:
                status = SaveStatus("saved", "Saved", self._now_provider())
                self._logger.debug("autosave.saved", key=key, fields=sorted(snapshot))
            with self._lock:
                self._status[key] = status
        return status
