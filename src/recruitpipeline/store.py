"""Record store contract and the bundled implementations."""

from __future__ import annotations

import copy
import json
import threading
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

from .errors import NetworkError, NotFoundError

Record = dict[str, Any]

COLLECTIONS: tuple[str, ...] = (
    "candidates",
    "applications",
    "document_scores",
    "interview_evaluations",
    "event_attendance",
    "decisions",
)


@runtime_checkable
class RecordStore(Protocol):
    """External record store reachable via simple get/set/patch operations.

    Implementations raise ``NetworkError`` when the backing transport fails and
    ``NotFoundError`` when a patch targets a missing key.
    """

    def get(self, collection: str, key: str) -> Record | None:
        """Return a copy of the record stored under ``key`` or None."""

    def set(self, collection: str, key: str, value: Record) -> None:
        """Create or overwrite the record under ``key``."""

    def patch(self, collection: str, key: str, changes: Record) -> Record:
        """Merge ``changes`` into an existing record and return the result."""

    def query(self, collection: str, **filters: Any) -> list[Record]:
        """Return records matching every filter.

        A list, tuple or set filter value matches membership.
        """


def decision_key(application_id: str, phase: str) -> str:
    return f"{application_id}:{phase}"


class InMemoryRecordStore:
    """Dictionary-backed store used by tests and as the container default.

    Reads and writes are serialized so bulk commits may run on a thread pool.
    """

    def __init__(self, initial: dict[str, dict[str, Record]] | None = None) -> None:
        self._lock = threading.RLock()
        self._data: dict[str, dict[str, Record]] = {name: {} for name in COLLECTIONS}
        for collection, records in (initial or {}).items():
            self._data.setdefault(collection, {}).update(copy.deepcopy(records))

    def get(self, collection: str, key: str) -> Record | None:
        with self._lock:
            record = self._collection(collection).get(key)
            return copy.deepcopy(record) if record is not None else None

    def set(self, collection: str, key: str, value: Record) -> None:
        with self._lock:
            self._collection(collection)[key] = copy.deepcopy(value)
            self._persist()

    def patch(self, collection: str, key: str, changes: Record) -> Record:
        with self._lock:
            records = self._collection(collection)
            if key not in records:
                raise NotFoundError(collection, key)
            records[key].update(copy.deepcopy(changes))
            self._persist()
            return copy.deepcopy(records[key])

    def query(self, collection: str, **filters: Any) -> list[Record]:
        with self._lock:
            return [
                copy.deepcopy(record)
                for record in self._collection(collection).values()
                if _matches(record, filters)
            ]

    def keys(self, collection: str) -> list[str]:
        with self._lock:
            return list(self._collection(collection).keys())

    def snapshot(self) -> dict[str, dict[str, Record]]:
        with self._lock:
            return copy.deepcopy(self._data)

    def _collection(self, name: str) -> dict[str, Record]:
        return self._data.setdefault(name, {})

    def _persist(self) -> None:
        """Hook for durable subclasses; called with the store lock held."""


class JsonFileRecordStore(InMemoryRecordStore):
    """Store persisted as a single JSON document, rewritten on every write."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._logger = structlog.get_logger(__name__)
        initial: dict[str, dict[str, Record]] = {}
        if self._path.exists():
            try:
                with self._path.open("r", encoding="utf-8") as handle:
                    initial = json.load(handle) or {}
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid store JSON: {exc}") from exc
            except OSError as exc:
                raise NetworkError(f"Unable to read store {self._path}") from exc
        super().__init__(initial)

    def _persist(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, ensure_ascii=False, indent=2, default=str),
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.error("store.write_failed", path=str(self._path), error=str(exc))
            raise NetworkError(f"Unable to write store {self._path}") from exc


def _matches(record: Record, filters: dict[str, Any]) -> bool:
    for field_name, expected in filters.items():
        actual = record.get(field_name)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


__all__ = [
    "COLLECTIONS",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "RecordStore",
    "decision_key",
]
