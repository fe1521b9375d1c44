"""
In-memory record store.

Keeps person records in a process-local dict keyed by id and evaluates
composed queries with the pure-Python pipeline from the query composer. Used by
the unit tests and the `memory` store backend.

Writes made in a session are buffered and applied to the table on commit; a
session that exits with an exception discards them.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from passport_office.domain.models import PersonRecord
from passport_office.errors import RecordStoreError, StoreClosedError
from passport_office.query.composer import PersonQuery, evaluate_query
from passport_office.stores.abstract import AbstractRecordStore
from passport_office.utils.logging import get_logger

log = get_logger(__name__)


class InMemorySession:
    """
    Session over an InMemoryRecordStore.

    Reads see committed records only.
    """

    def __init__(self, store: InMemoryRecordStore) -> None:
        self._store = store
        self._pending_inserts: list[PersonRecord] = []
        self._pending_clear = False
        self._released = False

    def _ensure_open(self) -> None:
        if self._released:
            raise StoreClosedError("In-memory session used after release")

    def fetch(self, query: PersonQuery) -> list[PersonRecord]:
        self._ensure_open()
        return evaluate_query(self._store._snapshot(), query)

    def find_by_id(self, record_id: int) -> Optional[PersonRecord]:
        self._ensure_open()
        return self._store._get(record_id)

    def insert(self, records: Iterable[PersonRecord]) -> list[PersonRecord]:
        self._ensure_open()
        inserted = [self._store._assign_id(record) for record in records]
        self._pending_inserts.extend(inserted)
        return inserted

    def delete_all(self) -> int:
        self._ensure_open()
        self._pending_clear = True
        self._pending_inserts.clear()
        return len(self._store)

    def commit(self) -> None:
        self._ensure_open()
        self._store._apply(self._pending_inserts, clear=self._pending_clear)
        self._pending_inserts = []
        self._pending_clear = False

    def rollback(self) -> None:
        self._pending_inserts = []
        self._pending_clear = False

    def release(self) -> None:
        self._released = True


class InMemoryRecordStore(AbstractRecordStore):
    """
    Dict-backed store with sequential id assignment.

    A single lock serializes table access, standing in for the isolation a
    database would provide.
    """

    name: str = "memory"
    description: str = "Process-local dict of person records (tests, demos)."

    def __init__(self, records: Iterable[PersonRecord] = ()) -> None:
        self._rows: dict[int, PersonRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self._closed = False

        initial = list(records)
        if initial:
            with self.session() as session:
                session.insert(initial)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    @contextmanager
    def session(self) -> Iterator[InMemorySession]:
        """
        Open a session; commits on clean exit, rolls back on error.
        """
        if self._closed:
            raise StoreClosedError("In-memory store is closed")
        session = InMemorySession(self)
        try:
            yield session
        except BaseException:
            session.rollback()
            raise
        else:
            session.commit()
        finally:
            session.release()

    def close(self) -> None:
        with self._lock:
            self._closed = True
        log.debug("In-memory store closed", extra={"store": self.name})

    # Table primitives used by InMemorySession

    def _snapshot(self) -> list[PersonRecord]:
        with self._lock:
            return list(self._rows.values())

    def _get(self, record_id: int) -> Optional[PersonRecord]:
        with self._lock:
            return self._rows.get(record_id)

    def _assign_id(self, record: PersonRecord) -> PersonRecord:
        with self._lock:
            if record.id is None:
                record = record.model_copy(update={"id": self._next_id})
            elif record.id in self._rows:
                raise RecordStoreError(f"Duplicate person id {record.id}")
            self._next_id = max(self._next_id, record.id + 1)
            return record

    def _apply(self, inserts: list[PersonRecord], clear: bool) -> None:
        with self._lock:
            existing = set() if clear else set(self._rows)
            for record in inserts:
                if record.id in existing:
                    raise RecordStoreError(f"Duplicate person id {record.id}")
                existing.add(record.id)
            if clear:
                self._rows.clear()
            self._rows.update((record.id, record) for record in inserts)


__all__ = ["InMemoryRecordStore", "InMemorySession"]
