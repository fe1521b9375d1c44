"""
Abstract record store interfaces for the Passport Office records backend.

Concrete stores (in-memory, PostgreSQL) implement the RecordStore protocol and
hand out StoreSession objects through a `session()` context manager. A session
is released on every exit path: a clean exit commits, an exception rolls back
and propagates.
"""

from __future__ import annotations

import abc
from contextlib import AbstractContextManager
from typing import Iterable, Optional, Protocol, runtime_checkable

from passport_office.domain.models import PersonRecord
from passport_office.query.composer import PersonQuery


@runtime_checkable
class StoreSession(Protocol):
    """
    Scoped handle on the record store, valid inside one `session()` block.
    """

    def fetch(self, query: PersonQuery) -> list[PersonRecord]:
        """
        Run a composed query.

        Parameters
        ----------
        query : PersonQuery
            Filters, ordering and optional page window.

        Returns
        -------
        list[PersonRecord]
            Filtered, ordered and windowed records.
        """
        ...

    def find_by_id(self, record_id: int) -> Optional[PersonRecord]:
        """Return the record with the given id, or None."""
        ...

    def insert(self, records: Iterable[PersonRecord]) -> list[PersonRecord]:
        """Insert records and return copies carrying their assigned ids."""
        ...

    def delete_all(self) -> int:
        """Delete every record in the table and return the number removed."""
        ...

    def commit(self) -> None:
        """Make the session's changes durable."""
        ...


@runtime_checkable
class RecordStore(Protocol):
    """
    Common interface all record stores must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the backend.
    """

    name: str
    description: str

    def session(self) -> AbstractContextManager[StoreSession]:
        """Open a scoped session; the handle is released when the block exits."""
        ...

    def close(self) -> None:
        """Release every resource held by the store."""
        ...


class AbstractRecordStore(abc.ABC):
    """
    Optional ABC helper for class-based stores.

    Subclasses should set `name` and `description` and implement `session`.
    """

    name: str
    description: str

    @abc.abstractmethod
    def session(self) -> AbstractContextManager[StoreSession]:  # pragma: no cover - interface only
        """Open a scoped session."""
        raise NotImplementedError

    def close(self) -> None:
        """Release store resources. Stores without any keep the default."""


__all__ = [
    "AbstractRecordStore",
    "RecordStore",
    "StoreSession",
]
