"""
Record access facade for person records.

PersonRepository is the surface the request-handling layer talks to. Every
operation composes a query, opens a store session for just that call and
releases it on the way out, whether the call succeeds or raises. Store
failures propagate unchanged; empty results and unknown ids are not errors.

Usage:
    from passport_office.repository import PersonRepository

    with PersonRepository() as repo:
        page = repo.get_page(20, 1, SearchCriteria(last_name="Sm"), SortMode.FULL)
"""

from __future__ import annotations

from typing import Optional

from passport_office.domain.models import PersonRecord, SearchCriteria, SortMode
from passport_office.query.composer import compose_query
from passport_office.stores.abstract import RecordStore
from passport_office.stores.registry import build_store
from passport_office.utils.logging import get_logger

log = get_logger(__name__)


class PersonRepository:
    """
    Search, paging and retrieval over a record store.

    Parameters
    ----------
    store : RecordStore | None
        Backend to use. Defaults to the one named by STORE_BACKEND.
    """

    def __init__(self, store: Optional[RecordStore] = None) -> None:
        self.store = store if store is not None else build_store()
        self._pending: list[PersonRecord] = []

    def __enter__(self) -> "PersonRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_all(self, sort_mode: SortMode = SortMode.ID) -> list[PersonRecord]:
        """Every record, ordered, without filtering."""
        return self._fetch(None, sort_mode)

    def search_all(
        self, criteria: Optional[SearchCriteria], sort_mode: SortMode = SortMode.ID
    ) -> list[PersonRecord]:
        """All records matching `criteria`, ordered, unpaged."""
        return self._fetch(criteria, sort_mode)

    def get_page(
        self,
        page_size: int,
        page_number: int,
        criteria: Optional[SearchCriteria],
        sort_mode: SortMode = SortMode.ID,
    ) -> list[PersonRecord]:
        """
        Records on one page of the filtered, ordered result.

        Parameters
        ----------
        page_size : int
            Records per page.
        page_number : int
            1-based page number.
        criteria : SearchCriteria | None
            Filters; None or all-unset matches everything.
        sort_mode : SortMode
            Ordering applied before paging.

        Returns
        -------
        list[PersonRecord]
            The page; empty past the last page. When either paging value is
            not positive, paging is skipped and the full result is returned.
        """
        return self._fetch(criteria, sort_mode, page_size, page_number)

    def get_by_id(self, record_id: int) -> Optional[PersonRecord]:
        """The record with the given id, or None."""
        with self.store.session() as session:
            record = session.find_by_id(record_id)
        log.debug(
            "Lookup by id",
            extra={"store": self.store.name, "record_id": record_id, "found": record is not None},
        )
        return record

    def remove_all(self) -> None:
        """Delete every record in the store. Cannot be undone."""
        with self.store.session() as session:
            removed = session.delete_all()
            session.commit()
        log.debug("All records removed", extra={"store": self.store.name, "rows": removed})

    def add(self, record: PersonRecord) -> None:
        """Stage a record; it is written by the next `save()`."""
        self._pending.append(record)

    def save(self) -> list[PersonRecord]:
        """
        Commit staged records.

        Returns the saved records carrying their store-assigned ids. Staged
        records stay pending if the commit fails.
        """
        with self.store.session() as session:
            saved = session.insert(self._pending)
            session.commit()
        self._pending = []
        log.debug("Pending records saved", extra={"store": self.store.name, "rows": len(saved)})
        return saved

    def close(self) -> None:
        """Release the store."""
        self.store.close()

    def _fetch(
        self,
        criteria: Optional[SearchCriteria],
        sort_mode: SortMode,
        page_size: Optional[int] = None,
        page_number: Optional[int] = None,
    ) -> list[PersonRecord]:
        query = compose_query(criteria, sort_mode, page_size, page_number)
        with self.store.session() as session:
            records = session.fetch(query)
        log.debug(
            "Query executed",
            extra={
                "store": self.store.name,
                "filters": [field_filter.field for field_filter in query.filters],
                "sort_mode": query.sort_mode.value,
                "page_size": page_size,
                "page_number": page_number,
                "rows": len(records),
            },
        )
        return records


__all__ = ["PersonRepository"]
