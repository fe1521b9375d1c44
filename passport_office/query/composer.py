"""
Query composition for person searches.

Turns a sparse SearchCriteria into a PersonQuery: a list of field filters, a
sort mode and an optional page window. Stores either compile the query to SQL
(PostgreSQL) or evaluate it with `evaluate_query` (in-memory).

Filtering is a pipeline of optional stages. Each stage is gated by one of the
criteria's `uses_*` predicates and narrows the working set independently, so
the stages commute and inactive fields never affect the result.

Usage:
    from passport_office.query.composer import compose_query

    query = compose_query(SearchCriteria(last_name="Sm"), SortMode.FULL, 20, 1)
    page = evaluate_query(records, query)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from passport_office.domain.models import (
    PersonRecord,
    SearchCriteria,
    SortMode,
    criteria_is_active,
)
from passport_office.query.paginator import PageWindow, page_window, paginate


class FilterKind(str, enum.Enum):
    PREFIX = "prefix"
    CALENDAR_DATE = "calendar_date"


@dataclass(frozen=True)
class FilterStage:
    """
    One optional narrowing step.

    Attributes
    ----------
    field : str
        Name shared by the SearchCriteria and PersonRecord attribute.
    kind : FilterKind
        How the record value is compared with the criteria value.
    is_active : Callable[[SearchCriteria], bool]
        Gate deciding whether the stage runs for a given criteria object.
    """

    field: str
    kind: FilterKind
    is_active: Callable[[SearchCriteria], bool]


FILTER_STAGES: tuple[FilterStage, ...] = (
    FilterStage("first_name", FilterKind.PREFIX, SearchCriteria.uses_first_name),
    FilterStage("last_name", FilterKind.PREFIX, SearchCriteria.uses_last_name),
    FilterStage("middle_name", FilterKind.PREFIX, SearchCriteria.uses_middle_name),
    FilterStage("passport_series", FilterKind.PREFIX, SearchCriteria.uses_passport_series),
    FilterStage("passport_number", FilterKind.PREFIX, SearchCriteria.uses_passport_number),
    FilterStage("birth_date", FilterKind.CALENDAR_DATE, SearchCriteria.uses_birth_date),
)

ID_SORT_KEYS: tuple[str, ...] = ("id",)
# `id` closes the full order so fully tied records keep a deterministic order.
FULL_SORT_KEYS: tuple[str, ...] = (
    "last_name",
    "first_name",
    "middle_name",
    "birth_date",
    "passport_series",
    "passport_number",
    "id",
)


@dataclass(frozen=True)
class FieldFilter:
    """A bound filter: record field, comparison kind and criteria value."""

    field: str
    kind: FilterKind
    value: Union[str, date]

    def matches(self, record: PersonRecord) -> bool:
        if self.kind is FilterKind.CALENDAR_DATE:
            stored = record.birth_date
            wanted = self.value
            return (
                stored.year == wanted.year
                and stored.month == wanted.month
                and stored.day == wanted.day
            )
        return getattr(record, self.field).startswith(self.value)


@dataclass(frozen=True)
class PersonQuery:
    """
    Store-independent description of a person search.

    An empty `filters` tuple means no narrowing. `page_size` and `page_number`
    carry the 1-based paging request as given; `window` is None when it
    disables paging.
    """

    filters: tuple[FieldFilter, ...] = ()
    sort_mode: SortMode = SortMode.ID
    page_size: Optional[int] = None
    page_number: Optional[int] = None

    @property
    def window(self) -> Optional[PageWindow]:
        return page_window(self.page_size, self.page_number)

    @property
    def sort_keys(self) -> tuple[str, ...]:
        return sort_keys(self.sort_mode)


def sort_keys(sort_mode: SortMode) -> tuple[str, ...]:
    """Column names the given mode orders by, most significant first."""
    if sort_mode == SortMode.FULL:
        return FULL_SORT_KEYS
    return ID_SORT_KEYS


def compose_filters(criteria: Optional[SearchCriteria]) -> tuple[FieldFilter, ...]:
    """
    Bind every active filter stage to its criteria value.

    Returns an empty tuple when the criteria has no active field, in which
    case filtering is skipped altogether.
    """
    if not criteria_is_active(criteria):
        return ()
    return tuple(
        FieldFilter(stage.field, stage.kind, getattr(criteria, stage.field))
        for stage in FILTER_STAGES
        if stage.is_active(criteria)
    )


def compose_query(
    criteria: Optional[SearchCriteria] = None,
    sort_mode: SortMode = SortMode.ID,
    page_size: Optional[int] = None,
    page_number: Optional[int] = None,
) -> PersonQuery:
    """
    Build the query for a search, optionally restricted to one page.

    Parameters
    ----------
    criteria : SearchCriteria | None
        Filters to apply; None or an all-unset criteria selects everything.
    sort_mode : SortMode
        Result ordering.
    page_size, page_number : int | None
        1-based paging request. Non-positive values disable paging.
    """
    return PersonQuery(
        filters=compose_filters(criteria),
        sort_mode=SortMode(sort_mode),
        page_size=page_size,
        page_number=page_number,
    )


def apply_filters(
    records: Iterable[PersonRecord], filters: Sequence[FieldFilter]
) -> list[PersonRecord]:
    """Keep the records matching every filter, preserving input order."""
    narrowed = list(records)
    for field_filter in filters:
        narrowed = [record for record in narrowed if field_filter.matches(record)]
    return narrowed


def _full_sort_key(record: PersonRecord) -> tuple[Any, ...]:
    return (
        record.last_name,
        record.first_name,
        record.middle_name,
        record.birth_sort_key,
        record.passport_series,
        record.passport_number,
        record.id,
    )


def order_records(records: Iterable[PersonRecord], sort_mode: SortMode) -> list[PersonRecord]:
    """
    Sort records by the given mode.

    Python's sort is stable and compares str by code point, which matches the
    `COLLATE "C"` ordering used by the PostgreSQL store.
    """
    if sort_mode == SortMode.FULL:
        return sorted(records, key=_full_sort_key)
    return sorted(records, key=lambda record: record.id)


def evaluate_query(records: Iterable[PersonRecord], query: PersonQuery) -> list[PersonRecord]:
    """Filter, then order, then window `records` according to `query`."""
    ordered = order_records(apply_filters(records, query.filters), query.sort_mode)
    return paginate(ordered, query.page_size, query.page_number)


__all__ = [
    "FILTER_STAGES",
    "FULL_SORT_KEYS",
    "ID_SORT_KEYS",
    "FieldFilter",
    "FilterKind",
    "FilterStage",
    "PersonQuery",
    "apply_filters",
    "compose_filters",
    "compose_query",
    "evaluate_query",
    "order_records",
    "sort_keys",
]
