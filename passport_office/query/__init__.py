"""
Query package for the Passport Office records backend.

Holds the store-independent search pipeline: criteria to filters, ordering
and page windows. Stores decide how a composed query is executed.
"""

from passport_office.query.composer import (
    FieldFilter,
    FilterKind,
    PersonQuery,
    compose_filters,
    compose_query,
    evaluate_query,
    order_records,
)
from passport_office.query.paginator import PageWindow, page_window, paginate

__all__ = [
    "FieldFilter",
    "FilterKind",
    "PersonQuery",
    "compose_filters",
    "compose_query",
    "evaluate_query",
    "order_records",
    "PageWindow",
    "page_window",
    "paginate",
]
