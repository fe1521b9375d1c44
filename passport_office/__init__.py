"""
Passport Office - records backend for civil/passport data.

This package stores person records (name fields, birth date, passport
series/number) and exposes search, paging and retrieval operations:

- Search criteria with optional prefix and birth-date filters
- Query composition with id or full alphabetical ordering
- 1-based page windows over the filtered, ordered result
- In-memory and PostgreSQL record stores behind one session protocol

The PersonRepository facade ties these together for request handlers.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from passport_office.config import Settings, get_settings
from passport_office.domain.models import PersonRecord, SearchCriteria, SortMode
from passport_office.errors import RecordStoreError, StoreClosedError, StoreUnavailableError
from passport_office.query.composer import PersonQuery, compose_query
from passport_office.query.paginator import PageWindow, page_window, paginate
from passport_office.repository import PersonRepository
from passport_office.stores import (
    InMemoryRecordStore,
    PostgresRecordStore,
    RecordStore,
    available_stores,
    build_store,
)
from passport_office.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "PersonRecord",
    "SearchCriteria",
    "SortMode",
    # Query
    "PersonQuery",
    "compose_query",
    "PageWindow",
    "page_window",
    "paginate",
    # Facade
    "PersonRepository",
    # Stores
    "RecordStore",
    "InMemoryRecordStore",
    "PostgresRecordStore",
    "available_stores",
    "build_store",
    # Errors
    "RecordStoreError",
    "StoreClosedError",
    "StoreUnavailableError",
    # Logging
    "configure_logging",
    "get_logger",
]
