"""
Error types raised by record stores.

Empty results and missing ids are not errors; only store-level faults surface
as exceptions so callers can tell them apart from "nothing matched".
"""

from __future__ import annotations


class RecordStoreError(Exception):
    """Base class for failures of the underlying record store."""


class StoreUnavailableError(RecordStoreError):
    """The store could not be reached (connection or pool failure)."""


class StoreClosedError(RecordStoreError):
    """The store or session was used after it had been closed."""


__all__ = ["RecordStoreError", "StoreUnavailableError", "StoreClosedError"]
