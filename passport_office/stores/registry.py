"""
Registry of record store backends.

Usage:
    from passport_office.stores.registry import build_store

    store = build_store()            # backend from STORE_BACKEND
    store = build_store("memory")    # explicit backend
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from passport_office.config import get_settings
from passport_office.stores.abstract import RecordStore
from passport_office.stores.memory import InMemoryRecordStore
from passport_office.stores.postgres import PostgresRecordStore


def _store_factories() -> Dict[str, Callable[[], RecordStore]]:
    """Registry of available stores."""
    return {
        "memory": lambda: InMemoryRecordStore(),
        "postgres": lambda: PostgresRecordStore(),
    }


def available_stores() -> List[str]:
    """List available store backend names."""
    return sorted(_store_factories().keys())


def build_store(name: Optional[str] = None) -> RecordStore:
    """
    Instantiate the named store, defaulting to the configured backend.

    Raises
    ------
    ValueError
        If the name is not a registered backend.
    """
    backend = name or get_settings().store_backend
    factories = _store_factories()
    if backend not in factories:
        raise ValueError(f"Unknown store '{backend}'. Available: {', '.join(factories)}")
    return factories[backend]()


__all__ = ["available_stores", "build_store"]
