"""
Stores package for the Passport Office records backend.

This module re-exports the store interfaces and the concrete backends so
downstream code can import from `passport_office.stores` directly.
"""

from passport_office.stores.abstract import AbstractRecordStore, RecordStore, StoreSession
from passport_office.stores.memory import InMemoryRecordStore
from passport_office.stores.postgres import PostgresRecordStore
from passport_office.stores.registry import available_stores, build_store

__all__ = [
    # Abstracts
    "AbstractRecordStore",
    "RecordStore",
    "StoreSession",
    # Concrete stores
    "InMemoryRecordStore",
    "PostgresRecordStore",
    # Registry
    "available_stores",
    "build_store",
]
