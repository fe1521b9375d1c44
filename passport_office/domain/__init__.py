"""
Domain package for the Passport Office records backend.

Exports the person record, search criteria and sort mode used across the
query composer, stores and repository facade. Keep this package focused on
data definitions and validation concerns.
"""

from passport_office.domain.models import (
    PersonRecord,
    SearchCriteria,
    SortMode,
    criteria_is_active,
)

__all__ = [
    "PersonRecord",
    "SearchCriteria",
    "SortMode",
    "criteria_is_active",
]
