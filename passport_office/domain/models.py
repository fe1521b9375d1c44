"""
Domain models for the Passport Office records backend.

Defines the person record schema aligned with `db/init.sql`, the search
criteria value object and the sort mode enum shared by the query composer,
stores and the repository facade.
"""
from __future__ import annotations

import enum
from datetime import date, datetime, time
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class SortMode(str, enum.Enum):
    """
    Ordering applied to query results.

    ID is the cheap default. FULL orders alphabetically by last, first and
    middle name, then birth date and passport series/number.
    """

    ID = "id"
    FULL = "full"


class PersonRecord(BaseModel):
    """
    Representation of a single row in the `person_info` table.
    """

    id: Optional[int] = Field(None, description="Primary key, assigned by the store on save.")
    first_name: str = Field(..., description="Given name.")
    last_name: str = Field(..., description="Family name.")
    middle_name: str = Field("", description="Patronymic or middle name.")
    birth_date: datetime = Field(..., description="Date of birth; only the calendar date is matched.")
    passport_series: str = Field(..., description="Passport series, matched by prefix.")
    passport_number: str = Field(..., description="Passport number, matched by prefix.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @field_validator("birth_date", mode="before")
    @classmethod
    def _promote_plain_date(cls, value: Any) -> Any:
        if isinstance(value, str) and len(value) == 10:
            value = date.fromisoformat(value)
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.min)
        return value

    @property
    def birth_calendar_date(self) -> date:
        """Year/month/day of the birth date as stored, ignoring time and zone."""
        return self.birth_date.date()

    @property
    def birth_sort_key(self) -> datetime:
        # Wall-clock value; aware and naive datetimes cannot be compared directly.
        return self.birth_date.replace(tzinfo=None)


class SearchCriteria(BaseModel):
    """
    Optional filters for person searches.

    A string field takes part in filtering only when it is set and non-empty;
    whitespace is significant and is not trimmed. The birth date takes part
    when it is set. With nothing in use, searching returns every record.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None
    passport_series: Optional[str] = None
    passport_number: Optional[str] = None
    birth_date: Optional[date] = None

    model_config = {"frozen": True}

    @field_validator("birth_date", mode="before")
    @classmethod
    def _reduce_datetime(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        return value

    def uses_first_name(self) -> bool:
        return _is_set(self.first_name)

    def uses_last_name(self) -> bool:
        return _is_set(self.last_name)

    def uses_middle_name(self) -> bool:
        return _is_set(self.middle_name)

    def uses_passport_series(self) -> bool:
        return _is_set(self.passport_series)

    def uses_passport_number(self) -> bool:
        return _is_set(self.passport_number)

    def uses_birth_date(self) -> bool:
        return self.birth_date is not None

    def has_active_filter(self) -> bool:
        """True when at least one field narrows the result set."""
        return any(
            (
                self.uses_first_name(),
                self.uses_last_name(),
                self.uses_middle_name(),
                self.uses_passport_series(),
                self.uses_passport_number(),
                self.uses_birth_date(),
            )
        )


def _is_set(value: Optional[str]) -> bool:
    return value is not None and value != ""


def criteria_is_active(criteria: Optional[SearchCriteria]) -> bool:
    """
    Return whether `criteria` should enter filtering at all.

    Accepts None so callers can pass through an absent criteria object.
    """
    return criteria is not None and criteria.has_active_filter()


__all__ = ["PersonRecord", "SearchCriteria", "SortMode", "criteria_is_active"]
