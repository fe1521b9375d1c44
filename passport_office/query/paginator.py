"""
Page-window arithmetic for ordered result sets.

Pages are 1-based. A request with a non-positive page size or page number
disables paging rather than failing, so callers get the full ordered set back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageWindow:
    """
    Skip/take window over an ordered sequence.

    Attributes
    ----------
    offset : int
        Number of leading records to skip.
    limit : int
        Maximum number of records to take after the skip.
    """

    offset: int
    limit: int

    def slice(self, records: Sequence[T]) -> list[T]:
        return list(records[self.offset : self.offset + self.limit])


def page_window(page_size: Optional[int], page_number: Optional[int]) -> Optional[PageWindow]:
    """
    Translate a (page_size, page_number) request into a window.

    Returns None when either value is missing or not strictly positive.
    """
    if page_size is None or page_number is None:
        return None
    if page_size <= 0 or page_number <= 0:
        return None
    return PageWindow(offset=(page_number - 1) * page_size, limit=page_size)


def paginate(records: Sequence[T], page_size: Optional[int], page_number: Optional[int]) -> list[T]:
    """
    Return the records on the requested page of an already ordered sequence.

    Parameters
    ----------
    records : Sequence
        Filtered and ordered records.
    page_size : int | None
        Records per page.
    page_number : int | None
        1-based page number.

    Returns
    -------
    list
        The page window slice; empty when the page lies past the end, or the
        whole sequence when paging is disabled.
    """
    window = page_window(page_size, page_number)
    if window is None:
        return list(records)
    return window.slice(records)


__all__ = ["PageWindow", "page_window", "paginate"]
