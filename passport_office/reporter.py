"""
Console rendering of person records for the CLI.
"""

from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from passport_office.domain.models import PersonRecord, SortMode


def _format_birth_date(record: PersonRecord) -> str:
    return record.birth_calendar_date.isoformat()


def build_table(
    records: Sequence[PersonRecord],
    sort_mode: SortMode = SortMode.ID,
    page_size: Optional[int] = None,
    page_number: Optional[int] = None,
) -> Table:
    """
    Build a rich table for a result set.

    The caption states the ordering and, when paging was requested, the page.
    """
    caption = "Ordered by name, birth date, passport" if sort_mode == SortMode.FULL else "Ordered by id"
    if page_size and page_number and page_size > 0 and page_number > 0:
        caption = f"{caption} │ page {page_number} (size {page_size})"

    table = Table(
        title="Passport Office Records",
        box=box.ROUNDED,
        caption=caption,
    )
    table.add_column("ID", justify="right", style="magenta", no_wrap=True)
    table.add_column("Last name", style="cyan")
    table.add_column("First name", style="cyan")
    table.add_column("Middle name", style="cyan")
    table.add_column("Birth date", justify="right", style="green")
    table.add_column("Passport", style="bold yellow", no_wrap=True)

    for record in records:
        table.add_row(
            str(record.id),
            record.last_name,
            record.first_name,
            record.middle_name,
            _format_birth_date(record),
            f"{record.passport_series} {record.passport_number}",
        )
    return table


def print_records(
    records: Sequence[PersonRecord],
    sort_mode: SortMode = SortMode.ID,
    page_size: Optional[int] = None,
    page_number: Optional[int] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render person records as a rich table.
    """
    console = console or Console()

    if not records:
        console.print("[yellow]No records found.[/yellow]")
        return

    console.print(build_table(records, sort_mode, page_size, page_number))


__all__ = ["build_table", "print_records"]
