from __future__ import annotations

import json
import sys
from datetime import datetime
from typing import Optional

import typer

from passport_office.config import get_settings
from passport_office.domain.models import SearchCriteria, SortMode
from passport_office.errors import RecordStoreError
from passport_office.reporter import print_records
from passport_office.repository import PersonRepository
from passport_office.stores.registry import available_stores, build_store
from passport_office.utils.logging import configure_logging

app = typer.Typer(help="Passport Office records CLI.")


def _repository(store: Optional[str]) -> PersonRepository:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return PersonRepository(build_store(store))


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"store={settings.store_backend} table={settings.persons_table} "
        f"page_size={settings.default_page_size} | "
        f"available stores: {', '.join(available_stores())}"
    )


@app.command()
def search(
    last_name: Optional[str] = typer.Option(None, "--last-name", "-l", help="Last name prefix."),
    first_name: Optional[str] = typer.Option(None, "--first-name", "-f", help="First name prefix."),
    middle_name: Optional[str] = typer.Option(None, "--middle-name", "-m", help="Middle name prefix."),
    passport_series: Optional[str] = typer.Option(None, "--series", help="Passport series prefix."),
    passport_number: Optional[str] = typer.Option(None, "--number", help="Passport number prefix."),
    birth_date: Optional[datetime] = typer.Option(
        None, "--birth-date", "-b", formats=["%Y-%m-%d"], help="Exact birth date (YYYY-MM-DD)."
    ),
    page_size: Optional[int] = typer.Option(
        None, "--page-size", "-s", help="Records per page (default from settings when --page is set)."
    ),
    page: Optional[int] = typer.Option(None, "--page", "-p", help="1-based page number."),
    full_sort: bool = typer.Option(
        False, "--full-sort", help="Order by name, birth date and passport instead of id."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print records as JSON."),
    store: Optional[str] = typer.Option(None, "--store", help="Store backend override."),
) -> None:
    """
    Search person records, optionally returning a single page.
    """
    criteria = SearchCriteria(
        first_name=first_name,
        last_name=last_name,
        middle_name=middle_name,
        passport_series=passport_series,
        passport_number=passport_number,
        birth_date=birth_date,
    )
    sort_mode = SortMode.FULL if full_sort else SortMode.ID

    with _repository(store) as repo:
        if page is None:
            records = repo.search_all(criteria, sort_mode)
        else:
            page_size = page_size if page_size is not None else get_settings().default_page_size
            records = repo.get_page(page_size, page, criteria, sort_mode)

    if as_json:
        typer.echo(json.dumps([record.model_dump(mode="json") for record in records], indent=2))
        return
    print_records(records, sort_mode, page_size, page)


@app.command()
def show(
    record_id: int = typer.Argument(..., help="Record id."),
    store: Optional[str] = typer.Option(None, "--store", help="Store backend override."),
) -> None:
    """
    Show one record by id.
    """
    with _repository(store) as repo:
        record = repo.get_by_id(record_id)
    if record is None:
        typer.echo(f"No record with id {record_id}.", err=True)
        raise typer.Exit(code=1)
    typer.echo(record.model_dump_json(indent=2))


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", help="Confirm deletion of every record."),
    store: Optional[str] = typer.Option(None, "--store", help="Store backend override."),
) -> None:
    """
    Delete every person record.
    """
    if not yes:
        typer.echo("Refusing to delete all records without --yes.", err=True)
        raise typer.Exit(code=2)
    with _repository(store) as repo:
        repo.remove_all()
    typer.echo("All records removed.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
    except RecordStoreError as exc:
        typer.echo(f"Record store error: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
