"""
Data generation and loading script for the Passport Office records backend.

Implements deterministic pseudo-random person generation, CSV emission, and
Postgres COPY loading into the person table.
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
from datetime import date, timedelta
from pathlib import Path

import typer
from psycopg import sql

from passport_office.config import get_settings
from passport_office.infrastructure.db_factory import build_dsn, get_sync_connection

app = typer.Typer(help="Generate synthetic person records and load into Postgres (CSV + COPY).")

CSV_COLUMNS = [
    "first_name",
    "last_name",
    "middle_name",
    "birth_date",
    "passport_series",
    "passport_number",
]

_FIRST_NAMES = ["Anna", "Boris", "Daria", "Ivan", "Maria", "Oleg", "Pavel", "Sofia", "Yuri", "Zoya"]
_LAST_NAMES = ["Ivanov", "Kuznetsov", "Morozov", "Orlov", "Petrov", "Smirnov", "Sokolov", "Volkov"]
_MIDDLE_NAMES = ["Andreevich", "Borisovna", "Igorevich", "Olegovna", "Pavlovich", "Sergeevna", ""]
_EPOCH = date(1940, 1, 1)
_BIRTH_SPAN_DAYS = 365 * 65


def _build_dsn(dsn_override: str | None) -> str:
    if dsn_override:
        return dsn_override
    return build_dsn()


def _generate_rows_csv(csv_path: Path, rows: int, batch_size: int, seed: int) -> None:
    rng = random.Random(seed)

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)

        buffer: list[list[str]] = []
        for _ in range(rows):
            birth_date = _EPOCH + timedelta(days=rng.randrange(_BIRTH_SPAN_DAYS))
            buffer.append(
                [
                    rng.choice(_FIRST_NAMES),
                    rng.choice(_LAST_NAMES),
                    rng.choice(_MIDDLE_NAMES),
                    birth_date.isoformat(),
                    f"{rng.randint(10, 99)}{rng.randint(0, 99):02d}",
                    f"{rng.randint(0, 999_999):06d}",
                ]
            )
            if len(buffer) >= batch_size:
                writer.writerows(buffer)
                buffer.clear()
        if buffer:
            writer.writerows(buffer)


def _copy_into_db(dsn: str, csv_path: Path, table: str | None = None) -> int:
    table_name = table or get_settings().persons_table
    statement = sql.SQL("COPY {table} ({columns}) FROM STDIN WITH (FORMAT csv, HEADER TRUE)").format(
        table=sql.Identifier(*table_name.split(".")),
        columns=sql.SQL(", ").join(sql.Identifier(column) for column in CSV_COLUMNS),
    )
    with get_sync_connection(dsn) as conn:
        with conn.cursor() as cur:
            with cur.copy(statement) as copy:
                with csv_path.open("r", encoding="utf-8") as f:
                    for line in f:
                        copy.write(line)
            loaded = cur.rowcount
        conn.commit()
    return loaded


@app.command()
def main(
    rows: int = typer.Option(
        10_000,
        "--rows",
        "-r",
        help="Number of person records to generate.",
    ),
    batch_size: int = typer.Option(
        1_000,
        "--batch-size",
        "-b",
        help="Batch size for CSV buffering during generation.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional CSV output path (if omitted, a temp file will be used).",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
    no_load: bool = typer.Option(
        False,
        "--no-load",
        help="Only generate CSV; skip loading into Postgres.",
    ),
) -> None:
    """
    Generate synthetic person records and optionally load them using COPY.
    """
    start = time.perf_counter()
    if output:
        csv_path = output
        csv_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        tmpdir = Path(tempfile.mkdtemp(prefix="passport_office_csv_"))
        csv_path = tmpdir / "persons.csv"

    typer.echo(f"Generating {rows:,} persons -> {csv_path} (batch={batch_size}, seed={seed})")
    _generate_rows_csv(csv_path, rows=rows, batch_size=batch_size, seed=seed)
    gen_duration = time.perf_counter() - start
    typer.echo(f"CSV generation completed in {gen_duration:.2f}s")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    load_start = time.perf_counter()
    typer.echo("Loading CSV into Postgres via COPY...")
    loaded = _copy_into_db(_build_dsn(dsn), csv_path)
    load_duration = time.perf_counter() - load_start
    typer.echo(f"Loaded {loaded:,} rows in {load_duration:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
