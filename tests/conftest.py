"""
Pytest configuration for the Passport Office records backend.

Provides fixtures for:
- Sample person records and an in-memory store/repository over them
- Database connection management for integration tests
- Settings override for integration tests
"""

from __future__ import annotations

import os
import random
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Generator

import psycopg
import pytest

from passport_office.config import Settings
from passport_office.domain.models import PersonRecord
from passport_office.repository import PersonRepository
from passport_office.stores.memory import InMemoryRecordStore


def make_person(
    id: int | None = None,
    last: str = "Smith",
    first: str = "Ann",
    middle: str = "",
    birth: date | datetime = date(1990, 1, 1),
    series: str = "AB",
    number: str = "100",
) -> PersonRecord:
    return PersonRecord(
        id=id,
        first_name=first,
        last_name=last,
        middle_name=middle,
        birth_date=birth,
        passport_series=series,
        passport_number=number,
    )


@pytest.fixture
def person_factory():
    """Builder for PersonRecord with overridable defaults."""
    return make_person


@pytest.fixture
def scenario_people() -> list[PersonRecord]:
    """The three-record scenario: two Smiths and a Jones."""
    return [
        make_person(1, last="Smith", first="Ann", series="AB", number="100"),
        make_person(2, last="Smith", first="Bob", series="AB", number="200"),
        make_person(3, last="Jones", first="Cy", series="CD", number="300"),
    ]


@pytest.fixture
def crowd() -> list[PersonRecord]:
    """
    Sixty seeded pseudo-random records with deliberate collisions on names,
    passport prefixes and birth dates.
    """
    rng = random.Random(7)
    last_names = ["Smith", "Smirnov", "Jones", "Jonsson", "smith", "Orlov"]
    first_names = ["Ann", "Anna", "Bob", "Boris", "Cy"]
    middle_names = ["", "Lee", "Leeann", "Petrovna"]
    series = ["AB", "AC", "ab", "CD", "C-D"]
    people = []
    for index in range(1, 61):
        birth = datetime(1980, 1, 1) + timedelta(days=rng.randrange(6), hours=rng.randrange(24))
        people.append(
            make_person(
                index,
                last=rng.choice(last_names),
                first=rng.choice(first_names),
                middle=rng.choice(middle_names),
                birth=birth,
                series=rng.choice(series),
                number=f"{rng.randrange(3)}{rng.randrange(100):02d}",
            )
        )
    rng.shuffle(people)
    return people


@pytest.fixture
def memory_store(scenario_people: list[PersonRecord]) -> InMemoryRecordStore:
    return InMemoryRecordStore(scenario_people)


@pytest.fixture
def repository(memory_store: InMemoryRecordStore) -> Generator[PersonRepository, None, None]:
    repo = PersonRepository(memory_store)
    try:
        yield repo
    finally:
        repo.close()


@pytest.fixture
def crowd_repository(crowd: list[PersonRecord]) -> Generator[PersonRepository, None, None]:
    repo = PersonRepository(InMemoryRecordStore(crowd))
    try:
        yield repo
    finally:
        repo.close()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "passport_office"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the person table exists by running db/init.sql (idempotent).
    """
    init_sql_path = Path(__file__).parent.parent / "db" / "init.sql"
    with db_connection.cursor() as cur:
        cur.execute(init_sql_path.read_text(encoding="utf-8"))
    db_connection.commit()
    return True


@pytest.fixture(scope="function")
def clean_persons_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the person table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.person_info RESTART IDENTITY;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.person_info RESTART IDENTITY;")
    db_connection.commit()
