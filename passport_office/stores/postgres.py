"""
PostgreSQL record store.

Compiles composed person queries to SQL with `psycopg.sql` and runs them on
connections borrowed from a psycopg_pool ConnectionPool. Each `session()`
holds one pooled connection for its duration; the pool commits on clean exit
and rolls back when the block raises.

Prefix filters use `starts_with()` (case-sensitive) and text columns sort with
`COLLATE "C"` so results order by code point, the same as the in-memory store.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

import psycopg
from psycopg import Connection, sql
from psycopg.rows import class_row
from psycopg_pool import ConnectionPool, PoolTimeout

from passport_office.config import get_settings
from passport_office.domain.models import PersonRecord
from passport_office.errors import RecordStoreError, StoreClosedError, StoreUnavailableError
from passport_office.infrastructure.db_factory import apply_statement_timeout, get_sync_pool
from passport_office.query.composer import FilterKind, PersonQuery
from passport_office.stores.abstract import AbstractRecordStore
from passport_office.utils.logging import get_logger

log = get_logger(__name__)

COLUMNS: tuple[str, ...] = (
    "id",
    "first_name",
    "last_name",
    "middle_name",
    "birth_date",
    "passport_series",
    "passport_number",
)
_UNCOLLATED = frozenset({"id", "birth_date"})


def _table_identifier(table: str) -> sql.Identifier:
    return sql.Identifier(*table.split("."))


def _column_list(columns: Iterable[str]) -> sql.Composed:
    return sql.SQL(", ").join(sql.Identifier(column) for column in columns)


def build_where(query: PersonQuery) -> tuple[Optional[sql.Composed], list[Any]]:
    """
    Translate query filters into a WHERE predicate and its parameters.

    Returns (None, []) when the query has no filters.
    """
    clauses: list[sql.Composable] = []
    params: list[Any] = []
    for field_filter in query.filters:
        column = sql.Identifier(field_filter.field)
        if field_filter.kind is FilterKind.CALENDAR_DATE:
            clauses.append(sql.SQL("CAST({} AS date) = %s").format(column))
        else:
            clauses.append(sql.SQL("starts_with({}, %s)").format(column))
        params.append(field_filter.value)
    if not clauses:
        return None, params
    return sql.SQL(" AND ").join(clauses), params


def build_order_by(query: PersonQuery) -> sql.Composed:
    keys = []
    for column in query.sort_keys:
        if column in _UNCOLLATED:
            keys.append(sql.SQL("{} ASC").format(sql.Identifier(column)))
        else:
            keys.append(sql.SQL('{} COLLATE "C" ASC').format(sql.Identifier(column)))
    return sql.SQL("ORDER BY ") + sql.SQL(", ").join(keys)


def build_select(table: str, query: PersonQuery) -> tuple[sql.Composed, list[Any]]:
    """
    Compose the full SELECT for a person query.

    Parameters
    ----------
    table : str
        Table name, optionally schema-qualified (``public.person_info``).
    query : PersonQuery
        Filters, ordering and optional page window.

    Returns
    -------
    tuple[sql.Composed, list]
        Statement and positional parameters, in placeholder order.
    """
    statement = sql.SQL("SELECT {columns} FROM {table}").format(
        columns=_column_list(COLUMNS), table=_table_identifier(table)
    )
    where, params = build_where(query)
    if where is not None:
        statement = statement + sql.SQL(" WHERE ") + where
    statement = statement + sql.SQL(" ") + build_order_by(query)
    if query.window is not None:
        statement = statement + sql.SQL(" LIMIT %s OFFSET %s")
        params.extend([query.window.limit, query.window.offset])
    return statement, params


class PostgresSession:
    """
    Session bound to one pooled connection.
    """

    def __init__(self, conn: Connection, table: str, statement_timeout_ms: int) -> None:
        self._conn = conn
        self._table = table
        self._statement_timeout_ms = statement_timeout_ms
        self._released = False
        self._begin()

    def _begin(self) -> None:
        with self._conn.cursor() as cur:
            apply_statement_timeout(cur, self._statement_timeout_ms)

    def _cursor(self) -> psycopg.Cursor[PersonRecord]:
        if self._released:
            raise StoreClosedError("PostgreSQL session used after release")
        return self._conn.cursor(row_factory=class_row(PersonRecord))

    def fetch(self, query: PersonQuery) -> list[PersonRecord]:
        statement, params = build_select(self._table, query)
        with self._cursor() as cur:
            cur.execute(statement, params)
            return cur.fetchall()

    def find_by_id(self, record_id: int) -> Optional[PersonRecord]:
        statement = sql.SQL("SELECT {columns} FROM {table} WHERE {id} = %s").format(
            columns=_column_list(COLUMNS),
            table=_table_identifier(self._table),
            id=sql.Identifier("id"),
        )
        with self._cursor() as cur:
            cur.execute(statement, (record_id,))
            return cur.fetchone()

    def insert(self, records: Iterable[PersonRecord]) -> list[PersonRecord]:
        inserted: list[PersonRecord] = []
        explicit_ids = False
        with self._cursor() as cur:
            for record in records:
                explicit_ids = explicit_ids or record.id is not None
                values = record.model_dump(exclude_none=True)
                columns = [column for column in COLUMNS if column in values]
                statement = sql.SQL(
                    "INSERT INTO {table} ({columns}) VALUES ({values}) RETURNING {returning}"
                ).format(
                    table=_table_identifier(self._table),
                    columns=_column_list(columns),
                    values=sql.SQL(", ").join(sql.Placeholder() for _ in columns),
                    returning=_column_list(COLUMNS),
                )
                cur.execute(statement, [values[column] for column in columns])
                inserted.append(cur.fetchone())
            if explicit_ids:
                self._advance_id_sequence(cur)
        return inserted

    def _advance_id_sequence(self, cur: psycopg.Cursor) -> None:
        # Explicit ids bypass the serial sequence; move it past the highest id.
        statement = sql.SQL(
            "SELECT setval(pg_get_serial_sequence(%s, %s), GREATEST((SELECT MAX({id}) FROM {table}), 1))"
        ).format(id=sql.Identifier("id"), table=_table_identifier(self._table))
        cur.execute(statement, (self._table, "id"))

    def delete_all(self) -> int:
        statement = sql.SQL("DELETE FROM {table}").format(table=_table_identifier(self._table))
        with self._cursor() as cur:
            cur.execute(statement)
            return cur.rowcount

    def commit(self) -> None:
        if self._released:
            raise StoreClosedError("PostgreSQL session used after release")
        self._conn.commit()
        self._begin()

    def release(self) -> None:
        self._released = True


class PostgresRecordStore(AbstractRecordStore):
    """
    Record store backed by a PostgreSQL table.

    Uses the shared pool from PoolManager unless a DSN override is given, in
    which case the store owns (and closes) a dedicated pool.
    """

    name: str = "postgres"
    description: str = "PostgreSQL table via psycopg connection pool."

    def __init__(
        self,
        table: Optional[str] = None,
        statement_timeout_ms: Optional[int] = None,
        dsn_override: Optional[str] = None,
        pool: Optional[ConnectionPool] = None,
    ) -> None:
        settings = get_settings()
        self.table = table or settings.persons_table
        self.statement_timeout_ms = (
            settings.db_statement_timeout_ms
            if statement_timeout_ms is None
            else statement_timeout_ms
        )
        self._dsn_override = dsn_override
        self._pool_instance: Optional[ConnectionPool] = pool
        self._owns_pool = False
        self._closed = False

    def _get_pool(self) -> ConnectionPool:
        if self._pool_instance is not None:
            return self._pool_instance
        if self._dsn_override:
            settings = get_settings()
            self._pool_instance = ConnectionPool(
                conninfo=self._dsn_override,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                open=True,
            )
            self._owns_pool = True
        else:
            self._pool_instance = get_sync_pool()
        return self._pool_instance

    @contextmanager
    def session(self) -> Iterator[PostgresSession]:
        """
        Borrow a pooled connection for the duration of the block.

        Driver errors are re-raised as RecordStoreError subclasses with the
        original exception chained.
        """
        if self._closed:
            raise StoreClosedError("PostgreSQL store is closed")
        try:
            with self._get_pool().connection() as conn:
                session = PostgresSession(conn, self.table, self.statement_timeout_ms)
                try:
                    yield session
                finally:
                    session.release()
        except PoolTimeout as exc:
            raise StoreUnavailableError(f"No database connection available: {exc}") from exc
        except psycopg.errors.QueryCanceled as exc:
            raise RecordStoreError(f"Statement cancelled: {exc}") from exc
        except (psycopg.OperationalError, psycopg.InterfaceError) as exc:
            raise StoreUnavailableError(f"Database unavailable: {exc}") from exc
        except psycopg.Error as exc:
            raise RecordStoreError(f"Database error: {exc}") from exc

    def close(self) -> None:
        if self._owns_pool and self._pool_instance is not None:
            self._pool_instance.close()
        self._pool_instance = None
        self._closed = True
        log.debug("PostgreSQL store closed", extra={"store": self.name, "table": self.table})


__all__ = [
    "COLUMNS",
    "PostgresRecordStore",
    "PostgresSession",
    "build_order_by",
    "build_select",
    "build_where",
]
