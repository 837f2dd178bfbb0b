from __future__ import annotations

import datetime as dt
import json
import logging
import time
import uuid
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..config import MAX_ROWS_PER_TABLE
from ..errors import CounterFetchError, DbConnectionError, RowFetchError
from ..models import NULL, UNKNOWN_VALUE, CounterSnapshot, Row, TableCounters, TableId
from .helpers import quote_table
from .metrics import observe_counter_fetch
from .session import DbSession

logger = logging.getLogger(__name__)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"

ALL_TABLES_SQL = (
    "SELECT schemaname, relname FROM pg_stat_user_tables "
    "ORDER BY schemaname, relname"
)

SCHEMA_TABLES_SQL = (
    "SELECT schemaname, relname FROM pg_stat_user_tables "
    "WHERE schemaname = :schema ORDER BY schemaname, relname"
)

COUNTERS_SQL = (
    "SELECT COALESCE(n_tup_ins, 0) AS inserts, "
    "COALESCE(n_tup_upd, 0) AS updates, "
    "COALESCE(n_tup_del, 0) AS deletes "
    "FROM pg_stat_user_tables WHERE schemaname = :schema AND relname = :table"
)

PRIMARY_KEY_SQL = """
    SELECT a.attname
    FROM pg_index i
    JOIN pg_attribute a ON a.attrelid = i.indrelid AND a.attnum = ANY(i.indkey)
    WHERE i.indrelid = CAST(:relation AS regclass) AND i.indisprimary
    LIMIT 1
"""


def format_value(value: Any) -> str:
    """
    Render a column value for display and comparison.

    NULL becomes "NULL", floats use two decimals, timestamps use
    "YYYY-MM-DD HH:MM:SS" (aware ones in UTC), JSON is compact, and anything
    without a rendering rule becomes "?".
    """
    if value is None:
        return NULL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:.2f}"
    if isinstance(value, (Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt.timezone.utc)
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, dt.date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, dt.time):
        return value.strftime(TIME_FORMAT)
    if isinstance(value, (dict, list)):
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError):
            return UNKNOWN_VALUE
    return UNKNOWN_VALUE


class PostgresSource:
    """
    TableSource backed by PostgreSQL's cumulative statistics views.

    Each call opens its own short read-only DbSession.
    """

    def __init__(self, engine: Engine, max_rows: int = MAX_ROWS_PER_TABLE) -> None:
        self.engine = engine
        self.max_rows = max_rows

    def list_tables(self, schema: str) -> List[TableId]:
        """
        Raises:
            DbConnectionError: If the catalog cannot be read
        """
        try:
            with DbSession(self.engine) as session:
                if schema.lower() == "all":
                    rows = session.fetch_all(ALL_TABLES_SQL)
                else:
                    rows = session.fetch_all(SCHEMA_TABLES_SQL, {"schema": schema})
        except SQLAlchemyError as exc:
            raise DbConnectionError(f"Failed to list tables: {exc}") from exc

        return [TableId(row["schemaname"], row["relname"]) for row in rows]

    def fetch_counters(self, tables: Sequence[TableId]) -> CounterSnapshot:
        """
        Raises:
            CounterFetchError: On any database error or a table without statistics
        """
        start_time = time.monotonic()
        status = "success"
        counters: CounterSnapshot = {}

        try:
            with DbSession(self.engine) as session:
                for table in tables:
                    row = session.fetch_one(
                        COUNTERS_SQL, {"schema": table.schema, "table": table.table}
                    )
                    if row is None:
                        raise CounterFetchError(f"No statistics found for {table}")
                    counters[table] = TableCounters(
                        inserts=int(row["inserts"]),
                        updates=int(row["updates"]),
                        deletes=int(row["deletes"]),
                    )
        except SQLAlchemyError as exc:
            status = "error"
            raise CounterFetchError(str(exc)) from exc
        except CounterFetchError:
            status = "error"
            raise
        finally:
            observe_counter_fetch(status, time.monotonic() - start_time)

        return counters

    def lookup_primary_key(self, table: TableId) -> Optional[str]:
        try:
            with DbSession(self.engine) as session:
                return session.execute_scalar(
                    PRIMARY_KEY_SQL, {"relation": quote_table(table)}
                )
        except SQLAlchemyError as exc:
            logger.debug("Primary key lookup failed for %s: %s", table, exc)
            return None

    def fetch_rows(self, table: TableId) -> List[Row]:
        """
        Raises:
            RowFetchError: On any database error
        """
        sql = f"SELECT * FROM {quote_table(table)} LIMIT :limit"
        try:
            with DbSession(self.engine) as session:
                rows = session.fetch_all(sql, {"limit": self.max_rows})
        except SQLAlchemyError as exc:
            raise RowFetchError(f"Failed to fetch rows from {table}: {exc}") from exc

        return [
            {column: format_value(value) for column, value in row.items()}
            for row in rows
        ]
