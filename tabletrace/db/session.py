from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine, Result
from sqlalchemy.sql import TextClause


class DbSession:
    """
    Read-only transactional wrapper around a SQLAlchemy Engine connection.

    Every session runs in its own transaction, which is always rolled back on
    exit: the watcher never writes, and a fresh transaction per poll makes
    PostgreSQL hand out fresh statistics instead of a cached snapshot.

    Use as:
        with DbSession(engine) as session:
            rows = session.fetch_all(...)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._conn: Connection | None = None
        self._tx = None

    def __enter__(self) -> "DbSession":
        if self._conn is not None:
            raise RuntimeError("DbSession is already active; nested sessions are not allowed")
        self._conn = self.engine.connect()
        self._tx = self._conn.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._tx is not None and self._tx.is_active:
                self._tx.rollback()
        finally:
            if self._conn is not None:
                self._conn.close()

            self._conn = None
            self._tx = None

        # propagate exceptions (if any)
        return False

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("DbSession is not active; use within a context manager")
        return self._conn

    def _execute(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None,
    ) -> Result:
        conn = self._connection()
        stmt = text(sql) if isinstance(sql, str) else sql
        return conn.execute(stmt, dict(params or {}))

    def execute_scalar(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Execute a statement expected to return a single scalar value.
        """
        result = self._execute(sql, params)
        try:
            return result.scalar_one_or_none()
        finally:
            result.close()

    def fetch_one(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        Execute a SELECT expected to return 0 or 1 row. Raises if more than one row.
        """
        result = self._execute(sql, params)
        try:
            row = result.mappings().one_or_none()
            if row is None:
                return None
            return dict(row)
        finally:
            result.close()

    def fetch_all(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Execute a SELECT returning multiple rows, each as a column-ordered dict.
        """
        result = self._execute(sql, params)
        try:
            return [dict(row) for row in result.mappings()]
        finally:
            result.close()
