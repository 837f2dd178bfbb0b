from __future__ import annotations

from sqlalchemy import text

from tabletrace.db.catalog import PostgresSource
from tabletrace.db.session import DbSession
from tabletrace.models import TableCounters


def test_session_rolls_back(pg_engine, pg_table_factory) -> None:
    table = pg_table_factory("id SERIAL PRIMARY KEY, name TEXT")

    with DbSession(pg_engine) as session:
        session._connection().execute(text(f'INSERT INTO "{table.table}" (name) VALUES (\'a\')'))

    with DbSession(pg_engine) as session:
        assert session.execute_scalar(f'SELECT COUNT(*) FROM "{table.table}"') == 0


def test_list_tables(pg_engine, pg_table_factory) -> None:
    table = pg_table_factory("id SERIAL PRIMARY KEY")
    source = PostgresSource(pg_engine)

    assert table in source.list_tables("public")
    assert table in source.list_tables("ALL")
    assert table not in source.list_tables("no_such_schema")


def test_lookup_primary_key(pg_engine, pg_table_factory) -> None:
    with_pk = pg_table_factory("code TEXT PRIMARY KEY, label TEXT")
    without_pk = pg_table_factory("label TEXT")
    source = PostgresSource(pg_engine)

    assert source.lookup_primary_key(with_pk) == "code"
    assert source.lookup_primary_key(without_pk) is None


def test_fetch_rows_formats_values(pg_engine, pg_table_factory) -> None:
    table = pg_table_factory(
        "id SERIAL PRIMARY KEY, name TEXT, score DOUBLE PRECISION, active BOOLEAN, note TEXT"
    )
    with pg_engine.begin() as conn:
        conn.execute(
            text(
                f'INSERT INTO "{table.table}" (name, score, active, note) '
                "VALUES ('alice', 1.5, true, NULL)"
            )
        )

    rows = PostgresSource(pg_engine).fetch_rows(table)

    assert rows == [
        {"id": "1", "name": "alice", "score": "1.50", "active": "true", "note": "NULL"}
    ]
    assert list(rows[0]) == ["id", "name", "score", "active", "note"]


def test_fetch_rows_is_capped(pg_engine, pg_table_factory) -> None:
    table = pg_table_factory("id SERIAL PRIMARY KEY")
    with pg_engine.begin() as conn:
        conn.execute(text(f'INSERT INTO "{table.table}" SELECT generate_series(1, 20)'))

    assert len(PostgresSource(pg_engine, max_rows=5).fetch_rows(table)) == 5


def test_fetch_counters(pg_engine, pg_table_factory) -> None:
    table = pg_table_factory("id SERIAL PRIMARY KEY")

    counters = PostgresSource(pg_engine).fetch_counters([table])

    assert isinstance(counters[table], TableCounters)
    assert counters[table].inserts >= 0
