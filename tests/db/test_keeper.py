from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from tabletrace.db import keeper as keeper_module
from tabletrace.db.keeper import ConnectionKeeper, connect
from tabletrace.errors import DbConnectionError
from tabletrace.state import SessionState


def _error() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection reset"))


class TestConnect:
    def test_unreachable_database(self, monkeypatch) -> None:
        engine = MagicMock()
        engine.connect.side_effect = _error()
        monkeypatch.setattr(keeper_module, "create_engine", MagicMock(return_value=engine))

        with pytest.raises(DbConnectionError) as exc_info:
            connect("postgresql+psycopg2://nobody@127.0.0.1:1/none")

        assert "Database connection failed" in str(exc_info.value)
        engine.dispose.assert_called_once()

    def test_returns_engine(self, monkeypatch) -> None:
        engine = MagicMock()
        monkeypatch.setattr(keeper_module, "create_engine", MagicMock(return_value=engine))

        assert connect("postgresql+psycopg2://app@localhost/app") is engine
        engine.dispose.assert_not_called()


class TestConnectionKeeper:
    def test_ping_success(self) -> None:
        state = SessionState()
        assert ConnectionKeeper(MagicMock(), state).ping() is True
        assert not state.connection_lost.is_set()

    def test_ping_failure_flags_state(self, caplog) -> None:
        engine = MagicMock()
        engine.connect.side_effect = _error()
        state = SessionState()

        with caplog.at_level("ERROR"):
            assert ConnectionKeeper(engine, state).ping() is False

        assert state.connection_lost.is_set()
        assert "Connection error" in caplog.text

    def test_thread_stops_after_first_failure(self) -> None:
        engine = MagicMock()
        engine.connect.side_effect = _error()
        state = SessionState()

        keeper = ConnectionKeeper(engine, state, interval_s=0.01).start()

        assert state.connection_lost.wait(timeout=2)
        keeper.join(timeout=2)
        assert engine.connect.call_count == 1

    def test_stop(self) -> None:
        engine = MagicMock()
        keeper = ConnectionKeeper(engine, SessionState(), interval_s=10).start()

        keeper.stop()
        keeper.join(timeout=2)

        engine.connect.assert_not_called()

    def test_start_twice(self) -> None:
        keeper = ConnectionKeeper(MagicMock(), SessionState(), interval_s=10).start()
        try:
            with pytest.raises(RuntimeError):
                keeper.start()
        finally:
            keeper.stop()
