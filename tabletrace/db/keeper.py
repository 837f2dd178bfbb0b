from __future__ import annotations

import logging
import threading
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..config import KEEPALIVE_INTERVAL_S
from ..errors import DbConnectionError
from ..state import SessionState

logger = logging.getLogger(__name__)


def connect(url: URL | str) -> Engine:
    """
    Create an engine and prove the database is reachable.

    Raises:
        DbConnectionError: If the first connection attempt fails
    """
    engine = create_engine(url, pool_pre_ping=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        engine.dispose()
        raise DbConnectionError(f"Database connection failed: {exc}") from exc
    return engine


class ConnectionKeeper:
    """
    Background liveness check for the watcher's database.

    Pings the database every `interval_s` seconds on a dedicated connection.
    The first failure is logged, flags `state.connection_lost` and ends the
    thread; the watch loop observes the flag and exits. There is no
    reconnect.
    """

    def __init__(
        self,
        engine: Engine,
        state: SessionState,
        interval_s: float = KEEPALIVE_INTERVAL_S,
    ) -> None:
        self.engine = engine
        self.state = state
        self.interval_s = interval_s
        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "ConnectionKeeper":
        if self._thread is not None:
            raise RuntimeError("ConnectionKeeper is already running")
        self._thread = threading.Thread(
            target=self._run, name="tabletrace-keeper", daemon=True
        )
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stopping.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def ping(self) -> bool:
        """One liveness check. Flags the session state on failure."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Connection error: %s", exc)
            self.state.connection_lost.set()
            return False
        return True

    def _run(self) -> None:
        while not self._stopping.wait(self.interval_s):
            if not self.ping():
                return
