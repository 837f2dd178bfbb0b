from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.engine import URL

from .errors import ConfigError, DatabaseRequiredError, UnknownPresetError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5432
DEFAULT_USER = "postgres"
DEFAULT_SCHEMA = "public"
DEFAULT_POLLING_INTERVAL_MS = 1000

SUPABASE_PORT = 54322
SUPABASE_DATABASE = "postgres"
SUPABASE_USER = "postgres"
SUPABASE_PASSWORD = "postgres"

MAX_ROWS_PER_TABLE = 1000
MAX_HISTORY_SIZE = 100
DEBOUNCE_MAX_ITERATIONS = 5
DEBOUNCE_INTERVAL_MS = 100
KEEPALIVE_INTERVAL_S = 5.0

INPUT_QUEUE_SIZE = 10
MAX_INLINE_DIFF_ROWS = 15
PROMPT_CLEAR_WIDTH = 60

PGPASSWORD_ENV = "PGPASSWORD"
DRIVER_NAME = "postgresql+psycopg2"


@dataclass
class ConnectionConfig:
    database: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    user: str = DEFAULT_USER
    password: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        """Validate connection parameters."""
        if not self.host:
            raise ConfigError("Host cannot be empty")
        if not self.database:
            raise DatabaseRequiredError()
        if not self.user:
            raise ConfigError("User cannot be empty")
        if not 0 < self.port < 65536:
            raise ConfigError(f"Port out of range: {self.port}")

    @classmethod
    def from_preset(cls, preset: str) -> "ConnectionConfig":
        """
        Build a connection for one of the local development presets.

        Raises:
            UnknownPresetError: If the preset name is not recognised
        """
        if preset in ("supabase", "supabase-local"):
            return cls(
                host=DEFAULT_HOST,
                port=SUPABASE_PORT,
                database=SUPABASE_DATABASE,
                user=SUPABASE_USER,
                password=SUPABASE_PASSWORD,
            )
        if preset in ("postgres", "pg"):
            return cls(
                host=DEFAULT_HOST,
                port=DEFAULT_PORT,
                database=SUPABASE_DATABASE,
                user=DEFAULT_USER,
                password=SUPABASE_PASSWORD,
            )
        raise UnknownPresetError(preset)

    def url(self) -> URL:
        return URL.create(
            DRIVER_NAME,
            username=self.user,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.database,
        )


@dataclass
class WatchConfig:
    connection: ConnectionConfig
    schema: str = DEFAULT_SCHEMA
    interval_ms: int = DEFAULT_POLLING_INTERVAL_MS
    interactive: bool = True
    debounce_interval_ms: int = DEBOUNCE_INTERVAL_MS
    debounce_max_iterations: int = DEBOUNCE_MAX_ITERATIONS
    max_rows_per_table: int = MAX_ROWS_PER_TABLE
    max_history: int = MAX_HISTORY_SIZE
    keepalive_interval_s: float = KEEPALIVE_INTERVAL_S
    metrics_port: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate polling parameters."""
        if self.interval_ms <= 0:
            raise ConfigError("Polling interval must be greater than 0")
        if self.debounce_interval_ms <= 0:
            raise ConfigError("debounce_interval_ms must be > 0")
        if self.debounce_max_iterations <= 0:
            raise ConfigError("debounce_max_iterations must be > 0")
        if self.max_rows_per_table <= 0:
            raise ConfigError("max_rows_per_table must be > 0")
        if self.max_history <= 0:
            raise ConfigError("max_history must be > 0")
        if self.keepalive_interval_s <= 0:
            raise ConfigError("keepalive_interval_s must be > 0")
        if not self.schema:
            raise ConfigError("Schema cannot be empty")

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000.0

    @property
    def debounce_interval_s(self) -> float:
        return self.debounce_interval_ms / 1000.0


def resolve_password(password: Optional[str]) -> str:
    """Explicit password, else $PGPASSWORD, else empty."""
    if password is not None:
        return password
    return os.environ.get(PGPASSWORD_ENV, "")
