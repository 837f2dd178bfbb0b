class TableTraceError(Exception):
    """Base exception for tabletrace errors."""


class ConfigError(TableTraceError):
    """Invalid connection or watch configuration."""


class UnknownPresetError(ConfigError):
    """Requested connection preset does not exist."""

    def __init__(self, preset: str) -> None:
        super().__init__(f"Unknown preset '{preset}'. Available: supabase, postgres")
        self.preset = preset


class DatabaseRequiredError(ConfigError):
    """No database name was given and no preset supplies one."""

    def __init__(self) -> None:
        super().__init__("Database name is required. Use --database or --preset")


class DbConnectionError(TableTraceError):
    """Failed to establish the initial database connection."""


class ConnectionLostError(DbConnectionError):
    """The connection keeper observed a dead connection mid-session."""


class CounterFetchError(TableTraceError):
    """Failed to read table activity counters. Fatal inside the watch loop."""


class RowFetchError(TableTraceError):
    """Failed to read the rows of a single table."""
