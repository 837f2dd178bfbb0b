from .catalog import PostgresSource, format_value
from .helpers import quote_identifier, quote_table
from .keeper import ConnectionKeeper, connect
from .session import DbSession
from .source import TableSource

__all__ = [
    "DbSession",
    "TableSource",
    "PostgresSource",
    "ConnectionKeeper",
    "connect",
    "format_value",
    "quote_identifier",
    "quote_table",
]
