from __future__ import annotations

from ..models import TableId


def quote_identifier(name: str, identifier_type: str = "identifier") -> str:
    """
    Quote a PostgreSQL identifier for interpolation into SQL text.

    Table names come from pg_stat_user_tables rather than from the user, but
    they can still contain any character, so they are always double-quoted
    with embedded quotes doubled.

    Raises:
        TypeError: If the identifier is not a string
        ValueError: If the identifier is empty or contains a NUL byte

    Example:
        >>> quote_identifier("orders", "table")
        '"orders"'
        >>> quote_identifier('odd"name', "table")
        '"odd""name"'
    """
    if not isinstance(name, str):
        raise TypeError(f"{identifier_type} must be a string, got {type(name).__name__}")

    if not name:
        raise ValueError(f"{identifier_type} cannot be empty")

    if "\x00" in name:
        raise ValueError(f"Invalid {identifier_type} {name!r}: contains a NUL byte")

    return '"' + name.replace('"', '""') + '"'


def quote_table(table: TableId) -> str:
    """Schema-qualified, quoted table reference."""
    return f"{quote_identifier(table.schema, 'schema')}.{quote_identifier(table.table, 'table')}"
