from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from ..models import CounterSnapshot, Row, TableId


class TableSource(Protocol):
    """
    Read-side capabilities the watch loop needs from a database.
    """

    def list_tables(self, schema: str) -> List[TableId]:
        """Tables with activity statistics in `schema` ("all" for every schema)."""
        ...

    def fetch_counters(self, tables: Sequence[TableId]) -> CounterSnapshot:
        """Cumulative insert/update/delete counters. Raises CounterFetchError."""
        ...

    def lookup_primary_key(self, table: TableId) -> Optional[str]:
        """First primary-key column, or None if absent or the lookup failed."""
        ...

    def fetch_rows(self, table: TableId) -> List[Row]:
        """Display-formatted rows, capped at the row limit. Raises RowFetchError."""
        ...
