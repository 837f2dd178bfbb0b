from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from ..db.source import TableSource
from ..errors import RowFetchError
from ..models import Row, TableId

logger = logging.getLogger(__name__)


class RowSnapshotStore:
    """
    Last captured row set per watched table, keyed by "schema.table".

    Owned by the watch loop: read by a cycle's diff step, replaced right after.
    """

    def __init__(self) -> None:
        self._rows: Dict[str, List[Row]] = {}

    def get(self, table: TableId) -> List[Row]:
        return list(self._rows.get(table.qualified_name, []))

    def put(self, table: TableId, rows: List[Row]) -> None:
        self._rows[table.qualified_name] = list(rows)

    def clear(self) -> None:
        self._rows.clear()

    def __contains__(self, table: object) -> bool:
        return isinstance(table, TableId) and table.qualified_name in self._rows

    def __len__(self) -> int:
        return len(self._rows)


def take_snapshots(
    source: TableSource,
    tables: Iterable[TableId],
    store: RowSnapshotStore,
) -> None:
    """
    Capture baseline rows for each table.

    A table whose rows cannot be read is left out of the store; its first
    diff then runs against an empty baseline.
    """
    for table in tables:
        try:
            rows = source.fetch_rows(table)
        except RowFetchError as exc:
            logger.warning("Skipping baseline snapshot for %s: %s", table, exc)
            continue
        store.put(table, rows)
