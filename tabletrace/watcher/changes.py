from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Set

from ..db.source import TableSource
from ..diff import compute_diffs
from ..errors import RowFetchError
from ..models import ChangeEvent, ChangeKind, CounterSnapshot, RowDiff, TableId
from .detector import detect_table_changes
from .metrics import observe_row_diffs, observe_row_fetch_failure
from .snapshot import RowSnapshotStore

logger = logging.getLogger(__name__)

DEFAULT_KEY_COLUMN = "id"


@dataclass
class CycleResult:
    diffs: List[RowDiff] = field(default_factory=list)
    tables: List[str] = field(default_factory=list)
    change_kinds: Set[ChangeKind] = field(default_factory=set)
    total_rows: int = 0


def diff_table(
    source: TableSource,
    table: TableId,
    store: RowSnapshotStore,
) -> List[RowDiff]:
    """
    Fetch fresh rows for one table, diff them against the stored snapshot and
    replace the snapshot.

    Row fetch and key lookup failures degrade to an empty row set and the
    "id" key column so one bad table does not abort the cycle.
    """
    try:
        new_rows = source.fetch_rows(table)
    except RowFetchError as exc:
        logger.warning("Row fetch failed for %s, treating as empty: %s", table, exc)
        observe_row_fetch_failure(table.qualified_name)
        new_rows = []

    old_rows = store.get(table)
    key_column = source.lookup_primary_key(table) or DEFAULT_KEY_COLUMN

    diffs = compute_diffs(old_rows, new_rows, key_column)
    for diff in diffs:
        diff.table = table.qualified_name

    store.put(table, new_rows)
    observe_row_diffs(table.qualified_name, diffs)
    return diffs


def collect_cycle_changes(
    settled: CounterSnapshot,
    previous: CounterSnapshot,
    store: RowSnapshotStore,
    source: TableSource,
) -> CycleResult:
    """
    Diff every table whose settled counters moved since the previous cycle.
    """
    result = CycleResult()

    for table in sorted(settled):
        detected = detect_table_changes(settled, previous, table)
        if not detected:
            continue

        result.diffs.extend(diff_table(source, table, store))

        for kind, count in detected:
            result.total_rows += count
            result.change_kinds.add(kind)

        if table.qualified_name not in result.tables:
            result.tables.append(table.qualified_name)

    return result


def build_change_event(
    change_id: int,
    tables: List[str],
    change_kinds: Iterable[ChangeKind],
    total_rows: int,
    timestamp: Optional[datetime] = None,
) -> ChangeEvent:
    change_type = "+".join(sorted(kind.value for kind in change_kinds))
    table_label = tables[0] if len(tables) == 1 else f"{len(tables)} tables"

    return ChangeEvent(
        id=change_id,
        timestamp=timestamp or datetime.now(),
        table=table_label,
        change_type=change_type,
        row_count=total_rows,
    )
