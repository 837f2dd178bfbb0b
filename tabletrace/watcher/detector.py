from __future__ import annotations

from typing import List, Tuple

from ..models import ChangeKind, CounterSnapshot, TableCounters, TableId


def detect_changes(
    current: TableCounters,
    previous: TableCounters,
) -> List[Tuple[ChangeKind, int]]:
    """
    (kind, delta) for every counter that strictly increased since previous.

    A decrease (e.g. after pg_stat_reset()) is reported as no change.
    """
    detected: List[Tuple[ChangeKind, int]] = []
    if current.inserts > previous.inserts:
        detected.append((ChangeKind.INSERT, current.inserts - previous.inserts))
    if current.updates > previous.updates:
        detected.append((ChangeKind.UPDATE, current.updates - previous.updates))
    if current.deletes > previous.deletes:
        detected.append((ChangeKind.DELETE, current.deletes - previous.deletes))
    return detected


def detect_table_changes(
    current: CounterSnapshot,
    previous: CounterSnapshot,
    table: TableId,
) -> List[Tuple[ChangeKind, int]]:
    # the first observation of a table only establishes its baseline
    if table not in current or table not in previous:
        return []
    return detect_changes(current[table], previous[table])


def has_counter_changes(current: CounterSnapshot, previous: CounterSnapshot) -> bool:
    """True if any table present in both snapshots shows activity."""
    return any(
        detect_changes(counters, previous[table])
        for table, counters in current.items()
        if table in previous
    )
