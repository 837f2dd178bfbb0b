from __future__ import annotations

from tabletrace.models import ChangeKind, TableCounters, TableId
from tabletrace.watcher.detector import (
    detect_changes,
    detect_table_changes,
    has_counter_changes,
)

T1 = TableId("public", "a")
T2 = TableId("public", "b")


class TestDetectChanges:
    def test_no_change(self) -> None:
        counters = TableCounters(inserts=5, updates=3, deletes=1)
        assert detect_changes(counters, counters) == []

    def test_reports_each_increased_counter_with_delta(self) -> None:
        previous = TableCounters(inserts=5, updates=3, deletes=1)
        current = TableCounters(inserts=7, updates=3, deletes=4)

        assert detect_changes(current, previous) == [
            (ChangeKind.INSERT, 2),
            (ChangeKind.DELETE, 3),
        ]

    def test_all_three_kinds(self) -> None:
        detected = detect_changes(TableCounters(1, 1, 1), TableCounters())
        assert [kind for kind, _ in detected] == [
            ChangeKind.INSERT,
            ChangeKind.UPDATE,
            ChangeKind.DELETE,
        ]

    def test_counter_decrease_is_not_a_change(self) -> None:
        # pg_stat_reset() zeroes the counters
        assert detect_changes(TableCounters(0, 0, 0), TableCounters(10, 4, 2)) == []


class TestSnapshotHelpers:
    def test_table_missing_from_previous_is_baseline_only(self) -> None:
        current = {T1: TableCounters(inserts=3)}
        assert detect_table_changes(current, {}, T1) == []
        assert not has_counter_changes(current, {})

    def test_table_missing_from_current(self) -> None:
        previous = {T1: TableCounters()}
        assert detect_table_changes({}, previous, T1) == []

    def test_any_table_with_activity(self) -> None:
        previous = {T1: TableCounters(), T2: TableCounters()}
        current = {T1: TableCounters(), T2: TableCounters(updates=1)}

        assert has_counter_changes(current, previous)
        assert detect_table_changes(current, previous, T2) == [(ChangeKind.UPDATE, 1)]
        assert detect_table_changes(current, previous, T1) == []

    def test_identical_snapshots(self) -> None:
        snapshot = {T1: TableCounters(1, 2, 3)}
        assert not has_counter_changes(snapshot, dict(snapshot))
