from .changes import CycleResult, build_change_event, collect_cycle_changes, diff_table
from .debounce import Debouncer
from .detector import detect_changes, detect_table_changes, has_counter_changes
from .history import ChangeHistory
from .loop import Watcher
from .snapshot import RowSnapshotStore, take_snapshots

__all__ = [
    "Watcher",
    "Debouncer",
    "ChangeHistory",
    "RowSnapshotStore",
    "CycleResult",
    "build_change_event",
    "collect_cycle_changes",
    "diff_table",
    "detect_changes",
    "detect_table_changes",
    "has_counter_changes",
    "take_snapshots",
]
