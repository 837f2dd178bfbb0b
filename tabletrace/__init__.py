from .diff import compute_diffs, resolve_row_key
from .models import ChangeEvent, ChangeRecord, RowDiff, TableCounters, TableId
from .watcher.loop import Watcher

__all__ = [
    "Watcher",
    "compute_diffs",
    "resolve_row_key",
    "ChangeEvent",
    "ChangeRecord",
    "RowDiff",
    "TableCounters",
    "TableId",
]
