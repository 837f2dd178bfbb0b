from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

# column name -> display-formatted value, in column order
Row = Dict[str, str]

NULL = "NULL"
UNKNOWN_VALUE = "?"


@dataclass(frozen=True, order=True)
class TableId:
    schema: str
    table: str

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.table}"

    def __str__(self) -> str:
        return self.qualified_name


@dataclass(frozen=True)
class TableCounters:
    """
    Cumulative tuple counters for one table (pg_stat_user_tables).
    """
    inserts: int = 0
    updates: int = 0
    deletes: int = 0


CounterSnapshot = Dict[TableId, TableCounters]


class ChangeKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class DiffKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass
class RowDiff:
    """
    One changed logical row between two snapshots of a table.
    """
    key_column: str
    key_value: str
    kind: DiffKind
    old_row: Optional[Row] = None
    new_row: Optional[Row] = None
    changed_columns: List[str] = field(default_factory=list)
    # qualified table name; filled in by the watch loop
    table: str = ""


@dataclass
class ChangeEvent:
    id: int
    timestamp: datetime
    table: str
    change_type: str
    row_count: int


@dataclass
class ChangeRecord:
    change: ChangeEvent
    diffs: List[RowDiff] = field(default_factory=list)
