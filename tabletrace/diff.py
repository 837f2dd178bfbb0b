from __future__ import annotations

from typing import Dict, List, Sequence

from .models import NULL, DiffKind, Row, RowDiff

FALLBACK_KEY_COLUMNS = ("id", "uuid", "pk")
SYNTHETIC_KEY_PREFIX = "row_"
SYNTHETIC_KEY_LENGTH = 20


def _usable(value: str | None) -> bool:
    return bool(value) and value != NULL


def resolve_row_key(row: Row, key_column: str) -> str:
    """
    Resolve a stable-within-snapshot identifier for a row.

    Tries, in order: the nominal key column, the conventional key columns
    (id, uuid, pk), the first column with a usable value (as "<column>:<value>"),
    and finally a synthetic "row_" identifier built from the first three values.

    The synthetic form can collide for structurally similar rows made of NULLs
    and is unstable across column reordering.
    """
    value = row.get(key_column)
    if _usable(value):
        return value

    for candidate in FALLBACK_KEY_COLUMNS:
        value = row.get(candidate)
        if _usable(value):
            return value

    for column, value in row.items():
        if _usable(value):
            return f"{column}:{value}"

    joined = "_".join(list(row.values())[:3])
    return SYNTHETIC_KEY_PREFIX + joined[:SYNTHETIC_KEY_LENGTH]


def _index_rows(rows: Sequence[Row], key_column: str) -> Dict[str, Row]:
    return {resolve_row_key(row, key_column): row for row in rows}


def changed_columns(old_row: Row, new_row: Row) -> List[str]:
    """
    Columns whose value differs between the two rows, new-row order first.
    A column present on only one side counts as changed.
    """
    columns = [
        column
        for column, value in new_row.items()
        if column not in old_row or old_row[column] != value
    ]
    columns.extend(column for column in old_row if column not in new_row)
    return columns


def compute_diffs(
    old_rows: Sequence[Row],
    new_rows: Sequence[Row],
    key_column: str,
) -> List[RowDiff]:
    """
    Diff two full captures of a table.

    Rows are matched by resolve_row_key(). Ordering of the result is not
    meaningful; sort by key_value when a stable order is needed.
    """
    old_by_key = _index_rows(old_rows, key_column)
    new_by_key = _index_rows(new_rows, key_column)
    diffs: List[RowDiff] = []

    for key, new_row in new_by_key.items():
        if key not in old_by_key:
            diffs.append(
                RowDiff(
                    key_column=key_column,
                    key_value=key,
                    kind=DiffKind.ADDED,
                    new_row=dict(new_row),
                    changed_columns=list(new_row.keys()),
                )
            )

    for key, old_row in old_by_key.items():
        if key not in new_by_key:
            diffs.append(
                RowDiff(
                    key_column=key_column,
                    key_value=key,
                    kind=DiffKind.REMOVED,
                    old_row=dict(old_row),
                    changed_columns=list(old_row.keys()),
                )
            )

    for key, new_row in new_by_key.items():
        old_row = old_by_key.get(key)
        if old_row is None:
            continue
        columns = changed_columns(old_row, new_row)
        if columns:
            diffs.append(
                RowDiff(
                    key_column=key_column,
                    key_value=key,
                    kind=DiffKind.MODIFIED,
                    old_row=dict(old_row),
                    new_row=dict(new_row),
                    changed_columns=columns,
                )
            )

    return diffs
