"""Column sorting for the transcription-factor table.

Ordering policy:
    rank columns   numeric; a missing rank ("not available") always sorts
                   last, in both directions.
    enum columns   by position in the column's registry order; values
                   outside that order always sort last.
    text columns   case-insensitive unless configured otherwise; empty
                   and "Unknown" values always sort last.

Rows with equal sort keys are ordered by symbol, ascending and
case-insensitive, whichever direction the column is sorted in.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from utils.columns import DEFAULT_SORT_COLUMN, ColumnDescriptor, get_column
from utils.formatting import UNKNOWN

ASC = "asc"
DESC = "desc"
DIRECTIONS = (ASC, DESC)


@dataclass(frozen=True)
class SortSpec:
    """Active sort: one column and a direction."""

    column: str = DEFAULT_SORT_COLUMN
    direction: str = ASC

    @property
    def descending(self) -> bool:
        return self.direction == DESC

    def encode(self) -> str:
        return f"{self.column}:{self.direction}"


def is_sortable(column_id: str | None) -> bool:
    column = get_column(column_id)
    return column is not None and column.sortable


def toggle_sort(current: SortSpec, column_id: str) -> SortSpec:
    """Apply a click on *column_id*'s header to the current sort.

    Same column flips direction; a different column starts ascending;
    a column that cannot be sorted leaves the sort unchanged.
    """
    if not is_sortable(column_id):
        return current
    if current.column == column_id:
        return SortSpec(column_id, ASC if current.descending else DESC)
    return SortSpec(column_id, ASC)


def _symbol_key(row: Mapping[str, Any]) -> tuple[str, str]:
    symbol = str(row.get("symbol") or "")
    return symbol.lower(), symbol


def _key_function(
    column: ColumnDescriptor, case_sensitive: bool,
) -> Callable[[Mapping[str, Any]], Any]:
    """Return a key function yielding ``None`` for rows that sort last."""
    if column.is_rank:
        def rank_key(row):
            value = row.get(column.id)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return None
            return value
        return rank_key

    if column.is_enum:
        positions = {value: i for i, value in enumerate(column.order)}

        def enum_key(row):
            value = row.get(column.id)
            return positions.get(str(value).strip()) if value is not None else None
        return enum_key

    def text_key(row):
        value = row.get(column.id)
        text = "" if value is None else str(value).strip()
        if text in ("", UNKNOWN):
            return None
        return text if case_sensitive else text.lower()
    return text_key


def sort_rows(
    rows: Sequence[Mapping[str, Any]],
    column_id: str,
    direction: str = ASC,
    *,
    case_sensitive: bool = False,
) -> list[Mapping[str, Any]]:
    """Return *rows* ordered by *column_id*.

    Unknown or non-sortable columns return the rows in their input order.

    Args:
        rows: Rows to sort (not modified).
        column_id: Column to sort by.
        direction: ``"asc"`` or ``"desc"``; anything else is treated as asc.
        case_sensitive: Compare text columns case-sensitively.

    Returns:
        New list of rows.
    """
    column = get_column(column_id)
    if column is None or not column.sortable:
        return list(rows)

    key = _key_function(column, case_sensitive)
    keyed = [(key(row), row) for row in rows]
    present = [(k, row) for k, row in keyed if k is not None]
    missing = [row for k, row in keyed if k is None]

    # Two stable passes: symbol first, then the column key. reverse=True keeps
    # equal keys in their existing (symbol-ascending) order.
    present.sort(key=lambda kr: _symbol_key(kr[1]))
    present.sort(key=lambda kr: kr[0], reverse=(direction == DESC))
    missing.sort(key=_symbol_key)
    return [row for _, row in present] + missing


def apply_sort(
    rows: Sequence[Mapping[str, Any]],
    spec: SortSpec,
    *,
    case_sensitive: bool = False,
) -> list[Mapping[str, Any]]:
    return sort_rows(rows, spec.column, spec.direction, case_sensitive=case_sensitive)
