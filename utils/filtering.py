"""Row filtering for the transcription-factor table.

A row passes when the free-text query matches its symbol AND, for every
column with a non-empty allow-list, the row's value is in that list.
Values inside one allow-list are alternatives (OR).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from utils.columns import get_column
from utils.formatting import UNKNOWN


def cell_value(row: Mapping[str, Any], column_id: str) -> str:
    """Return the row's value for *column_id* as a trimmed string.

    The "not available" sentinel (``None``) becomes an empty string.
    """
    value = row.get(column_id)
    if value is None:
        return ""
    return str(value).strip()


def normalize_filters(
    column_filters: Mapping[str, Iterable[str]] | None,
) -> dict[str, frozenset[str]]:
    """Drop unknown/non-filterable columns and empty allow-lists; trim values."""
    if not column_filters:
        return {}
    cleaned: dict[str, frozenset[str]] = {}
    for column_id, values in column_filters.items():
        column = get_column(column_id)
        if column is None or not column.filterable:
            continue
        if isinstance(values, str):
            values = [values]
        allowed = frozenset(v.strip() for v in values if v is not None and v.strip())
        if allowed:
            cleaned[column_id] = allowed
    return cleaned


def matches_query(row: Mapping[str, Any], query: str) -> bool:
    """Case-insensitive substring match of *query* against the row symbol."""
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return needle in cell_value(row, "symbol").lower()


def filter_rows(
    rows: Sequence[Mapping[str, Any]],
    query: str = "",
    column_filters: Mapping[str, Iterable[str]] | None = None,
) -> list[Mapping[str, Any]]:
    """Return the rows that satisfy the query and every column filter.

    Input order is preserved. Unknown filter keys are ignored.

    Args:
        rows: Base row set.
        query: Free-text symbol search; empty matches everything.
        column_filters: Column id -> allowed raw values.

    Returns:
        New list containing the matching rows.
    """
    active = normalize_filters(column_filters)
    return [
        row for row in rows
        if matches_query(row, query)
        and all(cell_value(row, col) in allowed for col, allowed in active.items())
    ]


def facet_values(rows: Sequence[Mapping[str, Any]], column_id: str) -> list[str]:
    """Distinct values of a filterable column, for building filter controls.

    Enum columns list their values in registry order (unlisted values after,
    alphabetically); other columns are alphabetical. "Unknown" comes last;
    empty values are skipped.
    """
    column = get_column(column_id)
    if column is None or not column.filterable:
        return []
    seen = {cell_value(row, column_id) for row in rows}
    seen.discard("")
    rank = {value: i for i, value in enumerate(column.order)}
    return sorted(seen, key=lambda v: (v == UNKNOWN, rank.get(v, len(rank)), v.lower()))
