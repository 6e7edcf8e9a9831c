"""Display formatting for table cells and detail values.

Provides reusable functions for:
- Rank cells (the "not available" sentinel shown as "N/A")
- Text cells (missing values shown as "Unknown")
- Multi-valued detail fields ("4;2")
- Counts with thousands separators
"""

from typing import Any, List, Optional

from utils.columns import get_column

NOT_AVAILABLE = "N/A"
UNKNOWN = "Unknown"

_NA_STRINGS = {"", "#na", "#n/a", "na", "n/a", "not available"}


def is_missing(value: Any) -> bool:
    """True for ``None`` and any "not available" spelling."""
    if value is None:
        return True
    return isinstance(value, str) and value.strip().lower() in _NA_STRINGS


def format_rank(value: Optional[float]) -> str:
    """Format a rank for display.

    Examples:
        format_rank(12) -> "12"
        format_rank(None) -> "N/A"
    """
    if value is None or isinstance(value, bool):
        return NOT_AVAILABLE
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def format_count(value: Optional[int]) -> str:
    """Format a count with thousands separator.

    Examples:
        format_count(1234567) -> "1,234,567"
        format_count(None) -> "-"
    """
    if value is None:
        return "-"
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.3f}".rstrip("0").rstrip(".")
    return f"{int(value):,}"


def format_cell(column_id: str, value: Any) -> str:
    """Human-readable text for one table cell."""
    column = get_column(column_id)
    if column is not None and column.is_rank:
        return format_rank(value)
    if is_missing(value):
        return UNKNOWN
    return str(value).strip()


def split_multi(value: Any, delimiter: str = ";") -> List[str]:
    """Split a multi-valued field into trimmed, non-missing parts.

    Examples:
        split_multi("CHEMBL1;CHEMBL2") -> ["CHEMBL1", "CHEMBL2"]
        split_multi("#N/A") -> []
    """
    if is_missing(value):
        return []
    if not isinstance(value, str):
        return [format_count(value)]
    return [part.strip() for part in value.split(delimiter) if not is_missing(part)]


def format_detail_value(value: Any) -> str:
    """Single detail value; missing values show as "N/A"."""
    if is_missing(value):
        return NOT_AVAILABLE
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_count(value)
    return str(value).strip()
