"""Export the current table view to CSV or Excel.

The exported rows are the filtered rows in the active sort order; only
visible columns are written, in display order, under their header labels.
Missing values ("not available") are written as empty cells.

Filenames follow ``<dataset>_<YYYY-MM-DD_HH-mm-ss>.<ext>`` using the local
clock at export time.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from utils.columns import COLUMN_IDS, REQUIRED_COLUMNS, column_labels
from utils.sorting import SortSpec, apply_sort

DEFAULT_DATASET_NAME = "TFactorTx"

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_filename(dataset: str = DEFAULT_DATASET_NAME, when: datetime | None = None,
                    ext: str = "csv") -> str:
    when = when or datetime.now()
    return f"{dataset}_{when.strftime('%Y-%m-%d_%H-%M-%S')}.{ext}"


def export_columns(column_order: Sequence[str],
                   visibility: Mapping[str, bool] | None) -> list[str]:
    """Visible columns in display order; required columns are always included."""
    visibility = visibility or {}
    return [
        c for c in column_order
        if c in COLUMN_IDS and (visibility.get(c, True) or c in REQUIRED_COLUMNS)
    ]


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _prepare(rows, column_order, visibility, sort_spec, case_sensitive):
    columns = export_columns(column_order, visibility)
    ordered = apply_sort(rows, sort_spec or SortSpec(), case_sensitive=case_sensitive)
    return columns, ordered


def rows_to_csv(rows: Sequence[Mapping[str, Any]], columns: Sequence[str],
                labels: Mapping[str, str]) -> str:
    """Serialize *rows* as CSV text with a header row.

    Quoting is minimal: only values containing a comma, double quote or line
    break are quoted, with embedded quotes doubled.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL)
    writer.writerow([labels.get(c, c) for c in columns])
    for row in rows:
        writer.writerow([cell_text(row.get(c)) for c in columns])
    return buf.getvalue()


def export_csv(
    rows: Sequence[Mapping[str, Any]],
    column_order: Sequence[str] = COLUMN_IDS,
    visibility: Mapping[str, bool] | None = None,
    sort_spec: SortSpec | None = None,
    *,
    dataset: str = DEFAULT_DATASET_NAME,
    column_names: list[str] | None = None,
    case_sensitive: bool = False,
    when: datetime | None = None,
) -> tuple[bytes, str]:
    """Build a CSV export of the current view.

    Args:
        rows: Filtered rows (or the full row set when nothing is filtered).
        column_order: Display order of column ids.
        visibility: Column id -> visible flag; missing entries count as visible.
        sort_spec: Active sort, applied before writing.
        dataset: Dataset name used in the filename.
        column_names: Header labels from the data source, in display order.
        case_sensitive: Case-sensitive text sorting.
        when: Export timestamp (defaults to now, local time).

    Returns:
        ``(content, filename)`` with UTF-8 encoded content.
    """
    columns, ordered = _prepare(rows, column_order, visibility, sort_spec, case_sensitive)
    text = rows_to_csv(ordered, columns, column_labels(column_names))
    return text.encode("utf-8"), export_filename(dataset, when, "csv")


def export_xlsx(
    rows: Sequence[Mapping[str, Any]],
    column_order: Sequence[str] = COLUMN_IDS,
    visibility: Mapping[str, bool] | None = None,
    sort_spec: SortSpec | None = None,
    *,
    dataset: str = DEFAULT_DATASET_NAME,
    column_names: list[str] | None = None,
    case_sensitive: bool = False,
    when: datetime | None = None,
) -> tuple[bytes, str]:
    """Build an Excel export of the current view (one worksheet)."""
    import openpyxl

    columns, ordered = _prepare(rows, column_order, visibility, sort_spec, case_sensitive)
    labels = column_labels(column_names)

    wb = openpyxl.Workbook(write_only=True)
    ws = wb.create_sheet(dataset[:31] or "Export")
    ws.append([labels.get(c, c) for c in columns])
    for row in ordered:
        # Numbers stay numeric in Excel; the sentinel becomes an empty cell.
        ws.append([row.get(c) for c in columns])
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue(), export_filename(dataset, when, "xlsx")
