"""
Tests for utils/export.py — CSV and Excel export of the current view.
"""
import csv
import io
import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.columns import COLUMN_IDS
from utils.export import (
    export_columns,
    export_csv,
    export_filename,
    export_xlsx,
    rows_to_csv,
)
from utils.sorting import DESC, SortSpec

WHEN = datetime(2025, 3, 7, 9, 5, 2)


def _parse(content: bytes) -> list[list[str]]:
    return list(csv.reader(io.StringIO(content.decode("utf-8"))))


def test_filename_format():
    assert export_filename("TFactorTx", WHEN) == "TFactorTx_2025-03-07_09-05-02.csv"
    assert export_filename("TFactorTx", WHEN, "xlsx").endswith(".xlsx")


def test_value_with_comma_and_quote_round_trips():
    rows = [{"symbol": 'Gene, "X"', "overallRank": 1}]
    content, _ = export_csv(rows, when=WHEN)
    text = content.decode("utf-8")
    assert '"Gene, ""X"""' in text
    assert _parse(content)[1][0] == 'Gene, "X"'


def test_value_with_newline_is_quoted():
    text = rows_to_csv([{"symbol": "a\nb"}], ["symbol"], {"symbol": "TF Symbol"})
    assert '"a\nb"' in text


def test_plain_values_are_not_quoted():
    text = rows_to_csv([{"symbol": "TP53", "overallRank": 1}], ["symbol", "overallRank"],
                       {"symbol": "TF Symbol", "overallRank": "Overall Rank"})
    assert text.splitlines() == ["TF Symbol,Overall Rank", "TP53,1"]


def test_sentinel_becomes_empty_cell(sample_rows):
    apoe = [r for r in sample_rows if r["symbol"] == "APOE"]
    content, _ = export_csv(apoe, ["symbol", "overallRank", "allDiseasesRank"], when=WHEN)
    assert _parse(content)[1] == ["APOE", "", "8"]


def test_headers_are_labels_in_display_order(sample_rows):
    content, _ = export_csv(sample_rows, when=WHEN)
    header = _parse(content)[0]
    assert len(header) == len(COLUMN_IDS)
    assert header[0] == "TF Symbol"
    assert "symbol" not in header


def test_source_header_labels_are_used(sample_rows):
    names = ["Gene"] + [f"Col {i}" for i in range(1, 12)]
    content, _ = export_csv(sample_rows, column_names=names, when=WHEN)
    assert _parse(content)[0][:2] == ["Gene", "Col 1"]


def test_only_visible_columns_exported(sample_rows):
    visibility = {c: False for c in COLUMN_IDS}
    visibility["pharosTDL"] = True
    content, _ = export_csv(sample_rows, visibility=visibility, when=WHEN)
    assert _parse(content)[0] == ["TF Symbol", "Overall Rank", "Pharos TDL"]


def test_active_sort_is_applied(sample_rows):
    content, _ = export_csv(sample_rows, sort_spec=SortSpec("overallRank", DESC), when=WHEN)
    assert [r[0] for r in _parse(content)[1:]] == [
        "JAZF1", "VDR", "NR3C1", "PPARG", "TP53", "APOE", "ZNF33B",
    ]


def test_default_sort_is_overall_rank(sample_rows):
    content, _ = export_csv(list(reversed(sample_rows)), when=WHEN)
    assert _parse(content)[1][0] == "TP53"


def test_dataset_name_in_filename(sample_rows):
    _, filename = export_csv(sample_rows, dataset="TFs", when=WHEN)
    assert filename == "TFs_2025-03-07_09-05-02.csv"


def test_export_columns_ignores_unknown_ids():
    assert export_columns(["symbol", "bogus", "ardsRank"], {"ardsRank": True}) == ["symbol", "ardsRank"]


def test_export_columns_keeps_required_even_if_hidden():
    assert export_columns(COLUMN_IDS[:3], {"symbol": False, "allDiseasesRank": False}) == [
        "symbol", "overallRank",
    ]


def test_xlsx_export(sample_rows):
    openpyxl = pytest.importorskip("openpyxl")
    content, filename = export_xlsx(sample_rows, dataset="TFactorTx", when=WHEN)
    assert filename == "TFactorTx_2025-03-07_09-05-02.xlsx"
    wb = openpyxl.load_workbook(io.BytesIO(content))
    ws = wb["TFactorTx"]
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0][0] == "TF Symbol"
    assert rows[1][:2] == ("TP53", 1)
    apoe = [r for r in rows if r[0] == "APOE"][0]
    assert apoe[1] is None
