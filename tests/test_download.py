"""
Tests for api/routes/download.py — GET /api/v1/download
"""
import csv
import io
import re
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

_FILENAME = re.compile(r'attachment; filename="TFactorTx_\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.(csv|xlsx)"')


def _rows(resp):
    return list(csv.reader(io.StringIO(resp.text)))


def test_csv_export_of_full_table(client):
    resp = client.get("/api/v1/download")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert _FILENAME.match(resp.headers["content-disposition"])
    assert resp.headers["x-total-count"] == "7"
    rows = _rows(resp)
    assert rows[0][0] == "TF Symbol"
    assert len(rows) == 8


def test_export_uses_filters_sort_and_visibility(client):
    resp = client.get("/api/v1/download", params={
        "filters": "pharosTDL:Tclin",
        "sort": "overallRank:desc",
        "cols": "allDiseasesRank:false;ardsRank:false",
        "page": "3",
        "size": "50",
    })
    rows = _rows(resp)
    assert "All Diseases Rank" not in rows[0]
    assert [r[0] for r in rows[1:]] == ["VDR", "NR3C1", "PPARG"]
    assert resp.headers["x-total-count"] == "3"


def test_search_applies(client):
    rows = _rows(client.get("/api/v1/download", params={"q": "apo"}))
    assert [r[0] for r in rows[1:]] == ["APOE"]
    assert rows[1][1] == ""


def test_xlsx_export(client):
    resp = client.get("/api/v1/download", params={"fmt": "xlsx"})
    assert resp.status_code == 200
    assert "spreadsheetml" in resp.headers["content-type"]
    assert resp.headers["content-disposition"].endswith('.xlsx"')
    assert resp.content[:2] == b"PK"


def test_invalid_format_rejected(client):
    assert client.get("/api/v1/download", params={"fmt": "pdf"}).status_code == 422


def test_export_failure_is_generic_500(client):
    def failing(*args, **kwargs):
        raise RuntimeError("disk full")

    with patch.dict("api.routes.download._EXPORTERS", {"csv": (failing, "text/csv")}):
        resp = client.get("/api/v1/download")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Export failed. Please try again."
    assert "disk full" not in resp.text


def test_missing_data_is_503(empty_client):
    assert empty_client.get("/api/v1/download").status_code == 503
