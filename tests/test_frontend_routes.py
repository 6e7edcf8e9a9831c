"""
Tests for api/routes/frontend.py — server-rendered pages and HTMX partials.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.colors import PALETTE


class TestPages:
    def test_home(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert "<strong>7</strong> transcription factors" in resp.text
        assert "Beta v" in resp.text

    def test_home_renders_without_data(self, empty_client):
        resp = empty_client.get("/")
        assert resp.status_code == 200
        assert "transcription factors ranked" not in resp.text

    def test_documentation_lists_columns_and_citations(self, client):
        resp = client.get("/documentation")
        assert resp.status_code == 200
        assert "Pharos TDL" in resp.text
        assert "Data Sources" in resp.text
        assert "Open Targets Platform" in resp.text
        assert '<a href="https://www.ebi.ac.uk/chembl/"' in resp.text

    def test_documentation_without_tables(self, empty_client):
        assert empty_client.get("/documentation").status_code == 200

    def test_documentation_survives_blank_citation_file(self, client, data_dir):
        (data_dir / "documentation" / "02_blank.csv").write_text(";;;\n", encoding="utf-8")
        resp = client.get("/documentation")
        assert resp.status_code == 200
        assert "This table could not be loaded." in resp.text
        assert "Open Targets Platform" in resp.text

    def test_unknown_page_is_html_404(self, client):
        resp = client.get("/no-such-page")
        assert resp.status_code == 404
        assert "text/html" in resp.headers["content-type"]
        assert "Page not found" in resp.text

    def test_unknown_api_path_is_json_404(self, client):
        resp = client.get("/api/v1/nope")
        assert resp.status_code == 404
        assert resp.json()["status_code"] == 404


class TestDatabasePage:
    def test_default_view(self, client):
        resp = client.get("/database")
        assert resp.status_code == 200
        text = resp.text
        assert 'id="table-region"' in text
        assert "Showing 7 of 7 transcription factors" in text
        assert text.index(">TP53<") < text.index(">PPARG<") < text.index(">APOE<")
        assert "Last Updated:" in text

    def test_url_seeds_view_state(self, client):
        resp = client.get("/database", params={"filters": "pharosTDL:Tclin", "sort": "overallRank:desc"})
        text = resp.text
        assert "Showing 3 of 7" in text
        assert text.index(">VDR<") < text.index(">NR3C1<") < text.index(">PPARG<")
        assert 'aria-sort="descending"' in text
        assert "Pharos TDL: Tclin" in text

    def test_na_rank_shown_as_na(self, client):
        resp = client.get("/database", params={"q": "apoe"})
        assert "N/A" in resp.text

    def test_rank_cells_are_coloured(self, client):
        assert f"background-color: {PALETTE[0]}" in client.get("/database").text

    def test_hidden_column_not_rendered(self, client):
        resp = client.get("/database", params={"cols": "ardsRank:false"})
        assert "col-ardsRank" not in resp.text
        assert "col-overallRank" in resp.text

    def test_required_column_cannot_be_hidden(self, client):
        resp = client.get("/database", params={"cols": "overallRank:false;symbol:false"})
        assert "col-overallRank" in resp.text
        assert "col-symbol" in resp.text

    def test_symbol_links_to_detail_page(self, client):
        assert 'href="/database/TP53"' in client.get("/database").text

    def test_sort_header_link_toggles_direction(self, client):
        text = client.get("/database").text
        assert "sort=overallRank%3Adesc" in text
        assert "sort=ardsRank%3Aasc" in text

    def test_export_links_carry_view_state(self, client):
        text = client.get("/database", params={"q": "p"}).text
        assert "/api/v1/download?q=p&amp;fmt=csv" in text
        assert "/api/v1/download?q=p&amp;fmt=xlsx" in text

    def test_no_matches_message(self, client):
        resp = client.get("/database", params={"q": "zzz"})
        assert "No transcription factors match" in resp.text
        assert "Page 1 of 1" in resp.text

    def test_data_unavailable_with_retry(self, empty_client):
        resp = empty_client.get("/database", params={"q": "tp"})
        assert resp.status_code == 503
        assert "Data unavailable" in resp.text
        assert 'href="/database?q=tp"' in resp.text

    def test_other_pages_work_while_data_unavailable(self, empty_client):
        assert empty_client.get("/contact").status_code == 200


class TestTablePartial:
    def test_fragment_with_replace_url(self, client):
        resp = client.get("/partials/table", params={"sort": "symbol:asc", "page": "1"})
        assert resp.status_code == 200
        assert "<html" not in resp.text
        assert resp.headers["hx-replace-url"] == "/database?sort=symbol%3Aasc"
        assert "hx-trigger" not in resp.headers

    def test_default_state_replaces_with_bare_path(self, client):
        assert client.get("/partials/table").headers["hx-replace-url"] == "/database"

    def test_page_size_change_triggers_scroll_reset(self, client):
        resp = client.get("/partials/table", params={"size": "50", "from_size": "20"})
        assert resp.headers["hx-trigger"] == "table-scroll-reset"
        assert resp.headers["hx-replace-url"] == "/database?size=50"

    @pytest.mark.parametrize("from_size", ["50", "abc", "7"])
    def test_same_or_bad_previous_size_no_scroll_reset(self, client, from_size):
        resp = client.get("/partials/table", params={"size": "50", "from_size": from_size})
        assert resp.status_code == 200
        assert "hx-trigger" not in resp.headers

    def test_page_size_form_sends_current_size(self, client):
        text = client.get("/database", params={"size": "50"}).text
        assert 'name="from_size" value="50"' in text

    def test_stale_page_clamped_in_url(self, client):
        resp = client.get("/partials/table", params={"page": "9"})
        assert resp.headers["hx-replace-url"] == "/database"

    def test_unavailable_fragment_retries_full_page(self, empty_client):
        resp = empty_client.get("/partials/table", params={"q": "tp"})
        assert resp.status_code == 503
        assert "<html" not in resp.text
        assert 'href="/database?q=tp"' in resp.text


class TestGenePage:
    def test_detail_page(self, client):
        resp = client.get("/database/NR3C1")
        assert resp.status_code == 200
        text = resp.text
        assert "Glucocorticoid receptor" in text
        assert "https://www.uniprot.org/uniprot/P04150" in text
        assert "CHEMBL3885521" in text
        assert "Overall Rank" in text

    def test_unknown_gene_is_distinct_404(self, client):
        resp = client.get("/database/NOPE")
        assert resp.status_code == 404
        assert "Transcription factor not found" in resp.text
        assert 'href="/database"' in resp.text

    def test_gene_in_master_but_not_overview(self, tmp_path):
        from fastapi.testclient import TestClient

        from api.app import create_app
        from conftest import write_data_dir

        data = write_data_dir(tmp_path / "d", overview_lines=[
            "NR3C1;3;2;1;Chronic Obstructive Pulmonary Disease;31;Y;#NA;Unclear;#NA;1_High;Tclin",
        ])
        c = TestClient(create_app(data_dir=data), raise_server_exceptions=False)
        resp = c.get("/database/TP53")
        assert resp.status_code == 200
        assert "Overview" not in resp.text

    def test_master_unavailable_is_503_not_404(self, tmp_path):
        from fastapi.testclient import TestClient

        from api.app import create_app
        from conftest import write_data_dir

        c = TestClient(create_app(data_dir=write_data_dir(tmp_path / "d", master=False)),
                       raise_server_exceptions=False)
        resp = c.get("/database/TP53")
        assert resp.status_code == 503
        assert "Data unavailable" in resp.text
