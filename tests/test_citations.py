"""
Tests for utils/citations.py — documentation citation tables.
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.citations import is_url, load_citation_tables, read_citation_table, title_from_filename


def test_title_from_filename():
    assert title_from_filename(Path("01_data_sources.csv")) == "Data Sources"
    assert title_from_filename(Path("ranking-methods.csv")) == "Ranking Methods"
    assert title_from_filename(Path("references.csv")) == "References"


def test_semicolon_table(tmp_path):
    path = tmp_path / "01_sources.csv"
    path.write_text("Source;URL\nChEMBL;https://www.ebi.ac.uk/chembl/\n", encoding="utf-8")
    table = read_citation_table(path)
    assert table.error is None
    assert table.header == ["Source", "URL"]
    assert table.rows == [["ChEMBL", "https://www.ebi.ac.uk/chembl/"]]


def test_comma_table_with_quoted_cell(tmp_path):
    path = tmp_path / "methods.csv"
    path.write_text('Rank,Notes\nAging Rank,"GenAge, OpenGenes"\n', encoding="utf-8")
    table = read_citation_table(path)
    assert table.rows == [["Aging Rank", "GenAge, OpenGenes"]]


def test_unreadable_table_sets_error(tmp_path):
    path = tmp_path / "02_broken.csv"
    path.write_bytes(b"\xff\xfe\x00\x81")
    table = read_citation_table(path)
    assert table.error == "This table could not be loaded."
    assert table.title == "Broken"


def test_empty_table_sets_error(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    assert read_citation_table(path).error is not None


def test_load_tables_in_name_order(tmp_path):
    (tmp_path / "02_b.csv").write_text("A;B\n1;2\n", encoding="utf-8")
    (tmp_path / "01_a.csv").write_text("A;B\n1;2\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    tables = load_citation_tables(tmp_path)
    assert [t.source for t in tables] == ["01_a.csv", "02_b.csv"]


def test_missing_directory_yields_no_tables(tmp_path):
    assert load_citation_tables(tmp_path / "nope") == []


def test_is_url():
    assert is_url("https://pubmed.ncbi.nlm.nih.gov/35343830/")
    assert not is_url("PMID 35343830")


def test_delimiter_only_table_sets_error(tmp_path):
    path = tmp_path / "03_blank.csv"
    path.write_text(";;;\n;;;\n", encoding="utf-8")
    table = read_citation_table(path)
    assert table.error == "This table could not be loaded."
    assert table.header == []
