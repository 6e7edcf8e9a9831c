"""
Unit tests for utils/formatting.py

No database, network, or file I/O required.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.formatting import (
    format_cell,
    format_count,
    format_detail_value,
    format_rank,
    is_missing,
    split_multi,
)


# ── format_rank ───────────────────────────────────────────────────────────────

def test_format_rank_sentinel():
    assert format_rank(None) == "N/A"


def test_format_rank_integral_float():
    assert format_rank(4.0) == "4"


def test_format_rank_zero_is_not_na():
    assert format_rank(0) == "0"


# ── format_count ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("value, expected", [
    (None, "-"), (0, "0"), (1642, "1,642"), (1234567, "1,234,567"),
    (9.412, "9.412"), (11.07, "11.07"), (3.0, "3"),
])
def test_format_count(value, expected):
    assert format_count(value) == expected


# ── format_cell ───────────────────────────────────────────────────────────────

def test_format_cell_rank_columns():
    assert format_cell("overallRank", 12) == "12"
    assert format_cell("ardsRank", None) == "N/A"


def test_format_cell_missing_text_is_unknown():
    assert format_cell("strongestLinkedDisease", "") == "Unknown"
    assert format_cell("strongestLinkedDisease", " Cancer ") == "Cancer"


# ── Missing values / multi-valued fields ──────────────────────────────────────

@pytest.mark.parametrize("value", [None, "", "  ", "#NA", "#N/A", "n/a", "Not Available"])
def test_is_missing(value):
    assert is_missing(value)


def test_zero_and_none_word_are_not_missing():
    assert not is_missing(0)
    assert not is_missing("None")


def test_split_multi():
    assert split_multi("CHEMBL1; CHEMBL2") == ["CHEMBL1", "CHEMBL2"]
    assert split_multi("4;#N/A;2") == ["4", "2"]
    assert split_multi("#N/A") == []
    assert split_multi(12) == ["12"]


def test_format_detail_value():
    assert format_detail_value(None) == "N/A"
    assert format_detail_value("#N/A") == "N/A"
    assert format_detail_value(2214) == "2,214"
    assert format_detail_value(" P04637 ") == "P04637"
