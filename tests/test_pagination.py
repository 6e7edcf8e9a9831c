"""
Tests for utils/pagination.py
"""
import math
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.pagination import DEFAULT_PAGE_SIZE, PAGE_SIZES, Pagination


@pytest.mark.parametrize("size", PAGE_SIZES)
@pytest.mark.parametrize("total", [0, 1, 19, 20, 21, 99, 100, 101, 1642])
def test_page_count(size, total):
    assert Pagination(total, size).page_count == max(1, math.ceil(total / size))


@pytest.mark.parametrize("n", [-100, -1, 0, 1, 2, 3, 4, 10**6])
def test_goto_clamps(n):
    p = Pagination(61, 20).goto(n)
    assert 0 <= p.page_index <= p.page_count - 1


def test_empty_table_has_one_page():
    p = Pagination(0)
    assert p.page_count == 1
    assert p.page_index == 0
    assert p.slice([]) == []


def test_default_page_size():
    assert Pagination(5).page_size == DEFAULT_PAGE_SIZE == 20


def test_invalid_page_size_rejected():
    with pytest.raises(ValueError, match="Invalid page size"):
        Pagination(10, 25)
    with pytest.raises(ValueError):
        Pagination(10).set_page_size(7)


def test_prev_on_first_page_is_a_no_op():
    p = Pagination(100)
    assert p.prev() is p


def test_next_on_last_page_is_a_no_op():
    p = Pagination(100).last()
    assert p.page_index == 4
    assert p.next() is p


def test_navigation_sequence():
    p = Pagination(45)
    p = p.next()
    assert p.page_number == 2
    p = p.next()
    assert not p.has_next
    p = p.prev().first()
    assert p.page_index == 0 and not p.has_prev


def test_set_page_size_clamps_index_and_signals_scroll_reset():
    p = Pagination(120, 20).goto(5)
    resized = p.set_page_size(100)
    assert resized.page_count == 2
    assert resized.page_index == 1
    assert resized.scroll_reset
    assert not resized.first().scroll_reset


def test_constructor_clamps_stale_index():
    assert Pagination(10, 20, page_index=7).page_index == 0


def test_slice_returns_current_page():
    rows = list(range(45))
    p = Pagination(45, 20)
    assert p.slice(rows) == list(range(20))
    assert p.last().slice(rows) == list(range(40, 45))
    assert (p.last().start, p.last().end) == (40, 45)


def test_pagination_is_immutable():
    p = Pagination(50)
    with pytest.raises(Exception):
        p.page_index = 2
