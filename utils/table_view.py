"""Derive one page of the table from the base rows and a view-state.

Shared by the JSON view endpoint, the HTML table fragment and the export
route so all three apply filter -> sort -> paginate identically.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from utils.filtering import filter_rows
from utils.pagination import PAGE_SIZES, Pagination
from utils.sorting import apply_sort
from utils.view_state import ViewState


@dataclass(frozen=True)
class TableView:
    state: ViewState
    rows: list[Mapping[str, Any]]
    """Filtered rows in sort order (every page)."""

    pagination: Pagination

    @property
    def page_rows(self) -> list[Mapping[str, Any]]:
        return self.pagination.slice(self.rows)


def derive_view(
    base_rows: Sequence[Mapping[str, Any]],
    state: ViewState,
    *,
    case_sensitive: bool = False,
    previous_page_size: int | None = None,
) -> TableView:
    """Apply the view-state to *base_rows*.

    The page index is clamped to the filtered row count, so a stale
    ``page`` from a shared link lands on the last page instead of an
    empty one.

    When *previous_page_size* is a different valid size, the view was
    reached by a page-size change and its pagination carries
    ``scroll_reset``.
    """
    filtered = filter_rows(base_rows, state.search, state.filters)
    ordered = apply_sort(filtered, state.sort, case_sensitive=case_sensitive)
    if previous_page_size in PAGE_SIZES and previous_page_size != state.page_size:
        pagination = (
            Pagination(len(ordered), previous_page_size)
            .goto(state.page_index)
            .set_page_size(state.page_size)
        )
    else:
        pagination = Pagination(len(ordered), state.page_size).goto(state.page_index)
    state = replace(state, page_index=pagination.page_index)
    return TableView(state=state, rows=ordered, pagination=pagination)
