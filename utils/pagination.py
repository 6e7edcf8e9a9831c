"""Pagination state for the table view.

``Pagination`` is an immutable value; every navigation operation returns
a new instance (or the same one when the operation is a no-op). The page
index is always kept inside ``[0, page_count - 1]``.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any

PAGE_SIZES: tuple[int, ...] = (20, 50, 100)
DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class Pagination:
    total_rows: int
    page_size: int = DEFAULT_PAGE_SIZE
    page_index: int = 0
    scroll_reset: bool = False
    """Set by :meth:`set_page_size`; the UI resets the table scroll position."""

    def __post_init__(self) -> None:
        if self.page_size not in PAGE_SIZES:
            raise ValueError(
                f"Invalid page size {self.page_size}; must be one of {PAGE_SIZES}"
            )
        object.__setattr__(self, "total_rows", max(0, int(self.total_rows)))
        object.__setattr__(self, "page_index", self._clamp(self.page_index))

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self.total_rows / self.page_size))

    @property
    def last_index(self) -> int:
        return self.page_count - 1

    @property
    def has_prev(self) -> bool:
        return self.page_index > 0

    @property
    def has_next(self) -> bool:
        return self.page_index < self.last_index

    @property
    def page_number(self) -> int:
        """1-based page number for display and URLs."""
        return self.page_index + 1

    @property
    def start(self) -> int:
        """Offset of the first row on the current page."""
        return self.page_index * self.page_size

    @property
    def end(self) -> int:
        """Offset one past the last row on the current page."""
        return min(self.start + self.page_size, self.total_rows)

    def _clamp(self, index: int) -> int:
        return min(max(int(index), 0), self.last_index)

    def _at(self, index: int) -> Pagination:
        return replace(self, page_index=self._clamp(index), scroll_reset=False)

    def first(self) -> Pagination:
        return self._at(0)

    def prev(self) -> Pagination:
        if not self.has_prev:
            return self
        return self._at(self.page_index - 1)

    def next(self) -> Pagination:
        if not self.has_next:
            return self
        return self._at(self.page_index + 1)

    def last(self) -> Pagination:
        return self._at(self.last_index)

    def goto(self, index: int) -> Pagination:
        """Jump to 0-based page *index*, clamped into range."""
        return self._at(index)

    def set_page_size(self, size: int) -> Pagination:
        """Change the page size, keeping the page index inside the new range.

        Raises:
            ValueError: If *size* is not one of :data:`PAGE_SIZES`.
        """
        return replace(self, page_size=size, scroll_reset=True)

    def slice(self, rows: Sequence[Any]) -> list[Any]:
        """Return the rows on the current page."""
        return list(rows[self.start:self.end])
