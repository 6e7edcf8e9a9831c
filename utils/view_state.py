"""Table view-state and its query-string encoding.

The whole table view (search text, column filters, sort, page, page size
and column visibility) is one immutable :class:`ViewState`. It round-trips
through a flat set of query parameters so any view can be shared as a link:

    q        search text
    filters  column:value pairs joined by ";" (values percent-escaped)
    sort     columnId:asc | columnId:desc
    cols     column:true | column:false pairs joined by ";"
    page     1-based page number
    size     page size (20, 50 or 100)

Decoding never raises: anything missing, malformed or unknown falls back
to its default, and required columns are always decoded as visible.

Usage:
    state = decode_view_state(request.query_params)
    url = "/database?" + to_query_string(state)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import quote, unquote, urlencode

from utils.columns import COLUMN_IDS, REQUIRED_COLUMNS, get_column
from utils.filtering import normalize_filters
from utils.pagination import DEFAULT_PAGE_SIZE, PAGE_SIZES
from utils.sorting import ASC, DIRECTIONS, SortSpec, is_sortable

logger = logging.getLogger(__name__)

PARAM_SEARCH = "q"
PARAM_FILTERS = "filters"
PARAM_SORT = "sort"
PARAM_COLUMNS = "cols"
PARAM_PAGE = "page"
PARAM_SIZE = "size"

PAIR_DELIMITER = ";"
KEY_VALUE_SEPARATOR = ":"


def default_visibility() -> dict[str, bool]:
    return {column_id: True for column_id in COLUMN_IDS}


@dataclass(frozen=True)
class ViewState:
    search: str = ""
    filters: Mapping[str, frozenset[str]] = field(default_factory=dict)
    sort: SortSpec = field(default_factory=SortSpec)
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    visibility: Mapping[str, bool] = field(default_factory=default_visibility)

    @property
    def visible_columns(self) -> list[str]:
        """Visible column ids in display order."""
        return [c for c in COLUMN_IDS if self.visibility.get(c, True) or c in REQUIRED_COLUMNS]

    @property
    def has_active_filters(self) -> bool:
        return bool(self.search.strip()) or any(self.filters.values())

    def with_filter_toggled(self, column_id: str, value: str) -> ViewState:
        """Add or remove *value* from a column's allow-list (resets to page 1)."""
        filters = {k: set(v) for k, v in self.filters.items()}
        allowed = filters.setdefault(column_id, set())
        allowed.symmetric_difference_update({value.strip()})
        return replace(self, filters=normalize_filters(filters), page_index=0)

    def with_column_toggled(self, column_id: str) -> ViewState:
        """Show/hide a column. Required and unknown columns are left alone."""
        if column_id in REQUIRED_COLUMNS or get_column(column_id) is None:
            return self
        visibility = dict(self.visibility)
        visibility[column_id] = not visibility.get(column_id, True)
        return replace(self, visibility=visibility)


# ── Encoding ──────────────────────────────────────────────────────────────────

def _join_pairs(pairs: Iterable[tuple[str, str]]) -> str:
    # Values are free text; "%", ";" and ":" inside them are percent-escaped.
    return PAIR_DELIMITER.join(
        f"{k}{KEY_VALUE_SEPARATOR}{quote(v, safe=' ')}" for k, v in pairs
    )


def encode_view_state(state: ViewState) -> dict[str, str]:
    """Encode *state* as query parameters, omitting default values."""
    params: dict[str, str] = {}
    if state.search:
        params[PARAM_SEARCH] = state.search
    filter_pairs = [
        (column_id, value)
        for column_id in COLUMN_IDS
        for value in sorted(state.filters.get(column_id, ()))
    ]
    if filter_pairs:
        params[PARAM_FILTERS] = _join_pairs(filter_pairs)
    if state.sort != SortSpec():
        params[PARAM_SORT] = state.sort.encode()
    hidden = [
        (column_id, "false")
        for column_id in COLUMN_IDS
        if not state.visibility.get(column_id, True) and column_id not in REQUIRED_COLUMNS
    ]
    if hidden:
        params[PARAM_COLUMNS] = _join_pairs(hidden)
    if state.page_index > 0:
        params[PARAM_PAGE] = str(state.page_index + 1)
    if state.page_size != DEFAULT_PAGE_SIZE:
        params[PARAM_SIZE] = str(state.page_size)
    return params


def to_query_string(state: ViewState, **extra: Any) -> str:
    """Encode *state* (plus any *extra* parameters) as a URL query string."""
    params: dict[str, Any] = encode_view_state(state)
    params.update({k: v for k, v in extra.items() if v is not None})
    return urlencode(params)


# ── Decoding ──────────────────────────────────────────────────────────────────

def _values(params: Mapping[str, Any], name: str) -> list[str]:
    """All values for *name*; supports multi-value mappings (``getlist``)."""
    getlist = getattr(params, "getlist", None)
    if callable(getlist):
        raw = getlist(name)
    else:
        value = params.get(name)
        raw = value if isinstance(value, (list, tuple)) else ([] if value is None else [value])
    return [str(v) for v in raw if v is not None]


def _first(params: Mapping[str, Any], name: str) -> str | None:
    values = _values(params, name)
    return values[0] if values else None


def _split_pairs(encoded: str) -> list[tuple[str, str]]:
    pairs = []
    for chunk in encoded.split(PAIR_DELIMITER):
        key, sep, value = chunk.partition(KEY_VALUE_SEPARATOR)
        if not sep or not key.strip():
            continue
        pairs.append((key.strip(), unquote(value.strip())))
    return pairs


def _decode_filters(params: Mapping[str, Any]) -> dict[str, frozenset[str]]:
    collected: dict[str, set[str]] = {}
    for encoded in _values(params, PARAM_FILTERS):
        for column_id, value in _split_pairs(encoded):
            collected.setdefault(column_id, set()).add(value)
    return normalize_filters(collected)


def _decode_sort(params: Mapping[str, Any]) -> SortSpec:
    raw = _first(params, PARAM_SORT)
    if not raw:
        return SortSpec()
    column_id, _, direction = raw.partition(KEY_VALUE_SEPARATOR)
    column_id = column_id.strip()
    if not is_sortable(column_id):
        return SortSpec()
    direction = direction.strip().lower()
    return SortSpec(column_id, direction if direction in DIRECTIONS else ASC)


def _decode_visibility(params: Mapping[str, Any]) -> dict[str, bool]:
    visibility = default_visibility()
    for encoded in _values(params, PARAM_COLUMNS):
        for column_id, flag in _split_pairs(encoded):
            if column_id not in visibility:
                continue
            flag = flag.lower()
            if flag in ("true", "false"):
                visibility[column_id] = flag == "true"
    for column_id in REQUIRED_COLUMNS:
        visibility[column_id] = True
    return visibility


def _decode_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def decode_view_state(params: Mapping[str, Any] | None) -> ViewState:
    """Rebuild a :class:`ViewState` from query parameters; never raises."""
    if not params:
        return ViewState()
    try:
        page = _decode_int(_first(params, PARAM_PAGE), 1)
        size = _decode_int(_first(params, PARAM_SIZE), DEFAULT_PAGE_SIZE)
        return ViewState(
            search=(_first(params, PARAM_SEARCH) or "").strip(),
            filters=_decode_filters(params),
            sort=_decode_sort(params),
            page_index=max(page - 1, 0),
            page_size=size if size in PAGE_SIZES else DEFAULT_PAGE_SIZE,
            visibility=_decode_visibility(params),
        )
    except Exception:
        logger.warning("Discarding undecodable view-state %r", params, exc_info=True)
        return ViewState()
