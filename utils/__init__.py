"""Shared utilities for the TFactorTx explorer.

The table engine (filter, sort, colour, pagination, URL state, export)
lives here as pure functions over in-memory rows; ``api/`` wires it to
HTTP.
"""

# Column registry
from utils.columns import (
    COLUMNS,
    COLUMN_IDS,
    REQUIRED_COLUMNS,
    RANK_COLUMNS,
    FILTERABLE_COLUMNS,
    ColumnDescriptor,
    get_column,
)

# Table engine
from utils.filtering import filter_rows, facet_values
from utils.colors import PALETTE, NEUTRAL_COLOR, build_color_index, color_of
from utils.sorting import SortSpec, sort_rows, apply_sort, toggle_sort
from utils.pagination import PAGE_SIZES, DEFAULT_PAGE_SIZE, Pagination
from utils.view_state import ViewState, encode_view_state, decode_view_state, to_query_string
from utils.export import export_csv, export_xlsx, export_filename

# Data loading
from utils.data_source import (
    DataUnavailableError,
    read_overview_csv,
    read_detail_record,
    rows_from_payload,
    fetch_table,
)

# Configuration
from utils.config import Config, AppConfig

__all__ = [
    # Columns
    "COLUMNS",
    "COLUMN_IDS",
    "REQUIRED_COLUMNS",
    "RANK_COLUMNS",
    "FILTERABLE_COLUMNS",
    "ColumnDescriptor",
    "get_column",
    # Engine
    "filter_rows",
    "facet_values",
    "PALETTE",
    "NEUTRAL_COLOR",
    "build_color_index",
    "color_of",
    "SortSpec",
    "sort_rows",
    "apply_sort",
    "toggle_sort",
    "PAGE_SIZES",
    "DEFAULT_PAGE_SIZE",
    "Pagination",
    "ViewState",
    "encode_view_state",
    "decode_view_state",
    "to_query_string",
    "export_csv",
    "export_xlsx",
    "export_filename",
    # Data
    "DataUnavailableError",
    "read_overview_csv",
    "read_detail_record",
    "rows_from_payload",
    "fetch_table",
    # Config
    "Config",
    "AppConfig",
]
