"""
In-memory table store for the API.

The overview table is loaded once per process, on first use, and held as an
immutable ``TableStore``: the rows, the header labels, and the rank colour
index built from the full row set. Requests never mutate it; each one
derives its own filtered/sorted/paged view from these rows.

Sources are resolved at import time from ``AppConfig``:
    APP_DATA_DIR   directory with the CSVs (default: ``data``)
    APP_DATA_URL   optional ``/api/v1/data`` URL of another instance; when
                   set, the overview rows are fetched from it instead of
                   the overview CSV

Both can be overridden by ``create_app(data_dir=..., data_url=...)``.
Detail records and citation tables always come from the data directory.

Expected layout:
    <data_dir>/tfactortx_overview.csv     12-column overview table
    <data_dir>/tfactortx_master.csv       expanded per-gene master table
    <data_dir>/documentation/*.csv        citation tables
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import HTTPException

from utils.colors import ColorIndex, build_color_index
from utils.config import AppConfig
from utils.data_source import (
    DataUnavailableError,
    fetch_table,
    read_detail_record,
    read_overview_csv,
)

logger = logging.getLogger(__name__)

OVERVIEW_FILE = "tfactortx_overview.csv"
MASTER_FILE = "tfactortx_master.csv"
DOCUMENTATION_DIR = "documentation"

_cfg = AppConfig.from_env()
_DATA_DIR: Path = _cfg.data_dir
_DATA_URL: str | None = _cfg.data_url
_store: "TableStore | None" = None
_lock = threading.Lock()


@dataclass(frozen=True)
class TableStore:
    rows: tuple[dict[str, Any], ...]
    column_names: tuple[str, ...]
    color_index: ColorIndex
    loaded_at: datetime
    updated_at: datetime
    """Modification time of the overview file (load time for a remote source)."""

    data_dir: Path
    source: str
    """Overview file path or remote URL the rows came from."""

    @property
    def total(self) -> int:
        return len(self.rows)

    def row(self, symbol: str) -> dict[str, Any] | None:
        for r in self.rows:
            if r["symbol"] == symbol:
                return r
        return None

    def detail(self, symbol: str) -> dict[str, Any] | None:
        """Expanded master record for *symbol*, or ``None`` if unknown.

        Raises:
            DataUnavailableError: If the master file cannot be read.
        """
        return read_detail_record(self.data_dir / MASTER_FILE, symbol)


def get_data_dir() -> Path:
    """Return the configured data directory."""
    return _DATA_DIR


def set_data_dir(path: Path) -> None:
    """Point the store at another data directory and drop any loaded data."""
    global _DATA_DIR
    _DATA_DIR = Path(path)
    reset_store()


def get_data_url() -> str | None:
    return _DATA_URL


def set_data_url(url: str | None) -> None:
    """Load overview rows from *url* (``None``: from the data directory)."""
    global _DATA_URL
    _DATA_URL = url or None
    reset_store()


def reset_store() -> None:
    global _store
    with _lock:
        _store = None


def _read_overview(data_dir: Path, data_url: str | None):
    """Return ``(rows, column_names, updated_at, source)`` from the configured source."""
    if data_url:
        rows, column_names = fetch_table(data_url)
        logger.info("Fetched %d rows from %s", len(rows), data_url)
        return rows, column_names, datetime.now(), data_url
    path = data_dir / OVERVIEW_FILE
    rows, column_names = read_overview_csv(path)
    try:
        updated_at = datetime.fromtimestamp(path.stat().st_mtime)
    except OSError as exc:
        raise DataUnavailableError(f"Cannot stat overview file {path}: {exc}") from exc
    return rows, column_names, updated_at, str(path)


def load_store() -> TableStore:
    """Return the process-wide store, loading it on first call.

    A failed load is not cached, so the next request retries.

    Raises:
        DataUnavailableError: If the overview table cannot be loaded.
    """
    global _store
    if _store is not None:
        return _store
    with _lock:
        if _store is None:
            data_dir = _DATA_DIR
            rows, column_names, updated_at, source = _read_overview(data_dir, _DATA_URL)
            _store = TableStore(
                rows=tuple(rows),
                column_names=tuple(column_names),
                color_index=build_color_index(rows),
                loaded_at=datetime.now(),
                updated_at=updated_at,
                data_dir=data_dir,
                source=source,
            )
        return _store


def get_store() -> TableStore:
    """FastAPI dependency: the loaded store, or 503 if the data is unavailable."""
    try:
        return load_store()
    except DataUnavailableError as exc:
        logger.error("Table data unavailable: %s", exc)
        raise HTTPException(
            status_code=503,
            detail="Table data is temporarily unavailable. Please try again.",
        ) from exc
