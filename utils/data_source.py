"""Load the transcription-factor overview table and per-gene detail records.

Two sources produce the same in-memory form (a list of row dicts keyed by
column id, plus the ordered header labels):

    read_overview_csv(path)     semicolon-delimited overview file
    fetch_table(url)            JSON ``{rows, columnNames, total}`` from a
                                running instance (``/api/v1/data``)

Fields are positional: the overview header line only supplies display
labels, so the column order of the file must match the column registry.

Rank values that are missing or spelled as one of the "not available"
tokens become ``None``; they are never coerced to 0.
"""

from __future__ import annotations

import csv
import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import requests

from utils.columns import COLUMN_IDS, get_column
from utils.formatting import UNKNOWN

logger = logging.getLogger(__name__)

DELIMITER = ";"

NA_TOKENS = frozenset({"", "#na", "#n/a", "na", "n/a", "not available"})

# Detail-record headers containing one of these hold numeric measures.
_NUMERIC_HEADER_MARKERS = ("rank", "count", "score")
_STRICT_NUMBER = re.compile(r"^-?\d+(?:\.\d+)?$")

DETAIL_SYMBOL_FIELD = "basic_gene_symbol"



class DataUnavailableError(Exception):
    """The table data could not be loaded (missing file, I/O or HTTP error,
    or a body that does not match the expected shape)."""


# ── Value normalisation ───────────────────────────────────────────────────────

def is_na(value: Any) -> bool:
    if value is None:
        return True
    return str(value).strip().lower() in NA_TOKENS


def parse_rank(value: Any) -> int | float | None:
    """Parse a rank cell; ``None`` for the "not available" sentinel.

    >>> parse_rank("12"), parse_rank("#NA"), parse_rank("")
    (12, None, None)
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if is_na(value):
        return None
    text = str(value).strip()
    if not _STRICT_NUMBER.match(text):
        logger.debug("Non-numeric rank %r treated as not available", text)
        return None
    number = float(text)
    return int(number) if number.is_integer() else number


def _normalize_human(value: str) -> str:
    text = value.strip()
    if is_na(text):
        return "None"
    upper = text.upper()
    if upper in ("Y", "YES"):
        return "Yes"
    if upper in ("N", "NO"):
        return "No"
    return text


def _normalize_enum(value: str) -> str:
    """NA tokens become ``"Unknown"`` (outside every enum order, and filterable)."""
    text = value.strip()
    return UNKNOWN if is_na(text) else text


def _normalize_dev_level(value: str) -> str:
    # Source values carry a sort prefix: "1_High", "2_Medium", "5_None".
    text = value.strip()
    if is_na(text):
        return "None"
    return re.sub(r"^\d+_", "", text).replace("_", " ")


def _normalize_text(value: str) -> str:
    text = value.strip()
    return "" if is_na(text) else text


_ENUM_NORMALIZERS = {
    "humanAgingEvidence": _normalize_human,
    "developmentLevel": _normalize_dev_level,
}

_TEXT_NORMALIZERS = {
    "strongestLinkedDisease": _normalize_enum,
}


def normalize_value(column_id: str, raw: Any) -> Any:
    """Convert one raw source cell to its in-memory value for *column_id*."""
    column = get_column(column_id)
    if column is None:
        return raw
    if column.is_rank:
        return parse_rank(raw)
    text = "" if raw is None else str(raw)
    if column.is_enum:
        return _ENUM_NORMALIZERS.get(column_id, _normalize_enum)(text)
    return _TEXT_NORMALIZERS.get(column_id, _normalize_text)(text)


def row_from_values(values: Sequence[Any]) -> dict[str, Any]:
    """Build a row from positional values (missing trailing values are NA)."""
    padded = list(values) + [""] * (len(COLUMN_IDS) - len(values))
    return {
        column_id: normalize_value(column_id, padded[i])
        for i, column_id in enumerate(COLUMN_IDS)
    }


def _dedupe(rows: list[dict[str, Any]], source: str) -> list[dict[str, Any]]:
    """Drop rows with an empty symbol and repeats of an earlier symbol."""
    seen: set[str] = set()
    kept = []
    for lineno, row in enumerate(rows, start=2):
        symbol = row.get("symbol") or ""
        if not symbol:
            logger.warning("%s: row %d has no symbol, skipped", source, lineno)
            continue
        if symbol in seen:
            logger.warning("%s: duplicate symbol %s at row %d, skipped",
                           source, symbol, lineno)
            continue
        seen.add(symbol)
        kept.append(row)
    return kept


# ── Overview CSV ──────────────────────────────────────────────────────────────

def read_overview_csv(path: Path | str) -> tuple[list[dict[str, Any]], list[str]]:
    """Read the overview CSV.

    Args:
        path: Semicolon-delimited file; the first line is the header.

    Returns:
        ``(rows, column_names)``: rows keyed by column id, and the header
        labels in file order.

    Raises:
        DataUnavailableError: If the file is missing, unreadable or empty.
    """
    path = Path(path)
    try:
        with open(path, newline="", encoding="utf-8-sig") as fh:
            records = [r for r in csv.reader(fh, delimiter=DELIMITER) if any(c.strip() for c in r)]
    except OSError as exc:
        raise DataUnavailableError(f"Cannot read overview file {path}: {exc}") from exc
    except (csv.Error, UnicodeDecodeError) as exc:
        raise DataUnavailableError(f"Malformed overview file {path}: {exc}") from exc

    if not records:
        raise DataUnavailableError(f"Overview file {path} is empty")

    header, body = records[0], records[1:]
    column_names = [h.strip() for h in header]
    rows = _dedupe([row_from_values(r) for r in body], path.name)
    logger.info("Loaded %d rows from %s", len(rows), path)
    return rows, column_names


# ── JSON payload / remote instance ────────────────────────────────────────────

def rows_from_payload(payload: Any) -> tuple[list[dict[str, Any]], list[str]]:
    """Adapt a ``{rows, columnNames, total}`` body to the in-memory form.

    Rows may be keyed by column id or given as positional lists.

    Raises:
        DataUnavailableError: If the body does not have the expected shape.
    """
    if not isinstance(payload, Mapping):
        raise DataUnavailableError("Data payload is not a JSON object")
    raw_rows = payload.get("rows")
    column_names = payload.get("columnNames") or []
    if not isinstance(raw_rows, list) or not isinstance(column_names, list):
        raise DataUnavailableError("Data payload is missing 'rows' or 'columnNames'")

    rows = []
    for raw in raw_rows:
        if isinstance(raw, Mapping):
            rows.append({c: normalize_value(c, raw.get(c)) for c in COLUMN_IDS})
        elif isinstance(raw, list):
            rows.append(row_from_values(raw))
        else:
            raise DataUnavailableError(f"Unexpected row of type {type(raw).__name__}")
    return _dedupe(rows, "payload"), [str(n) for n in column_names]


def fetch_table(
    url: str,
    session: requests.Session | None = None,
    timeout: float = 30,
) -> tuple[list[dict[str, Any]], list[str]]:
    """Fetch the table from a remote instance.

    Raises:
        DataUnavailableError: On any transport error, non-2xx status or
            malformed body.
    """
    if session is None:
        from utils.http import build_session
        session = build_session()
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as exc:
        raise DataUnavailableError(f"Failed to fetch table from {url}: {exc}") from exc
    except ValueError as exc:
        raise DataUnavailableError(f"Response from {url} is not JSON") from exc
    return rows_from_payload(payload)


# ── Detail (master) table ─────────────────────────────────────────────────────

def _detail_value(header: str, raw: str) -> Any:
    value = raw.replace("\r", "").replace("\n", "").strip()
    if any(marker in header.lower() for marker in _NUMERIC_HEADER_MARKERS):
        if value in ("", "#N/A"):
            return None
        if _STRICT_NUMBER.match(value):
            number = float(value)
            return int(number) if number.is_integer() else number
    # Multi-valued fields such as "4;2" stay strings.
    return value


def read_detail_record(path: Path | str, symbol: str) -> dict[str, Any] | None:
    """Return the master-table record for *symbol*, or ``None`` if absent.

    Quoted fields may contain the delimiter. Headers containing ``rank``,
    ``count`` or ``score`` get numeric conversion; non-numeric values in
    those fields are kept as strings.

    Raises:
        DataUnavailableError: If the master file cannot be read.
    """
    path = Path(path)
    symbol = (symbol or "").strip()
    if not symbol:
        return None
    try:
        with open(path, newline="", encoding="utf-8-sig") as fh:
            reader = csv.reader(fh, delimiter=DELIMITER)
            header = [h.strip() for h in next(reader, [])]
            if DETAIL_SYMBOL_FIELD not in header:
                raise DataUnavailableError(
                    f"Master file {path} has no {DETAIL_SYMBOL_FIELD} column"
                )
            symbol_idx = header.index(DETAIL_SYMBOL_FIELD)
            for values in reader:
                if len(values) > symbol_idx and values[symbol_idx].strip() == symbol:
                    padded = values + [""] * (len(header) - len(values))
                    return {h: _detail_value(h, padded[i]) for i, h in enumerate(header)}
    except OSError as exc:
        raise DataUnavailableError(f"Cannot read master file {path}: {exc}") from exc
    except (csv.Error, UnicodeDecodeError) as exc:
        raise DataUnavailableError(f"Malformed master file {path}: {exc}") from exc
    return None
