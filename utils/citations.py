"""Citation tables for the documentation page.

Each ``*.csv`` file in the documentation directory becomes one titled
table. The title comes from the file name (``01_data_sources.csv`` ->
"Data Sources"); files are listed in name order so a numeric prefix
controls placement. The delimiter is sniffed between ``;`` and ``,``.

A file that cannot be parsed yields a table with ``error`` set; the
other tables are unaffected.
"""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

_URL = re.compile(r"^https?://\S+$")


@dataclass
class CitationTable:
    title: str
    source: str
    header: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    error: str | None = None
    """Set when the file could not be read; the page shows a notice instead."""


def title_from_filename(path: Path) -> str:
    stem = re.sub(r"^\d+[_\-\s]*", "", path.stem)
    words = re.split(r"[_\-\s]+", stem)
    return " ".join(w[:1].upper() + w[1:] for w in words if w) or path.stem


def is_url(value: str) -> bool:
    return bool(_URL.match(value.strip()))


def read_citation_table(path: Path) -> CitationTable:
    table = CitationTable(title=title_from_filename(path), source=path.name)
    try:
        text = path.read_text(encoding="utf-8-sig")
        if not text.strip():
            raise ValueError("file is empty")
        try:
            dialect = csv.Sniffer().sniff(text.splitlines()[0], delimiters=";,")
            delimiter = dialect.delimiter
        except csv.Error:
            delimiter = ";"
        records = [
            [cell.strip() for cell in r]
            for r in csv.reader(text.splitlines(), delimiter=delimiter)
            if any(cell.strip() for cell in r)
        ]
        if not records:
            raise ValueError("file has no rows")
        table.header, table.rows = records[0], records[1:]
    except (OSError, UnicodeDecodeError, csv.Error, ValueError) as exc:
        logger.warning("Could not read citation table %s: %s", path, exc)
        table.error = "This table could not be loaded."
    return table


def load_citation_tables(directory: Path) -> list[CitationTable]:
    """Read every CSV in *directory*; a missing directory yields no tables."""
    if not directory.is_dir():
        logger.info("No documentation directory at %s", directory)
        return []
    return [read_citation_table(p) for p in sorted(directory.glob("*.csv"))]
