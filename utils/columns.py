"""Column registry for the transcription-factor table.

One descriptor per column holds everything the table engine needs to know
about it: display label, value kind, whether it can be hidden, filtered,
sorted or colour-ranked, and (for enum columns) the canonical value order.
Filter, sort, colour, URL-state and export code all look columns up here
instead of branching on column-id strings.

Usage:
    from utils.columns import COLUMNS, get_column

    col = get_column("pharosTDL")
    col.order   # ("Tclin", "Tchem", "Tbio", "Tdark", "None")
"""

from __future__ import annotations

from dataclasses import dataclass

KIND_TEXT = "text"
KIND_RANK = "rank"
KIND_ENUM = "enum"

INFLUENCE_ORDER = ("Pro-Longevity", "Anti-Longevity", "Unclear", "None")


@dataclass(frozen=True)
class ColumnDescriptor:
    """Static description of one table column."""

    id: str
    label: str
    kind: str
    tooltip: str = ""
    required: bool = False
    """Required columns are always visible and cannot be hidden."""

    filterable: bool = False
    sortable: bool = True
    order: tuple[str, ...] = ()
    """Canonical value order for enum columns (best/most advanced first)."""

    @property
    def colorable(self) -> bool:
        return self.kind == KIND_RANK

    @property
    def is_rank(self) -> bool:
        return self.kind == KIND_RANK

    @property
    def is_enum(self) -> bool:
        return self.kind == KIND_ENUM


COLUMNS: tuple[ColumnDescriptor, ...] = (
    ColumnDescriptor(
        "symbol", "TF Symbol", KIND_TEXT,
        tooltip="HGNC gene symbol of the transcription factor",
        required=True,
    ),
    ColumnDescriptor(
        "overallRank", "Overall Rank", KIND_RANK,
        tooltip="Combined rank across disease and aging evidence (1 = strongest)",
        required=True,
    ),
    ColumnDescriptor(
        "allDiseasesRank", "All Diseases Rank", KIND_RANK,
        tooltip="Rank by total Open Targets association score over all diseases",
    ),
    ColumnDescriptor(
        "ardsRank", "ARDs Rank", KIND_RANK,
        tooltip="Rank by number of associated age-related diseases",
    ),
    ColumnDescriptor(
        "strongestLinkedDisease", "Strongest Linked ARD", KIND_TEXT,
        tooltip="Age-related disease with the strongest association",
        filterable=True,
    ),
    ColumnDescriptor(
        "agingDbEntriesRank", "Aging Rank", KIND_RANK,
        tooltip="Rank by number of entries across aging databases",
    ),
    ColumnDescriptor(
        "humanAgingEvidence", "Human Link Y/N", KIND_ENUM,
        tooltip="Whether human aging evidence exists",
        filterable=True, order=("Yes", "No", "None"),
    ),
    ColumnDescriptor(
        "mouseInfluence", "M. musculus Link", KIND_ENUM,
        tooltip="Influence on lifespan in mouse models",
        filterable=True, order=INFLUENCE_ORDER,
    ),
    ColumnDescriptor(
        "wormInfluence", "C. elegans Link", KIND_ENUM,
        tooltip="Influence on lifespan in worm models",
        filterable=True, order=INFLUENCE_ORDER,
    ),
    ColumnDescriptor(
        "flyInfluence", "D. melanogaster Link", KIND_ENUM,
        tooltip="Influence on lifespan in fly models",
        filterable=True, order=INFLUENCE_ORDER,
    ),
    ColumnDescriptor(
        "developmentLevel", "Development Level", KIND_ENUM,
        tooltip="Drug development maturity across DGIdb, TTD and ChEMBL",
        filterable=True, order=("High", "Medium", "Medium to Low", "Low", "None"),
    ),
    ColumnDescriptor(
        "pharosTDL", "Pharos TDL", KIND_ENUM,
        tooltip="Pharos target development level",
        filterable=True, order=("Tclin", "Tchem", "Tbio", "Tdark", "None"),
    ),
)

_BY_ID: dict[str, ColumnDescriptor] = {c.id: c for c in COLUMNS}

COLUMN_IDS: tuple[str, ...] = tuple(c.id for c in COLUMNS)
REQUIRED_COLUMNS: frozenset[str] = frozenset(c.id for c in COLUMNS if c.required)
RANK_COLUMNS: tuple[str, ...] = tuple(c.id for c in COLUMNS if c.is_rank)
FILTERABLE_COLUMNS: tuple[str, ...] = tuple(c.id for c in COLUMNS if c.filterable)

DEFAULT_SORT_COLUMN = "overallRank"


def get_column(column_id: str | None) -> ColumnDescriptor | None:
    """Return the descriptor for *column_id*, or ``None`` if unknown."""
    if column_id is None:
        return None
    return _BY_ID.get(column_id)


def is_known_column(column_id: str | None) -> bool:
    return column_id in _BY_ID


def column_labels(column_names: list[str] | None = None) -> dict[str, str]:
    """Map column id -> header label.

    Header labels supplied by the data file (in display order) take
    precedence over the registry labels; missing entries fall back.
    """
    labels = {c.id: c.label for c in COLUMNS}
    for column_id, name in zip(COLUMN_IDS, column_names or []):
        if name and name.strip():
            labels[column_id] = name.strip()
    return labels
