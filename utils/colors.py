"""Rank colour mapping.

Each rank column gets its own scale: the observed minimum maps to the
first (darkest, "best") palette entry and the maximum to the last. The
index is built once per base row set so a rank value keeps the same colour
no matter how the table is filtered, sorted or paged.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from utils.columns import RANK_COLUMNS

# Viridis, sampled at 10 evenly spaced points (dark -> light).
PALETTE: tuple[str, ...] = (
    "#440154", "#482878", "#3e4a89", "#31688e", "#26828e",
    "#1f9e89", "#35b779", "#6dcd59", "#b4de2c", "#fde725",
)

# Colour for the "not available" sentinel; not part of PALETTE.
NEUTRAL_COLOR = "#e5e7eb"

ColorIndex = dict[str, dict[Any, str]]


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def palette_index(value: float, lo: float, hi: float, size: int = len(PALETTE)) -> int:
    """Return the palette slot for *value* on the ``[lo, hi]`` scale.

    A degenerate scale (``hi <= lo``) always yields slot 0.
    """
    if hi <= lo:
        return 0
    normalized = min(max((value - lo) / (hi - lo), 0.0), 1.0)
    return min(int(math.floor(normalized * (size - 1))), size - 1)


def build_color_index(
    rows: Sequence[Mapping[str, Any]],
    rank_columns: Iterable[str] = RANK_COLUMNS,
) -> ColorIndex:
    """Build ``{column: {value: colour}}`` for the given rank columns.

    Every observed numeric value gets a palette colour; the sentinel
    (``None``, or any non-numeric value) maps to :data:`NEUTRAL_COLOR`.
    """
    index: ColorIndex = {}
    for column in rank_columns:
        observed = {row.get(column) for row in rows}
        numeric = sorted(v for v in observed if _is_number(v))
        mapping: dict[Any, str] = {None: NEUTRAL_COLOR}
        if numeric:
            lo, hi = numeric[0], numeric[-1]
            for value in numeric:
                mapping[value] = PALETTE[palette_index(value, lo, hi)]
        for value in observed:
            if value not in mapping:
                mapping[value] = NEUTRAL_COLOR
        index[column] = mapping
    return index


def color_of(index: ColorIndex, column: str, value: Any) -> str | None:
    """Look up the colour of *value* in *column*; ``None`` for non-rank columns."""
    mapping = index.get(column)
    if mapping is None:
        return None
    return mapping.get(value, NEUTRAL_COLOR)


def text_color(background: str | None) -> str:
    """Readable foreground for a palette background (light text on dark slots)."""
    if background in PALETTE[:5]:
        return "#ffffff"
    return "#111827"
