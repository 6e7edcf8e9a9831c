"""
Pydantic request/response models for the API.

Rank fields are ``int | float | None``: ``None`` (JSON ``null``) is the
"not available" sentinel and is never replaced by 0.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Table rows ────────────────────────────────────────────────────────────────

class RowOut(BaseModel):
    """One transcription factor in the overview table."""
    symbol: str = Field(..., description="HGNC gene symbol", examples=["TP53"])
    overallRank: int | float | None = Field(None, description="Overall rank (null = not available)", examples=[1])
    allDiseasesRank: int | float | None = Field(None, description="All-diseases association rank")
    ardsRank: int | float | None = Field(None, description="Age-related diseases rank")
    strongestLinkedDisease: str = Field("Unknown", description="Strongest linked age-related disease (Unknown = not available)", examples=["Cancer"])
    agingDbEntriesRank: int | float | None = Field(None, description="Aging database entries rank")
    humanAgingEvidence: str = Field("None", description="Yes | No | None")
    mouseInfluence: str = Field("None", description="Pro-Longevity | Anti-Longevity | Unclear | None")
    wormInfluence: str = Field("None", description="Pro-Longevity | Anti-Longevity | Unclear | None")
    flyInfluence: str = Field("None", description="Pro-Longevity | Anti-Longevity | Unclear | None")
    developmentLevel: str = Field("None", description="High | Medium | Medium to Low | Low | None")
    pharosTDL: str = Field("None", description="Tclin | Tchem | Tbio | Tdark | None")


class TableResponse(BaseModel):
    """Full overview table."""
    rows: list[RowOut]
    columnNames: list[str] = Field(..., description="Header labels in display order")
    total: int = Field(..., description="Number of rows", examples=[1642])


class CellColor(BaseModel):
    background: str = Field(..., examples=["#440154"])
    foreground: str = Field(..., examples=["#ffffff"])


class ViewRowOut(RowOut):
    """A row of the derived view with colours for its rank cells."""
    colors: dict[str, CellColor] = Field(default_factory=dict)


class ViewResponse(BaseModel):
    """One page of the filtered, sorted table."""
    rows: list[ViewRowOut]
    columns: list[str] = Field(..., description="Visible column ids in display order")
    total: int = Field(..., description="Rows in the base table")
    filtered: int = Field(..., description="Rows after filtering")
    page: int = Field(..., description="1-based page number")
    page_size: int
    page_count: int
    sort: str = Field(..., examples=["overallRank:asc"])
    query: str = Field(..., description="Canonical query string for this view")


class DetailResponse(BaseModel):
    """Expanded master-table record; keys are the master table headers."""
    model_config = ConfigDict(extra="allow")

    basic_gene_symbol: str


# ── Contact ───────────────────────────────────────────────────────────────────

class ContactSubmission(BaseModel):
    """Contact-form submission. All fields are required and trimmed."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(
        ..., min_length=3, max_length=320,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        examples=["jane@example.org"],
    )
    subject: str = Field(..., min_length=1, max_length=300)
    message: str = Field(..., min_length=1, max_length=10_000)


class ContactResponse(BaseModel):
    status: str = Field(..., examples=["sent"])


class ErrorResponse(BaseModel):
    error: str
    detail: Any = None
