"""
Table data endpoints.

    GET /data            full overview table {rows, columnNames, total}
    GET /data/detail     expanded master record for one symbol
    GET /data/view       one page of the filtered/sorted table, driven by
                         the same query parameters as the /database page
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.datastore import TableStore, get_store
from api.models import CellColor, DetailResponse, RowOut, TableResponse, ViewResponse, ViewRowOut
from utils.colors import color_of, text_color
from utils.config import AppConfig
from utils.data_source import DataUnavailableError
from utils.table_view import derive_view
from utils.view_state import decode_view_state, to_query_string

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/data", tags=["data"])

_cfg = AppConfig.from_env()


@router.get(
    "",
    response_model=TableResponse,
    summary="Full overview table",
    responses={503: {"description": "Data file unavailable"}},
)
def get_table(store: TableStore = Depends(get_store)) -> TableResponse:
    """Return every row in source order, with the header labels."""
    return TableResponse(
        rows=[RowOut(**row) for row in store.rows],
        columnNames=list(store.column_names),
        total=store.total,
    )


@router.get(
    "/detail",
    response_model=DetailResponse,
    summary="Expanded record for one transcription factor",
    responses={
        404: {"description": "Unknown symbol"},
        503: {"description": "Master file unavailable"},
    },
)
def get_detail(
    symbol: str = Query(..., min_length=1, description="Gene symbol, e.g. TP53"),
    store: TableStore = Depends(get_store),
):
    try:
        record = store.detail(symbol)
    except DataUnavailableError as exc:
        logger.error("Detail data unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="Detail data is temporarily unavailable.") from exc
    if record is None:
        raise HTTPException(status_code=404, detail=f"Gene {symbol} not found")
    return record


@router.get(
    "/view",
    response_model=ViewResponse,
    summary="Current page of the derived table view",
)
def get_view(request: Request, store: TableStore = Depends(get_store)) -> ViewResponse:
    """Filter, sort and paginate the table.

    Accepts ``q``, ``filters``, ``sort``, ``cols``, ``page`` and ``size``;
    invalid values fall back to defaults rather than failing.
    """
    state = decode_view_state(request.query_params)
    view = derive_view(store.rows, state, case_sensitive=_cfg.symbol_sort_case_sensitive)
    rows = []
    for row in view.page_rows:
        colors = {}
        for column_id in view.state.visible_columns:
            background = color_of(store.color_index, column_id, row.get(column_id))
            if background is not None:
                colors[column_id] = CellColor(background=background,
                                              foreground=text_color(background))
        rows.append(ViewRowOut(**row, colors=colors))
    pagination = view.pagination
    return ViewResponse(
        rows=rows,
        columns=view.state.visible_columns,
        total=store.total,
        filtered=pagination.total_rows,
        page=pagination.page_number,
        page_size=pagination.page_size,
        page_count=pagination.page_count,
        sort=view.state.sort.encode(),
        query=to_query_string(view.state),
    )
