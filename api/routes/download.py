"""
GET /api/v1/download endpoint.

Exports the current table view (filtered rows, active sort, visible columns)
as CSV or Excel. Accepts the same view-state parameters as /database; the
page and page size are ignored because every filtered row is exported.

The filename is ``<dataset>_<YYYY-MM-DD_HH-mm-ss>.<ext>``.
X-Total-Count carries the number of exported rows.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from api.datastore import TableStore, get_store
from utils.config import AppConfig
from utils.export import CSV_MEDIA_TYPE, XLSX_MEDIA_TYPE, export_csv, export_xlsx
from utils.filtering import filter_rows
from utils.view_state import decode_view_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/download", tags=["download"])

_cfg = AppConfig.from_env()

_EXPORTERS = {
    "csv": (export_csv, CSV_MEDIA_TYPE),
    "xlsx": (export_xlsx, XLSX_MEDIA_TYPE),
}


@router.get(
    "",
    summary="Export the current table view",
    responses={
        200: {"description": "File attachment", "content": {CSV_MEDIA_TYPE: {}, XLSX_MEDIA_TYPE: {}}},
        500: {"description": "Export failed"},
    },
)
def download(
    request: Request,
    fmt: str = Query("csv", pattern="^(csv|xlsx)$", description="csv or xlsx"),
    store: TableStore = Depends(get_store),
) -> StreamingResponse:
    state = decode_view_state(request.query_params)
    rows = filter_rows(store.rows, state.search, state.filters)
    exporter, media_type = _EXPORTERS[fmt]
    try:
        content, filename = exporter(
            rows,
            visibility=state.visibility,
            sort_spec=state.sort,
            dataset=_cfg.dataset_name,
            column_names=list(store.column_names),
            case_sensitive=_cfg.symbol_sort_case_sensitive,
        )
    except Exception as exc:
        # Surface as a plain failure; the user can retry the export manually.
        logger.exception("Export failed (fmt=%s, rows=%d)", fmt, len(rows))
        raise HTTPException(status_code=500, detail="Export failed. Please try again.") from exc

    logger.info("Exported %d rows as %s", len(rows), filename)
    return StreamingResponse(
        iter([content]),
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Total-Count": str(len(rows)),
        },
    )
