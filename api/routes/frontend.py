"""
Frontend HTML routes.

Serves the Jinja2 templates for the site. The table page is server-rendered;
every control (sort header, filter option, column toggle, pager, page-size
selector, search box) is a link or form whose target URL already encodes
the next view-state, and HTMX swaps in the /partials/table fragment.

Routes:
    GET  /                      -> home.html
    GET  /database              -> database.html (view-state seeded from URL)
    GET  /partials/table        -> partials/table.html (HTMX swap target)
    GET  /database/{symbol}     -> gene.html, or gene_not_found.html (404)
    GET  /documentation         -> documentation.html (+ citation tables)
    GET  /contact               -> contact.html
    POST /contact               -> partials/contact_result.html (HTMX)

Fragment responses carry ``HX-Replace-Url`` with the canonical /database URL
so the address bar follows the view without adding history entries. A
page-size change (the form sends the old size as ``from_size``) also sends
``HX-Trigger: table-scroll-reset``.
"""

import logging
from dataclasses import replace
from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.datastore import DOCUMENTATION_DIR, TableStore, get_data_dir, load_store
from api.errors import GENERIC_SERVER_ERROR, error_title, is_api_request, json_error
from api.models import ContactSubmission
from api.routes.contact import relay
from utils.citations import load_citation_tables
from utils.colors import color_of, text_color
from utils.columns import COLUMNS, FILTERABLE_COLUMNS, column_labels, get_column
from utils.config import AppConfig
from utils.data_source import DataUnavailableError
from utils.filtering import facet_values
from utils.formatting import format_cell
from utils.gene_detail import build_gene_detail
from utils.pagination import DEFAULT_PAGE_SIZE, PAGE_SIZES
from utils.sorting import toggle_sort
from utils.table_view import TableView, derive_view
from utils.view_state import (
    PARAM_SEARCH, PARAM_SIZE, ViewState, decode_view_state, encode_view_state, to_query_string,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["frontend"])

_cfg = AppConfig.from_env()

# Templates instance is set by create_app() after mounting.
_templates: Jinja2Templates | None = None

SCROLL_RESET_EVENT = "table-scroll-reset"
PARAM_PREVIOUS_SIZE = "from_size"


def set_templates(t: Jinja2Templates) -> None:
    global _templates
    _templates = t


def _tmpl() -> Jinja2Templates:
    if _templates is None:
        raise RuntimeError("Templates not initialised — call set_templates() first")
    return _templates


# ── Table context helpers ─────────────────────────────────────────────────────

def _nav(state: ViewState) -> dict[str, str]:
    """Full-page URL (href fallback) and fragment URL (hx-get) for *state*."""
    qs = to_query_string(state)
    suffix = f"?{qs}" if qs else ""
    return {"href": f"/database{suffix}", "hx": f"/partials/table{suffix}"}


def _hidden_fields(state: ViewState, *drop: str) -> dict[str, str]:
    params = encode_view_state(state)
    for name in drop:
        params.pop(name, None)
    return params


def _cell(store: TableStore, column_id: str, value: Any, symbol: str) -> dict[str, Any]:
    background = color_of(store.color_index, column_id, value)
    return {
        "column": column_id,
        "text": format_cell(column_id, value),
        "background": background,
        "foreground": text_color(background) if background else None,
        "href": f"/database/{quote(symbol)}" if column_id == "symbol" else None,
    }


def _table_context(store: TableStore, view: TableView) -> dict[str, Any]:
    """Everything partials/table.html needs to render one view."""
    state = view.state
    pagination = view.pagination
    labels = column_labels(list(store.column_names))
    visible = [get_column(c) for c in state.visible_columns]

    headers = [
        {
            "id": col.id,
            "label": labels[col.id],
            "tooltip": col.tooltip,
            "sortable": col.sortable,
            "direction": state.sort.direction if state.sort.column == col.id else None,
            "nav": _nav(replace(state, sort=toggle_sort(state.sort, col.id), page_index=0)),
        }
        for col in visible
    ]
    rows = [
        [_cell(store, col.id, row.get(col.id), row["symbol"]) for col in visible]
        for row in view.page_rows
    ]
    facets = [
        {
            "id": column_id,
            "label": labels[column_id],
            "options": [
                {
                    "value": value,
                    "active": value in state.filters.get(column_id, ()),
                    "nav": _nav(state.with_filter_toggled(column_id, value)),
                }
                for value in facet_values(store.rows, column_id)
            ],
        }
        for column_id in FILTERABLE_COLUMNS
    ]
    active_filters = [
        {"label": labels[column_id], "value": value,
         "nav": _nav(state.with_filter_toggled(column_id, value))}
        for column_id in FILTERABLE_COLUMNS
        for value in sorted(state.filters.get(column_id, ()))
    ]
    column_toggles = [
        {
            "id": col.id,
            "label": labels[col.id],
            "visible": col.id in state.visible_columns,
            "required": col.required,
            "nav": _nav(state.with_column_toggled(col.id)),
        }
        for col in COLUMNS
    ]
    pager = {
        "first": _nav(replace(state, page_index=pagination.first().page_index)),
        "prev": _nav(replace(state, page_index=pagination.prev().page_index)),
        "next": _nav(replace(state, page_index=pagination.next().page_index)),
        "last": _nav(replace(state, page_index=pagination.last().page_index)),
        "has_prev": pagination.has_prev,
        "has_next": pagination.has_next,
    }
    cleared = ViewState(sort=state.sort, page_size=state.page_size, visibility=state.visibility)
    export_qs = to_query_string(replace(state, page_index=0, page_size=DEFAULT_PAGE_SIZE))
    export_sep = "&" if export_qs else ""

    return {
        "state": state,
        "pagination": pagination,
        "total": store.total,
        "filtered": pagination.total_rows,
        "headers": headers,
        "rows": rows,
        "facets": facets,
        "active_filters": active_filters,
        "column_toggles": column_toggles,
        "pager": pager,
        "page_sizes": PAGE_SIZES,
        "clear_nav": _nav(cleared),
        "has_active_filters": state.has_active_filters,
        "search_fields": _hidden_fields(replace(state, page_index=0), PARAM_SEARCH),
        "size_fields": _hidden_fields(state, PARAM_SIZE),
        "export_csv_url": f"/api/v1/download?{export_qs}{export_sep}fmt=csv",
        "export_xlsx_url": f"/api/v1/download?{export_qs}{export_sep}fmt=xlsx",
        "canonical_url": _nav(state)["href"],
        "updated_at": store.updated_at,
    }


def _previous_page_size(request: Request) -> int | None:
    try:
        return int(request.query_params.get(PARAM_PREVIOUS_SIZE, ""))
    except ValueError:
        return None


def _view_for(request: Request, store: TableStore) -> TableView:
    state = decode_view_state(request.query_params)
    return derive_view(
        store.rows, state,
        case_sensitive=_cfg.symbol_sort_case_sensitive,
        previous_page_size=_previous_page_size(request),
    )


def _data_unavailable(request: Request, template: str, exc: Exception) -> HTMLResponse:
    logger.error("Table data unavailable for %s: %s", request.url.path, exc)
    # Retry reloads the full page, never the bare fragment.
    path = "/database" if request.url.path == "/partials/table" else request.url.path
    query = f"?{request.url.query}" if request.url.query else ""
    return _tmpl().TemplateResponse(
        request,
        template,
        {"unavailable": True, "retry_url": path + query},
        status_code=503,
    )


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def home(request: Request) -> HTMLResponse:
    """Landing page with a summary of the dataset."""
    try:
        store = load_store()
        total, updated_at = store.total, store.updated_at
    except DataUnavailableError as exc:
        # The home page still renders without the numbers.
        logger.warning("Home page rendered without table data: %s", exc)
        total, updated_at = None, None
    return _tmpl().TemplateResponse(
        request, "home.html", {"total": total, "updated_at": updated_at},
    )


@router.get("/database", response_class=HTMLResponse, include_in_schema=False)
def database(request: Request) -> HTMLResponse:
    """Full table page; the URL seeds the view-state."""
    try:
        store = load_store()
    except DataUnavailableError as exc:
        return _data_unavailable(request, "database.html", exc)
    view = _view_for(request, store)
    return _tmpl().TemplateResponse(request, "database.html", _table_context(store, view))


@router.get("/partials/table", response_class=HTMLResponse, include_in_schema=False)
def table_partial(request: Request) -> HTMLResponse:
    """HTMX partial: the table region for the requested view-state."""
    try:
        store = load_store()
    except DataUnavailableError as exc:
        return _data_unavailable(request, "partials/data_unavailable.html", exc)
    view = _view_for(request, store)
    ctx = _table_context(store, view)
    headers = {"HX-Replace-Url": ctx["canonical_url"]}
    if view.pagination.scroll_reset:
        headers["HX-Trigger"] = SCROLL_RESET_EVENT
    return _tmpl().TemplateResponse(request, "partials/table.html", ctx, headers=headers)


@router.get("/database/{symbol}", response_class=HTMLResponse, include_in_schema=False)
def gene_page(symbol: str, request: Request) -> HTMLResponse:
    """Per-gene detail page."""
    try:
        store = load_store()
        record = store.detail(symbol)
    except DataUnavailableError as exc:
        return _data_unavailable(request, "errors/data_unavailable.html", exc)

    if record is None:
        return _tmpl().TemplateResponse(
            request, "gene_not_found.html", {"symbol": symbol}, status_code=404,
        )

    row = store.row(symbol)
    summary = []
    if row is not None:
        labels = column_labels(list(store.column_names))
        summary = [
            {"label": labels[col.id], **_cell(store, col.id, row.get(col.id), symbol)}
            for col in COLUMNS if col.id != "symbol"
        ]
    return _tmpl().TemplateResponse(
        request,
        "gene.html",
        {"gene": build_gene_detail(record), "summary": summary},
    )


@router.get("/documentation", response_class=HTMLResponse, include_in_schema=False)
def documentation(request: Request) -> HTMLResponse:
    """Documentation page: column reference plus CSV citation tables."""
    tables = load_citation_tables(get_data_dir() / DOCUMENTATION_DIR)
    return _tmpl().TemplateResponse(
        request, "documentation.html", {"columns": COLUMNS, "tables": tables},
    )


@router.get("/contact", response_class=HTMLResponse, include_in_schema=False)
def contact_page(request: Request) -> HTMLResponse:
    return _tmpl().TemplateResponse(request, "contact.html", {"values": {}, "errors": {}})


@router.post("/contact", response_class=HTMLResponse, include_in_schema=False)
def contact_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    subject: str = Form(""),
    message: str = Form(""),
) -> HTMLResponse:
    """Validate and relay; HTMX gets the result fragment, a plain post the full page."""
    template = "partials/contact_result.html" if request.headers.get("HX-Request") else "contact.html"
    values = {"name": name, "email": email, "subject": subject, "message": message}
    try:
        submission = ContactSubmission(**values)
    except ValidationError as exc:
        errors = {str(e["loc"][0]): e["msg"] for e in exc.errors()}
        return _tmpl().TemplateResponse(
            request, template,
            {"sent": False, "errors": errors, "values": values,
             "message": "Please correct the highlighted fields."},
            status_code=422,
        )
    try:
        relay(submission)
    except HTTPException as exc:
        return _tmpl().TemplateResponse(
            request, template,
            {"sent": False, "errors": {}, "values": values, "message": exc.detail},
            status_code=exc.status_code,
        )
    return _tmpl().TemplateResponse(
        request, template,
        {"sent": True, "errors": {}, "values": {},
         "message": "Thanks! Your message has been sent."},
    )


# ── Error pages ───────────────────────────────────────────────────────────────

def register_error_handlers(app: FastAPI) -> None:
    """Render HTML error pages for browser routes; JSON for API routes."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if is_api_request(request) or exc.status_code not in (404, 500, 503):
            return json_error(exc.status_code, exc.detail, getattr(exc, "headers", None))
        template = "errors/404.html" if exc.status_code == 404 else "errors/500.html"
        return _tmpl().TemplateResponse(
            request, template,
            {"status_code": exc.status_code, "title": error_title(exc.status_code)},
            status_code=exc.status_code,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        if is_api_request(request):
            return json_error(500, GENERIC_SERVER_ERROR)
        return _tmpl().TemplateResponse(
            request, "errors/500.html",
            {"status_code": 500, "title": error_title(500)},
            status_code=500,
        )
