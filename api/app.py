"""
FastAPI application factory.

Usage:
    python -m api.app                        # Dev server on port 8000
    APP_DATA_DIR=/srv/tfactortx python -m api.app

OpenAPI docs available at http://localhost:8000/docs after starting.

Middleware (outermost last):
    security headers  CSP allowing the HTMX CDN, nosniff, frame deny
    logging + limits  per-request log line with request id, per-IP rate limit
    CORS              origins from APP_CORS_ORIGINS

Logging is text by default, newline-delimited JSON when APP_LOG_FORMAT=json.
"""

import json
import logging
import time
import uuid
from collections import defaultdict
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import __version__
from api.datastore import get_data_dir, load_store, set_data_dir, set_data_url
from api.errors import GENERIC_SERVER_ERROR, json_error
from api.routes import contact, data, download
from api.routes import frontend as frontend_routes
from utils.citations import is_url
from utils.config import AppConfig
from utils.data_source import DataUnavailableError
from utils.formatting import format_count

# ── Configuration ─────────────────────────────────────────────────────────────
_cfg = AppConfig.from_env()

# ── Structured JSON logging ───────────────────────────────────────────────────


class _JsonFormatter(logging.Formatter):
    """Emit log records as newline-delimited JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Merge extra fields added via logger.info("...", extra={...})
        for key in ("method", "path", "status", "duration_ms", "client_ip",
                    "request_id"):
            if hasattr(record, key):
                data[key] = getattr(record, key)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


_logger = logging.getLogger("tfactortx_api")
_handler = logging.StreamHandler()
if _cfg.log_format == "json":
    _handler.setFormatter(_JsonFormatter())
else:
    _handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
logging.basicConfig(handlers=[_handler], level=logging.INFO, force=True)

# ── Rate limiting state with memory bounds ────────────────────────────────────
# Limits: contact=5/min, download=10/min, others=120/min (from AppConfig).
_RATE_LIMITS: dict[str, int] = {
    "/api/v1/contact":  _cfg.rate_limit_contact,
    "/contact":         _cfg.rate_limit_contact,
    "/api/v1/download": _cfg.rate_limit_download,
}
_DEFAULT_RATE_LIMIT = _cfg.rate_limit_default
# Only POSTs count against the contact limit; the form page itself is a GET.
_POST_ONLY_LIMITS = {"/api/v1/contact", "/contact"}
_rate_counters: dict[str, dict[str, list]] = defaultdict(lambda: defaultdict(list))
_MAX_TRACKED_IPS = 10_000
_last_cleanup: float = 0.0
_CLEANUP_INTERVAL = 300.0  # 5 minutes
_SLOW_REQUEST_MS = 500


def _cleanup_rate_counters() -> None:
    """Remove stale rate counter entries to bound memory usage."""
    global _last_cleanup
    now = time.time()
    if now - _last_cleanup < _CLEANUP_INTERVAL:
        return
    _last_cleanup = now
    window_start = now - 60.0
    to_delete = []
    for ip, paths in _rate_counters.items():
        for path in list(paths.keys()):
            paths[path] = [t for t in paths[path] if t > window_start]
            if not paths[path]:
                del paths[path]
        if not paths:
            to_delete.append(ip)
    for ip in to_delete:
        del _rate_counters[ip]
    # Still over the cap: evict the IPs with the fewest recent hits.
    if len(_rate_counters) > _MAX_TRACKED_IPS:
        excess = len(_rate_counters) - _MAX_TRACKED_IPS
        quietest = sorted(
            _rate_counters.keys(),
            key=lambda ip: sum(len(v) for v in _rate_counters[ip].values()),
        )[:excess]
        for ip in quietest:
            del _rate_counters[ip]


def _limit_for(request: Request) -> int:
    path = request.url.path
    if path in _POST_ONLY_LIMITS and request.method != "POST":
        return _DEFAULT_RATE_LIMIT
    return _RATE_LIMITS.get(path, _DEFAULT_RATE_LIMIT)


# ── Proxy-aware client IP ─────────────────────────────────────────────────────

def _get_client_ip(request: Request) -> str:
    """Return the real client IP, respecting X-Forwarded-For from trusted proxies."""
    direct_ip = request.client.host if request.client else "unknown"
    if not _cfg.trusted_proxies:
        return direct_ip
    if direct_ip not in _cfg.trusted_proxies:
        return direct_ip
    xff = request.headers.get("X-Forwarded-For", "")
    if xff:
        # X-Forwarded-For: client, proxy1, proxy2 — leftmost is real client
        real_ip = xff.split(",")[0].strip()
        if real_ip:
            return real_ip
    return direct_ip


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warm the table store on startup; a failure is logged, not fatal."""
    try:
        store = load_store()
        _logger.info("Loaded %d transcription factors from %s", store.total, store.source)
    except DataUnavailableError as exc:
        _logger.warning("Table data not available at startup: %s", exc)
    yield


def create_app(data_dir: Path | None = None, data_url: str | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        data_dir: Override the data directory (useful for testing).
        data_url: Fetch the overview rows from this ``/api/v1/data`` URL
            instead of the overview CSV.

    Returns:
        Configured FastAPI application instance.
    """
    if data_dir is not None:
        set_data_dir(data_dir)
    if data_url is not None:
        set_data_url(data_url)

    app = FastAPI(
        title="TFactorTx API",
        summary="Browse transcription factors ranked by age-related disease and aging evidence.",
        description=(
            "## TFactorTx Explorer API\n\n"
            "Read-only access to the TFactorTx transcription-factor table.\n\n"
            "### Key concepts\n"
            "- **Ranks** are positive integers; `null` means *not available* "
            "and always sorts last.\n"
            "- **View-state parameters** (`q`, `filters`, `sort`, `cols`, `page`, `size`) "
            "are shared by `/api/v1/data/view`, `/api/v1/download` and the `/database` page.\n\n"
            "### Rate limits\n"
            f"- `POST /api/v1/contact`: {_cfg.rate_limit_contact} req/min per IP\n"
            f"- `/api/v1/download`: {_cfg.rate_limit_download} req/min per IP\n"
            f"- All other endpoints: {_cfg.rate_limit_default} req/min per IP\n\n"
            "Returns `429 Too Many Requests` with `Retry-After: 60` when exceeded."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        contact={"name": "TFactorTx", "email": "info@tfactortx.com"},
        license_info={
            "name": "CC0 1.0",
            "url": "https://creativecommons.org/publicdomain/zero/1.0/",
        },
        openapi_tags=[
            {"name": "data", "description": "Overview table, derived views and gene detail records."},
            {"name": "download", "description": "Export of the current table view as CSV or Excel."},
            {"name": "contact", "description": "Contact-form relay to the TFactorTx team."},
            {"name": "meta", "description": "Health check."},
        ],
    )

    # ── CORS middleware ───────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cfg.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "HEAD", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # ── Request logging + rate limiting middleware ────────────────────────────

    @app.middleware("http")
    async def log_and_rate_limit(request: Request, call_next):
        """Log each request and enforce per-IP rate limits."""
        request_id = str(uuid.uuid4())[:8]
        start = time.monotonic()
        client_ip = _get_client_ip(request)
        path = request.url.path

        _cleanup_rate_counters()

        # Health check bypass — not rate limited
        if path == "/health":
            return await call_next(request)

        limit = _limit_for(request)
        now = time.time()
        window_start = now - 60.0
        key = f"{request.method} {path}" if path in _POST_ONLY_LIMITS else path
        hits = [t for t in _rate_counters[client_ip][key] if t > window_start]
        _rate_counters[client_ip][key] = hits
        if len(hits) >= limit:
            _logger.warning(
                "rate_limited ip=%s path=%s limit=%d", client_ip, path, limit
            )
            return json_error(429, "Too many requests", headers={"Retry-After": "60"})
        hits.append(now)

        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        if _cfg.log_format == "json":
            _logger.info(
                "request",
                extra={
                    "method": request.method,
                    "path": path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 1),
                    "client_ip": client_ip,
                    "request_id": request_id,
                },
            )
        else:
            _logger.info(
                "method=%s path=%s status=%d duration_ms=%.1f ip=%s rid=%s",
                request.method, path, response.status_code, duration_ms,
                client_ip, request_id,
            )
        if duration_ms > _SLOW_REQUEST_MS:
            _logger.warning(
                "slow_request method=%s path=%s duration_ms=%.1f",
                request.method, path, duration_ms,
            )
        return response

    # ── Content Security Policy + security headers ────────────────────────────

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        """Add Content-Security-Policy, X-Content-Type-Options, and X-Frame-Options."""
        response = await call_next(request)
        # 'unsafe-inline' is required for the inline <script> block in base.html.
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' unpkg.com 'unsafe-inline'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; "
            "font-src 'self'; "
            "connect-src 'self';"
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    # ── Error handling ────────────────────────────────────────────────────────

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return json_error(exc.status_code, exc.detail, getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Catch unhandled exceptions; details are logged, never returned."""
        _logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return json_error(500, GENERIC_SERVER_ERROR)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return json_error(400, str(exc))

    # ── Health check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["meta"], summary="Health check")
    def health():
        """Return 200 OK with the row count if the table data can be loaded."""
        try:
            store = load_store()
        except DataUnavailableError:
            return JSONResponse(
                status_code=503,
                content={"status": "no_data", "data_dir": str(get_data_dir())},
            )
        return {
            "status": "ok",
            "data_dir": str(store.data_dir),
            "source": store.source,
            "loaded_at": store.loaded_at.isoformat(timespec="seconds"),
            "rows": store.total,
            "updated_at": store.updated_at.isoformat(timespec="seconds"),
        }

    # ── Register routers ──────────────────────────────────────────────────────

    prefix = "/api/v1"
    app.include_router(data.router,     prefix=prefix)
    app.include_router(download.router, prefix=prefix)
    app.include_router(contact.router,  prefix=prefix)

    # ── Static files + Jinja2 templates ───────────────────────────────────────
    _here = Path(__file__).parent.parent  # project root

    static_dir = _here / "static"
    templates_dir = _here / "templates"

    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    if templates_dir.exists():
        templates = Jinja2Templates(directory=str(templates_dir))
        templates.env.filters["fmt_count"] = format_count
        templates.env.tests["url"] = is_url
        templates.env.globals["app_version"] = __version__

        # Wire templates into the frontend router
        frontend_routes.set_templates(templates)
        app.include_router(frontend_routes.router)

        # HTML error pages for browser routes (JSON stays for /api)
        frontend_routes.register_error_handlers(app)

    return app


# Singleton instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.app:app",
        host=_cfg.api_host,
        port=_cfg.api_port,
        reload=True,
        log_level="info",
    )
