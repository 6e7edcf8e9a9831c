"""
JSON error bodies shared by the app-level and frontend exception handlers.

Every JSON error has the shape ``{"error": ..., "detail": ..., "status_code": ...}``.
"""

from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

GENERIC_SERVER_ERROR = "An unexpected error occurred. Please try again later."


def is_api_request(request: Request) -> bool:
    """True for JSON endpoints; everything else is an HTML page."""
    path = request.url.path
    return path.startswith("/api/") or path == "/health" or path.startswith("/docs") \
        or path == "/openapi.json"


def error_title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def json_error(status_code: int, detail: Any = None,
               headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error_title(status_code), "detail": detail,
                 "status_code": status_code},
        headers=headers,
    )
