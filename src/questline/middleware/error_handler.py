"""Global error handlers: every failure leaves as a ``{success: false, message}`` envelope."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from questline.errors import ServiceError
from questline.pages.templates import not_found_page
from questline.schemas import error_envelope

logger = structlog.get_logger()


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Turn the first pydantic error into a single readable message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = str(first.get("msg", "Invalid value"))
    message = message.removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


def _wants_html(request: Request) -> bool:
    """Browser navigation to an unknown non-API path gets the HTML 404 page."""
    return "text/html" in request.headers.get("accept", "") and not request.url.path.startswith("/api/")


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code == 404 and _wants_html(request):
            return HTMLResponse(not_found_page(), status_code=404)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=error_envelope(_describe_validation_error(exc)))

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
        """Map domain exceptions raised by services onto their HTTP status."""
        logger.info(
            "request_rejected",
            path=request.url.path,
            status=exc.status_code,
            reason=str(exc),
        )
        return JSONResponse(status_code=exc.status_code, content=error_envelope(str(exc)))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all: log the detail, return a generic message."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content=error_envelope("An unexpected error occurred"))
