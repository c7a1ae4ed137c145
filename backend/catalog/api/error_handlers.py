"""Error Handlers — global exception handlers for the catalog API.

Invariants:
    - CatalogError → {status: "error", code, message, errors?} with the error's http_status
    - RequestValidationError → 400 "Validation error" with field-level details
    - Exception (catch-all) → 500, internal details only outside production
    - Unknown routes → 404 "Route not found"

Design Decisions:
    - Four-layer handler: domain (CatalogError), validation (Pydantic), 404, catch-all (Exception)
    - Debug exposure read from settings at handling time, not registration time
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog.config import get_settings
from catalog.core.errors import CatalogError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_catalog_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_catalog_error_handler(app: FastAPI) -> None:
    """Register catalog domain/store error handler."""

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        """Handle all catalog domain/store errors."""
        log = logger.error if exc.severity is ErrorSeverity.CRITICAL else logger.warning
        log(
            f"CatalogError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "method": request.method,
                "book_id": exc.context.book_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(
                include_debug=get_settings().expose_error_details,
            ),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register handler for routing-level HTTP errors (404, 405)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "message": message},
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — details only outside production."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path, "method": request.method},
        )
        content = {
            "status": "error",
            "code": "INTERNAL_ERROR",
            "message": "Internal Server Error",
        }
        if get_settings().expose_error_details:
            content["detail"] = str(exc)
            content["stack"] = traceback.format_exception(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "status": "error",
        "code": "VALIDATION_ERROR",
        "message": "Validation error",
        "errors": [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": _clean_message(e["msg"]),
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    }


def _clean_message(msg: str) -> str:
    """Drop pydantic's "Value error, " prefix from custom validator messages."""
    return msg.removeprefix("Value error, ")
