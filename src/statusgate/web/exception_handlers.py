"""Custom exception handlers for consistent error responses."""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from statusgate.errors import DeliveryFailedError, GatewayError
from statusgate.storage.errors import StorageError
from statusgate.web.template_helpers import accepts_html, render_page

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

_STATUS_TITLES = {
    400: "Bad Request",
    401: "Wrong Password",
    403: "Setup Required",
    404: "Not Found",
    409: "Not Connected",
    413: "Upload Too Large",
    422: "Invalid Input",
    500: "Error Posting Status",
    503: "Not Connected",
}


def _get_error_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _error_response(request: Request, status_code: int, message: str) -> Response:
    if accepts_html(request):
        return render_page(
            request,
            "result.html",
            status_code=status_code,
            success=False,
            title=_STATUS_TITLES.get(status_code, f"Error {status_code}"),
            message=message,
            request_id=_get_error_id(request),
        )
    return JSONResponse(status_code=status_code, content={"ok": False, "message": message})


async def gateway_error_handler(request: Request, exc: Exception) -> Response:
    """Render a GatewayError with its own status code and message."""
    if not isinstance(exc, GatewayError):
        return await general_exception_handler(request, exc)

    if isinstance(exc, DeliveryFailedError):
        message = f"Error posting status: {exc.message}"
        if exc.delivered:
            message += f" ({exc.delivered} item(s) were already posted)"
    else:
        message = exc.message

    logger.warning(
        f"{request.method} {request.url.path} rejected with {exc.status_code}: {message} "
        f"(request_id={_get_error_id(request)})"
    )
    return _error_response(request, exc.status_code, message)


async def storage_error_handler(request: Request, exc: Exception) -> Response:
    """Config persistence failures: log details, answer 500."""
    logger.error(
        f"Storage failure in {request.method} {request.url.path} "
        f"(request_id={_get_error_id(request)}): {exc}"
    )
    return _error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Could not save settings."
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle HTTPException with consistent formatting."""
    if not isinstance(exc, StarletteHTTPException):
        return await general_exception_handler(request, exc)

    logger.warning(
        f"HTTP {exc.status_code} error: {exc.detail} "
        f"(request_id={_get_error_id(request)}, path={request.url.path})"
    )
    if accepts_html(request):
        return _error_response(request, exc.status_code, str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle request validation errors."""
    if not isinstance(exc, RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"ok": False, "message": "Invalid input data"},
        )

    logger.warning(
        f"Validation error on {request.url.path}: {exc.errors()} "
        f"(request_id={_get_error_id(request)})"
    )
    return JSONResponse(
        status_code=422,
        content={"ok": False, "message": "Invalid input data", "errors": exc.errors()},
    )


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle all unhandled exceptions with production-safe error messages.

    Debug mode returns the exception type, message and traceback; otherwise
    the details only go to the log.
    """
    error_id = _get_error_id(request)

    logger.exception(
        f"Unhandled exception in {request.method} {request.url.path} (request_id={error_id}): {exc}"
    )

    settings = getattr(request.app.state, "settings", None)
    debug_mode = bool(getattr(settings, "debug", False))

    if debug_mode and not accepts_html(request):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "ok": False,
                "message": "Internal server error",
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "request_id": error_id,
                "traceback": traceback.format_exc().split("\n"),
            },
        )

    message = (
        f"Internal server error: {type(exc).__name__}: {exc}"
        if debug_mode
        else "An internal error occurred. Please try again later."
    )
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers."""
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
