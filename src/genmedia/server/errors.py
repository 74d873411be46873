"""Mapping of genmedia errors onto HTTP responses.

Every failure leaves the proxy as ``{"error": "<message>"}`` with the status
code picked by status_for().
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CancellationError,
    ConfigurationError,
    GenmediaError,
    ThrottlingError,
    ValidationError,
)

logger = get_logger(__name__)

# Non-standard, but widely used for "client closed request"
CLIENT_CLOSED_REQUEST = 499

_STATUS_BY_TYPE: tuple[tuple[type[GenmediaError], int], ...] = (
    (ConfigurationError, 500),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ThrottlingError, 429),
    (CancellationError, CLIENT_CLOSED_REQUEST),
)


def status_for(exc: GenmediaError) -> int:
    """Return the HTTP status for an error; unlisted errors are upstream failures (500)."""
    for error_type, status in _STATUS_BY_TYPE:
        if isinstance(exc, error_type):
            return status
    return 500


def error_body(exc: BaseException) -> dict[str, str]:
    message = exc.args[0] if exc.args else ""
    return {"error": str(message) or type(exc).__name__}


async def handle_genmedia_error(request: Request, exc: GenmediaError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, status, exc)
    return JSONResponse(error_body(exc), status_code=status)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(error_body(exc), status_code=500)


def install_error_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on an application."""
    app.add_exception_handler(GenmediaError, handle_genmedia_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
