"""
Application error taxonomy and the FastAPI handlers that render it.

Every error reaches the client as ``{"status": <int>, "message": <str>}``,
with ``errors`` added when there are field-level details.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vifin.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors with an HTTP status."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401

    def __init__(self, message: str = "Authentication required", details: Optional[Any] = None):
        super().__init__(message, details)


class AuthorizationError(AppError):
    status_code = 403

    def __init__(self, message: str = "Access denied", details: Optional[Any] = None):
        super().__init__(message, details)


class NotFoundError(AppError):
    status_code = 404


class ExternalApiError(AppError):
    """Upstream aggregator or spreadsheet endpoint failed."""

    status_code = 502


def error_body(status_code: int, message: str, details: Optional[Any] = None) -> dict:
    body = {"status": status_code, "message": message}
    if details is not None:
        body["errors"] = details
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message, exc.details),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_body(400, "Validation failed", details))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = error_body(500, "Internal server error")
    if settings.is_development:
        body["error"] = str(exc)
    return JSONResponse(status_code=500, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
