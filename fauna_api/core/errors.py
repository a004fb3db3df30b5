"""
Error taxonomy and FastAPI exception handlers.

Services raise AppError subclasses; routers let them propagate and the
handlers registered by the app factories turn them into JSON responses of the
form ``{"error": ..., "code": ...[, "details": [...]]}``. Server-side failures
are logged with their traceback and answered with a generic message.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("fauna.errors")

GENERIC_ERROR_MESSAGE = "Error interno"


class AppError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, details: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class ValidationError(AppError):
    """Input does not satisfy the record schema."""

    status_code = 400
    code = "validation_error"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class StorageError(AppError):
    """Unexpected I/O or parse failure on the index/document files."""

    status_code = 500
    code = "storage_error"


class UnsupportedMediaError(AppError):
    status_code = 400
    code = "unsupported_media_type"


class PayloadTooLargeError(AppError):
    status_code = 413
    code = "payload_too_large"


class UnauthorizedError(AppError):
    status_code = 401
    code = "unauthorized"


def error_payload(message: str, code: str, details: Optional[List[Dict[str, str]]] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": message, "code": code}
    if details:
        payload["details"] = details
    return payload


def _location(loc) -> str:
    # drop the "body"/"query"/"path" prefix FastAPI adds
    parts = [str(p) for p in loc]
    if parts and parts[0] in {"body", "query", "path", "form", "header"}:
        parts = parts[1:]
    return ".".join(parts)


def pydantic_issues(errors) -> List[Dict[str, str]]:
    """Flatten pydantic/FastAPI error dicts into ``{path, message}`` pairs."""
    return [{"path": _location(err.get("loc", ())), "message": err.get("msg", "")} for err in errors]


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s during %s %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(error_payload(GENERIC_ERROR_MESSAGE, exc.code), status_code=exc.status_code)
    return JSONResponse(error_payload(exc.message, exc.code, exc.details), status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    issues = pydantic_issues(exc.errors())
    return JSONResponse(
        error_payload("Validación inválida", ValidationError.code, issues),
        status_code=ValidationError.status_code,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Ruta no encontrada"
    else:
        message = str(exc.detail)
    return JSONResponse(
        {"error": message},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last safety net: log the traceback, never leak internals to the client."""
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse({"error": GENERIC_ERROR_MESSAGE}, status_code=500)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
