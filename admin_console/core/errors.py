"""Error normalization and handlers."""

import logging
import builtins
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

from admin_console.core.logging import get_request_id


class AppError(Exception):
    code = "app_error"
    status_code = 500
    scope = "banner"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        scope: Optional[str] = None,
        field_errors: Optional[Dict[str, Any]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        if scope:
            self.scope = scope
        self.request_id = request_id
        self.field_errors = field_errors or {}
        self.details = details or {}


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class FormValidationError(ValidationError):
    """Form-level field errors, from local checks or mapped from an upstream rejection."""
    scope = "inline"

    def __init__(self, field_errors: Dict[str, Any], message: str = "Please check the highlighted fields.", **kwargs):
        super().__init__(message, field_errors=field_errors, **kwargs)


class NotFoundError(AppError, ValueError):
    code = "not_found"
    status_code = 404


class PermissionError(AppError, builtins.PermissionError):
    code = "forbidden"
    status_code = 403


class UnauthorizedError(AppError):
    code = "unauthorized"
    status_code = 401


class ConflictError(AppError):
    code = "conflict"
    status_code = 409


class UpstreamError(AppError):
    """The upstream platform API answered with a non-2xx status.

    ``upstream_status`` is the backend's HTTP status; ``code`` and ``reason``
    are the optional machine-readable strings the backend attached.
    """
    code = "upstream_error"
    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int,
        code: Optional[str] = None,
        reason: Optional[str] = None,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code=code, details=details)
        self.upstream_status = upstream_status
        self.upstream_code = code
        self.reason = reason
        self.path = path
        # 4xx are passed through; upstream 5xx becomes a gateway error
        self.status_code = upstream_status if 400 <= upstream_status < 500 else 502


class UpstreamUnavailableError(AppError):
    """Transport-level failure talking to the upstream API."""
    code = "upstream_unavailable"
    status_code = 503


def _extract_request_id(request: Request, fallback: Optional[str] = None) -> str:
    return (
        getattr(request.state, "request_id", None)
        or get_request_id()
        or fallback
        or str(uuid4())
    )


def _error_payload(
    code: str,
    message: str,
    request_id: str,
    *,
    scope: Optional[str] = None,
    field_errors: Optional[Dict[str, Any]] = None,
    details: Optional[Dict[str, Any]] = None,
) -> dict:
    error: Dict[str, Any] = {"code": code, "message": message, "request_id": request_id}
    if scope:
        error["scope"] = scope
    if field_errors:
        error["field_errors"] = field_errors
    if details:
        error["details"] = details
    return {"error": error, "detail": message}


def error_response(exc: AppError, request_id: str) -> JSONResponse:
    payload = _error_payload(
        exc.code,
        exc.message,
        request_id,
        scope=exc.scope,
        field_errors=exc.field_errors,
        details=exc.details,
    )
    response = JSONResponse(status_code=exc.status_code, content=payload)
    response.headers["x-request-id"] = request_id
    return response


async def app_error_handler(request: Request, exc: AppError):
    rid = exc.request_id or _extract_request_id(request)
    logger = logging.getLogger("admin_console")
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    return error_response(exc, rid)


async def http_error_handler(request: Request, exc: HTTPException):
    rid = _extract_request_id(request)
    code = "not_found" if exc.status_code == 404 else "http_error"
    message = exc.detail if exc.detail else "HTTP error"
    payload = _error_payload(code, message, rid)
    logger = logging.getLogger("admin_console")
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    response = JSONResponse(status_code=exc.status_code, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError):
    rid = _extract_request_id(request)
    field_errors: Dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field_errors[".".join(loc) or "__root__"] = err.get("msg", "Invalid value")
    payload = _error_payload(
        "validation_error",
        "Please check the highlighted fields.",
        rid,
        scope="inline",
        field_errors=field_errors,
    )
    logging.getLogger("admin_console").warning(
        "request.invalid", extra={"request_id": rid, "error_code": "validation_error", "status": 422}
    )
    response = JSONResponse(status_code=422, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _extract_request_id(request)
    logger = logging.getLogger("admin_console")
    logger.error("unhandled.exception", exc_info=True, extra={"request_id": rid, "error_code": "internal_error"})
    payload = _error_payload("internal_error", "Unexpected error", rid)
    response = JSONResponse(status_code=500, content=payload)
    response.headers["x-request-id"] = rid
    return response
