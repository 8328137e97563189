"""
Console logging.

Everything goes through the ``admin_console`` logger. Records carry the
request id bound by RequestIdMiddleware, which is also forwarded to the
upstream API so a console action can be traced through the platform logs.

Upstream bearer tokens must never reach a log line: messages and structured
values pass through `redact` before they are emitted.
"""

import json
import logging
import os
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Optional

request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOGGER_NAME = "admin_console"
MAX_FIELD_LENGTH = 500

# Structured attributes copied from records into the JSON payload, in order.
CONTEXT_FIELDS = (
    "session_id",
    "tenant_id",
    "application_id",
    "event_type",
    "error_code",
    "method",
    "path",
    "status",
    "latency_bucket",
)

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE)
_TOKEN_FIELD_RE = re.compile(r"""(["']?(?:token|password)["']?\s*[:=]\s*["']?)[^"',\s}]+""", re.IGNORECASE)

_LATENCY_BUCKETS = (
    (10, "<10ms"),
    (100, "10-100ms"),
    (500, "100-500ms"),
    (1000, "500-1000ms"),
)


def get_request_id(default: Optional[str] = None) -> Optional[str]:
    rid = request_id_ctx_var.get()
    return rid if rid is not None else default


def latency_bucket_ms(latency_ms: Optional[float]) -> str:
    """Coarse latency label; exact timings are not logged."""
    if latency_ms is None:
        return "unknown"
    for upper, label in _LATENCY_BUCKETS:
        if latency_ms < upper:
            return label
    return ">=1000ms"


def redact(text: str) -> str:
    text = _BEARER_RE.sub(r"\1[redacted]", text)
    return _TOKEN_FIELD_RE.sub(r"\1[redacted]", text)


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z")


def _context(record: logging.LogRecord) -> Dict[str, object]:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if getattr(record, key, None) is not None}


class RequestIdFilter(logging.Filter):
    """Fill record.request_id from the current request context."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for production log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, object] = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": redact(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(_context(record))
        if record.exc_info:
            payload["exception"] = redact(self.formatException(record.exc_info))
        return json.dumps(payload, default=str)


class PrettyFormatter(logging.Formatter):
    """Single-line human format for development."""

    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "request_id", None)
        parts = [_timestamp(record), record.levelname, f"[{record.name}]"]
        if rid:
            parts.append(f"[rid={rid}]")
        parts.append(redact(record.getMessage()))
        context = _context(record)
        if context:
            parts.append(" ".join(f"{key}={value}" for key, value in context.items()))
        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + redact(self.formatException(record.exc_info))
        return line


def configure_logging(env: str = "development") -> None:
    """JSON logs in production, pretty logs elsewhere."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if env.lower() == "production" else PrettyFormatter())
    handler.addFilter(RequestIdFilter())

    logger.handlers = [handler]
    logger.propagate = True

    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.error").propagate = False
    # httpx logs full request lines at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _field(value: object, limit: int = MAX_FIELD_LENGTH) -> str:
    text = redact(str(value))
    if len(text) <= limit:
        return text
    return text[:limit] + "...<truncated>"


def log_event(
    level: str,
    msg: str,
    *,
    request_id: Optional[str] = None,
    session_id: Optional[str] = None,
    tenant_id: Optional[int] = None,
    application_id: Optional[int] = None,
    event_type: Optional[str] = None,
    error_code: Optional[str] = None,
    extra: Optional[Dict[str, object]] = None,
):
    """Emit a structured console event. Values in `extra` are redacted and truncated."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        configure_logging(os.getenv("ENV", "development"))

    payload: Dict[str, object] = {
        "request_id": request_id or get_request_id(),
        "session_id": session_id,
        "tenant_id": tenant_id,
        "application_id": application_id,
        "event_type": event_type,
        "error_code": error_code,
    }
    for key, value in (extra or {}).items():
        payload[key] = _field(value)

    log_fn = getattr(logger, level, logger.info)
    log_fn(msg, extra=payload)
