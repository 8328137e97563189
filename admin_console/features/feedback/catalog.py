"""
Friendly error messages for upstream failures.

Maps an UpstreamError to a Feedback: what to tell the admin, and whether it
belongs inline on the open form (recognized 422 domain errors) or in a
banner (everything else).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from admin_console.core.errors import UpstreamError, UpstreamUnavailableError


class ErrorKind(str, Enum):
    AUTH = "auth"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    SERVER = "server"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


class Scope(str, Enum):
    INLINE = "inline"
    BANNER = "banner"


ERROR_MESSAGES: Dict[str, str] = {
    "INVALID_CREDENTIALS": "Incorrect email or password.",
    "USER_DISABLED": "Your account is disabled. Please contact support.",
    "PASSWORD_EXPIRED": "Your password has expired. Please reset it.",
    "FORBIDDEN": "You don't have permission to access this resource.",
    "VALIDATION": "Please check the highlighted fields.",
    "RATE_LIMIT": "Too many attempts. Please wait a moment and try again.",
    "NETWORK": "Can't reach the server. Check your connection and try again.",
    "SERVER": "We're having issues right now. Please try again later.",
    "CONFLICT": "Conflict detected. Please refresh and try again.",
    "NOT_FOUND": "The requested resource was not found.",
    "FALLBACK": "Something went wrong. Please try again.",
}

_CODE_KINDS: Dict[str, ErrorKind] = {
    "INVALID_CREDENTIALS": ErrorKind.AUTH,
    "USER_DISABLED": ErrorKind.AUTH,
    "PASSWORD_EXPIRED": ErrorKind.AUTH,
    "FORBIDDEN": ErrorKind.AUTH,
    "VALIDATION": ErrorKind.VALIDATION,
    "RATE_LIMIT": ErrorKind.RATE_LIMIT,
    "NETWORK": ErrorKind.NETWORK,
    "SERVER": ErrorKind.SERVER,
    "CONFLICT": ErrorKind.CONFLICT,
    "NOT_FOUND": ErrorKind.NOT_FOUND,
    "FALLBACK": ErrorKind.UNKNOWN,
}

# 422 codes/reasons the backend attaches to domain-rule rejections.
DOMAIN_MESSAGES: Dict[str, str] = {
    "PRICING_OVERLAP": "Pricing period overlaps with an existing period. Please adjust your dates to avoid the conflict.",
    "NO_SEATS_AVAILABLE": "No seats available. Adjust the seat limit first.",
    "ALREADY_LICENSED": "This application is already licensed for this tenant.",
    "ALREADY_GRANTED": "User already has access to this application.",
    "APP_INACTIVE": "This application is currently inactive and cannot be licensed.",
    "APP_NOT_FOUND": "Application not found. Please try again.",
    "TOTAL_LT_USED": "Cannot reduce seats below the number currently in use.",
}

# Form field a domain error is shown against.
DOMAIN_FIELDS: Dict[str, str] = {
    "PRICING_OVERLAP": "valid_from",
    "NO_SEATS_AVAILABLE": "user_id",
    "ALREADY_LICENSED": "application_slug",
    "ALREADY_GRANTED": "user_id",
    "APP_INACTIVE": "application_slug",
    "APP_NOT_FOUND": "application_slug",
    "TOTAL_LT_USED": "user_limit",
}


@dataclass
class Feedback:
    scope: Scope
    kind: ErrorKind
    code: str
    message: str
    field_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def closes_modal(self) -> bool:
        return self.scope == Scope.BANNER


def kind_for_code(code: str) -> ErrorKind:
    return _CODE_KINDS.get(code, ErrorKind.UNKNOWN)


def map_status_to_error(status: int, path: Optional[str] = None, backend_code: Optional[str] = None) -> Tuple[ErrorKind, str]:
    """(kind, catalog code) for an upstream status. A known backend code wins."""
    if backend_code and backend_code in ERROR_MESSAGES:
        return kind_for_code(backend_code), backend_code

    if status == 401:
        return ErrorKind.AUTH, "INVALID_CREDENTIALS"
    if status == 403:
        return ErrorKind.AUTH, "FORBIDDEN"
    if status == 404:
        if path and "auth/login" in path:
            # A missing login endpoint means the backend is misconfigured
            return ErrorKind.SERVER, "SERVER"
        return ErrorKind.NOT_FOUND, "NOT_FOUND"
    if status == 409:
        return ErrorKind.CONFLICT, "CONFLICT"
    if status == 422:
        return ErrorKind.VALIDATION, "VALIDATION"
    if status == 429:
        return ErrorKind.RATE_LIMIT, "RATE_LIMIT"
    if status >= 500:
        return ErrorKind.SERVER, "SERVER"
    return ErrorKind.UNKNOWN, "FALLBACK"


def domain_code(err: UpstreamError) -> Optional[str]:
    """The recognized domain code of a 422, checking the reason before the code."""
    if err.upstream_status != 422:
        return None
    for candidate in (err.reason, err.upstream_code):
        if candidate and candidate in DOMAIN_MESSAGES:
            return candidate
    return None


def _pricing_overlap_message(details: Dict[str, Any]) -> str:
    conflict = details.get("conflict") if isinstance(details.get("conflict"), dict) else {}
    existing = conflict.get("existingRange")
    if existing:
        return (
            f"Pricing period overlaps with existing period {existing}. "
            "Please adjust your dates to avoid the conflict."
        )
    return DOMAIN_MESSAGES["PRICING_OVERLAP"]


def _total_lt_used_message(details: Dict[str, Any]) -> str:
    used = details.get("seatsUsed")
    requested = details.get("requestedLimit")
    if used is not None and requested is not None:
        return f"Cannot reduce limit to {requested}. Currently using {used} seats."
    return DOMAIN_MESSAGES["TOTAL_LT_USED"]


def domain_message(code: str, err: UpstreamError) -> str:
    if code == "PRICING_OVERLAP":
        return _pricing_overlap_message(err.details)
    if code == "TOTAL_LT_USED":
        return _total_lt_used_message(err.details)
    return DOMAIN_MESSAGES[code]


def present_error(err: Union[UpstreamError, UpstreamUnavailableError]) -> Feedback:
    if isinstance(err, UpstreamUnavailableError):
        return Feedback(Scope.BANNER, ErrorKind.NETWORK, "NETWORK", ERROR_MESSAGES["NETWORK"])

    code = domain_code(err)
    if code:
        message = domain_message(code, err)
        return Feedback(
            Scope.INLINE,
            ErrorKind.VALIDATION,
            code,
            message,
            field_errors={DOMAIN_FIELDS[code]: message},
        )

    kind, catalog_code = map_status_to_error(err.upstream_status, err.path, err.upstream_code)
    return Feedback(Scope.BANNER, kind, catalog_code, ERROR_MESSAGES[catalog_code])
