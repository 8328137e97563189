"""
Environment validation utilities.

Ensures the console fails fast on misconfiguration while
remaining bypassable for tests via SKIP_ENV_VALIDATION.
"""

import os
from typing import Optional
from urllib.parse import urlparse

from admin_console.core.config import settings


class EnvValidationError(RuntimeError):
    """Raised when environment validation fails."""


def _is_valid_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def validate_env(env: Optional[str] = None, settings_obj=None) -> bool:
    """Validate environment configuration.

    Args:
        env: Override environment name (defaults to settings.ENV)
        settings_obj: Override settings object (defaults to admin_console.core.config.settings)

    Returns:
        True if validation passes.

    Raises:
        EnvValidationError when a rule is violated.
    """
    if os.getenv("SKIP_ENV_VALIDATION") == "1":
        return True

    cfg = settings_obj or settings
    mode = (env or getattr(cfg, "ENV", "development") or "development").lower()
    upstream_url = getattr(cfg, "UPSTREAM_API_URL", None) or ""
    prefix = getattr(cfg, "UPSTREAM_API_PREFIX", "") or ""

    if not _is_valid_http_url(upstream_url):
        raise EnvValidationError("UPSTREAM_API_URL must be a valid http(s) URL (e.g. https://platform.example.com)")

    if prefix and not prefix.startswith("/"):
        raise EnvValidationError("UPSTREAM_API_PREFIX must start with '/'")

    if getattr(cfg, "UPSTREAM_TIMEOUT_SECONDS", 0) <= 0:
        raise EnvValidationError("UPSTREAM_TIMEOUT_SECONDS must be positive")

    page_size = getattr(cfg, "DEFAULT_PAGE_SIZE", 0)
    max_page_size = getattr(cfg, "MAX_PAGE_SIZE", 0)
    if page_size <= 0 or page_size > max_page_size:
        raise EnvValidationError("DEFAULT_PAGE_SIZE must be between 1 and MAX_PAGE_SIZE")

    if mode == "production":
        # Bearer tokens travel to the upstream; never over plain http in prod
        if urlparse(upstream_url).scheme != "https":
            raise EnvValidationError("UPSTREAM_API_URL must use https in production")

    return True
