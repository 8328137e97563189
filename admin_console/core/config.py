import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Upstream platform API
    UPSTREAM_API_URL: str = "http://localhost:3001"
    UPSTREAM_API_PREFIX: str = "/internal/api/v1"
    UPSTREAM_TIMEOUT_SECONDS: float = 15.0
    UPSTREAM_HEALTH_PATH: str = "/health"

    # Listing defaults
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Per-session notification queue (oldest dropped when full)
    NOTIFICATION_QUEUE_SIZE: int = 50

    # Transcription plans
    TRANSCRIPTION_BASIC_MONTHLY_LIMIT: int = 2400
    TRANSCRIPTION_DEFAULT_STT_MODEL: str = "nova-3"
    TRANSCRIPTION_DEFAULT_COST_PER_MINUTE: float = 0.0043

    # Pricing
    DEFAULT_CURRENCY: str = "BRL"

    # Browser console origins, comma-separated
    CORS_ORIGINS: str = "http://localhost:5173"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
settings = Settings()


def cors_origins(settings_obj: Optional[Settings] = None) -> list[str]:
    cfg = settings_obj or settings
    return [origin.strip() for origin in cfg.CORS_ORIGINS.split(",") if origin.strip()]


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate required configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("admin_console")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    required_keys = [
        "UPSTREAM_API_URL",
        "UPSTREAM_API_PREFIX",
    ]

    missing = [key for key in required_keys if not getattr(cfg, key, None)]
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
