import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

# Import after dotenv is loaded
from admin_console.api import (  # noqa: E402
    api_keys,
    applications,
    auth,
    dashboard,
    health,
    licenses,
    notifications,
    tenants,
    transcription_plans,
    users,
)
from admin_console.core.config import Settings, cors_origins, settings, validate_config  # noqa: E402
from admin_console.core.errors import (  # noqa: E402
    AppError,
    UpstreamError,
    UpstreamUnavailableError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from admin_console.core.logging import configure_logging  # noqa: E402
from admin_console.core.middleware.request_id import RequestIdMiddleware  # noqa: E402
from admin_console.core.state import ConsoleState  # noqa: E402
from admin_console.core.validation import validate_env  # noqa: E402
from admin_console.features.feedback.handlers import upstream_error_handler  # noqa: E402

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


def create_app(
    settings_obj: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the console app. Tests pass an httpx.MockTransport as `transport`."""
    cfg = settings_obj or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = logging.getLogger("admin_console")
        logger.info("Starting admin console...")
        # One state (and httpx client) per startup; a restarted app gets a fresh pool
        app.state.console = ConsoleState(cfg, transport=transport)
        try:
            yield
        finally:
            await app.state.console.close()
            logger.info("Stopping admin console...")

    app = FastAPI(title="Tenant Admin Console", lifespan=lifespan)

    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(UpstreamUnavailableError, upstream_error_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(cfg),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router, tags=["auth"])
    app.include_router(tenants.router, tags=["tenants"])
    app.include_router(licenses.router, tags=["licenses"])
    app.include_router(users.router, tags=["users"])
    app.include_router(applications.router, tags=["applications"])
    app.include_router(transcription_plans.router, tags=["transcription-plans"])
    app.include_router(dashboard.router, tags=["dashboard"])
    app.include_router(api_keys.router, tags=["api-keys"])
    app.include_router(notifications.router, tags=["notifications"])
    app.include_router(health.root_router, tags=["health"])
    return app


app = create_app()
