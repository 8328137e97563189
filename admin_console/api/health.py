"""
Health endpoints for the admin console.

/healthz is a liveness check with no dependencies; /readyz probes the
upstream platform API. Neither exposes upstream URLs or tokens.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from admin_console.core.logging import get_request_id
from admin_console.core.state import ConsoleState, get_state

logger = logging.getLogger("admin_console")

root_router = APIRouter(tags=["health"])


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@root_router.get("/readyz")
async def readyz(state: ConsoleState = Depends(get_state)):
    """Readiness check: upstream platform API reachable."""
    ok, bucket = await state.upstream.probe()
    logger.info(
        "health.upstream",
        extra={"request_id": get_request_id(), "ok": ok, "latency_bucket": bucket},
    )
    body = {
        "status": "ok" if ok else "error",
        "upstream": ok,
        "latency_bucket": bucket,
        "computed_at": datetime.now(timezone.utc).isoformat(),
    }
    if not ok:
        logger.warning("[readyz] upstream unreachable")
        body["detail"] = "upstream unreachable"
        return JSONResponse(status_code=503, content=body)
    return body
