"""Console sign-in, sign-out and current profile."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from admin_console.core.auth import ensure_internal_admin, require_session
from admin_console.core.errors import UpstreamError, UpstreamUnavailableError
from admin_console.core.state import ConsoleState, Session, get_state
from admin_console.models.user import AdminProfile
from admin_console.services.upstream import unwrap

logger = logging.getLogger("admin_console.auth")

router = APIRouter(prefix="/v1/auth")


class LoginIn(BaseModel):
    email: str
    password: str


def _session_view(session: Session) -> dict:
    return {
        "session_id": session.session_id,
        "opened_at": session.opened_at.isoformat(),
        "user": session.profile.model_dump(mode="json"),
    }


@router.post("/login")
async def login(data: LoginIn, state: ConsoleState = Depends(get_state)):
    """Exchange platform credentials for a console session (internal admins only)."""
    payload = await state.upstream.post(
        "/platform-auth/login",
        json={"email": data.email.strip().lower(), "password": data.password},
    )
    profile = ensure_internal_admin(AdminProfile.model_validate(unwrap(payload, "user")))
    token = unwrap(payload, "token")
    session = state.sessions.open(token, profile)
    logger.info("auth.login", extra={"event_type": "auth", "user_id": profile.user_id})
    return {"token": token, **_session_view(session)}


@router.post("/logout")
async def logout(session: Session = Depends(require_session), state: ConsoleState = Depends(get_state)):
    try:
        await state.upstream_for(session).post("/platform-auth/logout")
    except (UpstreamError, UpstreamUnavailableError) as exc:
        # The console session is closed either way.
        logger.warning("auth.logout.upstream_failed", extra={"event_type": "auth", "error_code": exc.code})
    state.end_session(session.token)
    return {"status": "ok"}


@router.get("/me")
async def me(session: Session = Depends(require_session), state: ConsoleState = Depends(get_state)):
    payload = await state.upstream_for(session).get("/platform-auth/me")
    session.profile = ensure_internal_admin(AdminProfile.model_validate(unwrap(payload, "user")))
    return _session_view(session)
