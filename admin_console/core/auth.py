"""
Console session authentication.

The console never verifies credentials itself: the platform-auth endpoint
does, and hands back a token. A console session exists for that token only
if the account is an internal platform admin.

Usage:
    @router.get("/v1/tenants")
    async def list_tenants(session: Session = Depends(require_session)):
        ...
"""

from typing import Optional

from fastapi import Depends, Request

from admin_console.core.errors import PermissionError, UnauthorizedError
from admin_console.core.state import ConsoleState, Session, SessionNotifier, get_state
from admin_console.models.user import AdminProfile, PlatformRole
from admin_console.services.upstream import UpstreamClient


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def ensure_internal_admin(profile: AdminProfile) -> AdminProfile:
    if profile.platform_role != PlatformRole.INTERNAL_ADMIN:
        raise PermissionError("Only platform administrators can use the admin console.")
    return profile


def require_session(request: Request, state: ConsoleState = Depends(get_state)) -> Session:
    """FastAPI dependency: resolve the bearer token to an open console session."""
    token = bearer_token(request)
    if not token:
        raise UnauthorizedError("Missing bearer token")
    session = state.sessions.get(token)
    if not session:
        raise UnauthorizedError("Session expired or unknown. Please sign in again.")
    request.state.session = session
    return session


def get_upstream(
    session: Session = Depends(require_session),
    state: ConsoleState = Depends(get_state),
) -> UpstreamClient:
    """Upstream client acting as the signed-in admin."""
    return state.upstream_for(session)


def get_notifier(
    session: Session = Depends(require_session),
    state: ConsoleState = Depends(get_state),
) -> SessionNotifier:
    return state.notifier_for(session)
