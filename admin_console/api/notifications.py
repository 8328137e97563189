from fastapi import APIRouter, Depends

from admin_console.core.auth import require_session
from admin_console.core.state import ConsoleState, Session, get_state

router = APIRouter(prefix="/v1/notifications")


@router.get("")
async def drain_notifications(session: Session = Depends(require_session), state: ConsoleState = Depends(get_state)):
    """Pending toasts for this session, oldest first. Each is returned once."""
    items = state.notifications.drain(session.session_id)
    return {"items": [note.to_dict() for note in items]}
