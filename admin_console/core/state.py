"""
Process-wide console state: admin sessions, per-session notifications and the
shared upstream client.

Created at each app startup (lifespan) and stored on ``app.state.console``; route
handlers reach it through ``Depends(get_state)``.
"""

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List, Optional

import httpx
from starlette.requests import Request

from admin_console.core.config import Settings, settings
from admin_console.models.user import AdminProfile
from admin_console.services.upstream import UpstreamClient

logger = logging.getLogger("admin_console")


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


@dataclass
class Notification:
    kind: NotificationKind
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }


class NotificationCenter:
    """Bounded per-session queues; the oldest entry is dropped when full."""

    def __init__(self, maxsize: int = 50):
        self.maxsize = maxsize
        self._queues: Dict[str, Deque[Notification]] = {}

    def publish(self, session_id: str, kind: NotificationKind, message: str) -> Notification:
        note = Notification(kind=kind, message=message)
        queue = self._queues.setdefault(session_id, deque(maxlen=self.maxsize))
        queue.append(note)
        return note

    def success(self, session_id: str, message: str) -> Notification:
        return self.publish(session_id, NotificationKind.SUCCESS, message)

    def error(self, session_id: str, message: str) -> Notification:
        return self.publish(session_id, NotificationKind.ERROR, message)

    def drain(self, session_id: str) -> List[Notification]:
        queue = self._queues.get(session_id)
        if not queue:
            return []
        items = list(queue)
        queue.clear()
        return items

    def clear(self, session_id: str) -> None:
        self._queues.pop(session_id, None)

    def clear_all(self) -> None:
        self._queues.clear()


class SessionNotifier:
    """NotificationCenter bound to one session."""

    def __init__(self, center: NotificationCenter, session_id: str):
        self.center = center
        self.session_id = session_id

    def success(self, message: str) -> Notification:
        return self.center.success(self.session_id, message)

    def error(self, message: str) -> Notification:
        return self.center.error(self.session_id, message)


@dataclass
class Session:
    token: str
    profile: AdminProfile
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionStore:
    """Open console sessions keyed by upstream token. Tokens are never logged."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def open(self, token: str, profile: AdminProfile) -> Session:
        session = Session(token=token, profile=profile)
        self._sessions[token] = session
        logger.info("session.open", extra={"event_type": "session", "session_id": session.session_id})
        return session

    def get(self, token: Optional[str]) -> Optional[Session]:
        if not token:
            return None
        return self._sessions.get(token)

    def close(self, token: str) -> Optional[Session]:
        session = self._sessions.pop(token, None)
        if session:
            logger.info("session.close", extra={"event_type": "session", "session_id": session.session_id})
        return session

    def close_all(self) -> List[Session]:
        closed = list(self._sessions.values())
        self._sessions.clear()
        return closed

    def __len__(self) -> int:
        return len(self._sessions)


class ConsoleState:
    def __init__(self, settings_obj: Optional[Settings] = None, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings_obj or settings
        self.upstream = UpstreamClient(self.settings, transport=transport)
        self.sessions = SessionStore()
        self.notifications = NotificationCenter(self.settings.NOTIFICATION_QUEUE_SIZE)

    def upstream_for(self, session: Optional[Session]) -> UpstreamClient:
        return self.upstream.with_token(session.token if session else None)

    def notifier_for(self, session: Session) -> SessionNotifier:
        return SessionNotifier(self.notifications, session.session_id)

    def end_session(self, token: str) -> Optional[Session]:
        session = self.sessions.close(token)
        if session:
            self.notifications.clear(session.session_id)
        return session

    async def close(self) -> None:
        closed = self.sessions.close_all()
        self.notifications.clear_all()
        await self.upstream.aclose()
        logger.info("console.state.closed", extra={"event_type": "shutdown", "sessions": len(closed)})


def get_state(request: Request) -> ConsoleState:
    return request.app.state.console
