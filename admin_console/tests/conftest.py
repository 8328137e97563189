import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SKIP_ENV_VALIDATION", "1")

from admin_console.core.config import Settings  # noqa: E402
from admin_console.main import create_app  # noqa: E402
from admin_console.models.user import AdminProfile  # noqa: E402
from admin_console.services.upstream import UpstreamClient  # noqa: E402
from admin_console.tests.mocks import TOKEN, FakeUpstream  # noqa: E402


@pytest.fixture
def test_settings():
    return Settings(UPSTREAM_API_URL="http://upstream.test", CORS_ORIGINS="http://localhost:5173")


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def api(upstream, test_settings):
    """UpstreamClient for service-level tests, bound to a token."""
    return UpstreamClient(test_settings, transport=upstream.transport).with_token(TOKEN)


@pytest.fixture
def app(upstream, test_settings):
    return create_app(test_settings, transport=upstream.transport)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_profile():
    return AdminProfile(user_id=7, email="root@platform.test", name="Root", platform_role="internal_admin")


@pytest.fixture
def session(client, app, admin_profile):
    return app.state.console.sessions.open(TOKEN, admin_profile)


@pytest.fixture
def auth_headers(session):
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def notes(app, session):
    """Drain the session's notifications as a list of (kind, message)."""
    def _drain():
        return [(n.kind.value, n.message) for n in app.state.console.notifications.drain(session.session_id)]
    return _drain
