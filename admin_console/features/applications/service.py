"""Application catalog lookups."""

from typing import List, Optional

from admin_console.models.application import Application, ApplicationStatus
from admin_console.services.upstream import UpstreamClient, unwrap, unwrap_object


def matches_search(app: Application, search: Optional[str]) -> bool:
    if not search:
        return True
    needle = search.strip().lower()
    return needle in app.name.lower() or needle in app.slug.lower()


async def list_applications(
    api: UpstreamClient,
    *,
    search: Optional[str] = None,
    status: Optional[ApplicationStatus] = None,
) -> List[Application]:
    payload = await api.get("/applications")
    apps = [Application.model_validate(item) for item in unwrap(payload, "applications")]
    return [
        app for app in apps
        if matches_search(app, search) and (status is None or app.status == status)
    ]


async def get_application(api: UpstreamClient, application_id: int) -> Application:
    payload = await api.get(f"/applications/{application_id}")
    return Application.model_validate(unwrap_object(payload, "application"))
