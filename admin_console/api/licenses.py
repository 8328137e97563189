"""Tenant licenses, seat limits and per-user application access."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from admin_console.core.auth import get_notifier, get_upstream
from admin_console.core.config import settings
from admin_console.core.state import SessionNotifier
from admin_console.features.licenses import service as licenses
from admin_console.models.common import UpstreamModel
from admin_console.models.license import (
    ActivateLicenseRequest,
    AdjustSeatsRequest,
    AppRole,
    SeatUsage,
    TenantLicense,
)
from admin_console.services.upstream import UpstreamClient

router = APIRouter(prefix="/v1/tenants/{tenant_id}")


class AccessChangeIn(UpstreamModel):
    """Seat counters the screen is showing; they come back adjusted by one."""
    usage: Optional[SeatUsage] = None


class RoleIn(UpstreamModel):
    role_in_app: AppRole


def _license_view(license_: TenantLicense) -> dict:
    return {**license_.model_dump(mode="json"), "status_badge": license_.status.badge}


def _usage_view(usage: Optional[SeatUsage]) -> Optional[dict]:
    return usage.model_dump(mode="json") if usage is not None else None


@router.get("/licenses")
async def list_licenses(tenant_id: int, api: UpstreamClient = Depends(get_upstream)):
    items = await licenses.list_licenses(api, tenant_id)
    return {"items": [_license_view(item) for item in items]}


@router.get("/licenses/activatable")
async def list_activatable(tenant_id: int, search: Optional[str] = None, api: UpstreamClient = Depends(get_upstream)):
    apps = await licenses.list_activatable_applications(api, tenant_id, search=search)
    return {"items": [app.model_dump(mode="json") for app in apps]}


@router.post("/licenses/{app_slug}/activate", status_code=201)
async def activate_license(
    tenant_id: int,
    app_slug: str,
    req: ActivateLicenseRequest,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    license_ = await licenses.activate_license(api, tenant_id, app_slug, req)
    notifier.success(f"Application '{license_.application_name or app_slug}' activated successfully")
    return _license_view(license_)


@router.put("/licenses/{app_slug}/seats")
async def adjust_seats(
    tenant_id: int,
    app_slug: str,
    req: AdjustSeatsRequest,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    license_ = await licenses.adjust_seats(api, tenant_id, app_slug, req)
    notifier.success("Seat limit updated successfully")
    return _license_view(license_)


@router.get("/licenses/{app_slug}/users")
async def list_app_users(
    tenant_id: int,
    app_slug: str,
    q: Optional[str] = None,
    page: Optional[int] = Query(None, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    api: UpstreamClient = Depends(get_upstream),
):
    view = await licenses.list_app_users(api, tenant_id, app_slug, q=q, page=page, limit=limit)
    return view.model_dump(mode="json")


@router.post("/users/{user_id}/applications/{app_slug}/grant")
async def grant_access(
    tenant_id: int,
    user_id: int,
    app_slug: str,
    req: Optional[AccessChangeIn] = None,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    usage = await licenses.grant_access(api, tenant_id, user_id, app_slug, req.usage if req else None)
    notifier.success("Access granted successfully")
    return {"status": "ok", "usage": _usage_view(usage)}


@router.post("/users/{user_id}/applications/{app_slug}/revoke")
async def revoke_access(
    tenant_id: int,
    user_id: int,
    app_slug: str,
    req: Optional[AccessChangeIn] = None,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    usage = await licenses.revoke_access(api, tenant_id, user_id, app_slug, req.usage if req else None)
    notifier.success("Access revoked successfully")
    return {"status": "ok", "usage": _usage_view(usage)}


@router.put("/users/{user_id}/applications/{app_slug}/reactivate")
async def reactivate_access(
    tenant_id: int,
    user_id: int,
    app_slug: str,
    req: Optional[AccessChangeIn] = None,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    usage = await licenses.reactivate_access(api, tenant_id, user_id, app_slug, req.usage if req else None)
    notifier.success("Access reactivated successfully")
    return {"status": "ok", "usage": _usage_view(usage)}


@router.put("/users/{user_id}/applications/{app_slug}/role")
async def update_role(
    tenant_id: int,
    user_id: int,
    app_slug: str,
    req: RoleIn,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    role = await licenses.update_role_in_app(api, tenant_id, user_id, app_slug, req.role_in_app)
    notifier.success("Role updated successfully")
    return {"status": "ok", "role_in_app": role.value}
