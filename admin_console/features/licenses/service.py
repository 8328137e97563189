"""
Tenant licenses and per-user seat allocation.

Seat rules (no seats left, limit below seats in use) are enforced by the
backend; the checks here only catch the obvious cases before a round trip.
"""

import asyncio
from typing import List, Optional

from admin_console.core.errors import FormValidationError, NotFoundError
from admin_console.core.logging import log_event
from admin_console.features.applications.service import list_applications, matches_search
from admin_console.features.feedback.catalog import DOMAIN_MESSAGES
from admin_console.models.application import Application
from admin_console.models.license import (
    ActivateLicenseRequest,
    AdjustSeatsRequest,
    AppRole,
    AppUsersView,
    SeatUsage,
    TenantLicense,
)
from admin_console.services.upstream import UpstreamClient, unwrap, unwrap_object


def _license_path(tenant_id: int, app_slug: str) -> str:
    return f"/tenants/{tenant_id}/applications/{app_slug}"


def _access_path(tenant_id: int, user_id: int, app_slug: str) -> str:
    return f"/tenants/{tenant_id}/users/{user_id}/applications/{app_slug}"


async def list_licenses(api: UpstreamClient, tenant_id: int) -> List[TenantLicense]:
    payload = await api.get(f"/tenants/{tenant_id}/applications")
    return [TenantLicense.model_validate(item) for item in unwrap(payload, "applications")]


async def get_license(api: UpstreamClient, tenant_id: int, app_slug: str) -> TenantLicense:
    for license_ in await list_licenses(api, tenant_id):
        if license_.application_slug == app_slug:
            return license_
    raise NotFoundError(f"Application '{app_slug}' is not licensed for this tenant")


async def list_activatable_applications(
    api: UpstreamClient,
    tenant_id: int,
    search: Optional[str] = None,
) -> List[Application]:
    """Catalog applications the tenant does not hold a license for yet."""
    apps, licenses = await asyncio.gather(
        list_applications(api),
        list_licenses(api, tenant_id),
    )
    licensed = {license_.application_slug for license_ in licenses}
    return [app for app in apps if app.slug not in licensed and matches_search(app, search)]


async def activate_license(
    api: UpstreamClient,
    tenant_id: int,
    app_slug: str,
    request: ActivateLicenseRequest,
) -> TenantLicense:
    if request.user_limit is not None and request.user_limit < 1:
        raise FormValidationError({"user_limit": "Seat limit must be at least 1"})
    payload = await api.post(f"{_license_path(tenant_id, app_slug)}/activate", json=request.to_upstream())
    license_ = TenantLicense.model_validate(unwrap_object(payload, "license"))
    log_event(
        "info",
        "license.activated",
        tenant_id=tenant_id,
        event_type="license",
        extra={"application_slug": app_slug, "status": license_.status.value},
    )
    return license_


def check_seat_limit(license_: TenantLicense, user_limit: int) -> None:
    if user_limit < license_.seats_used:
        raise FormValidationError(
            {"user_limit": f"Cannot reduce limit below {license_.seats_used} seats currently in use."}
        )


async def adjust_seats(
    api: UpstreamClient,
    tenant_id: int,
    app_slug: str,
    request: AdjustSeatsRequest,
) -> TenantLicense:
    current = await get_license(api, tenant_id, app_slug)
    check_seat_limit(current, request.user_limit)
    payload = await api.put(f"{_license_path(tenant_id, app_slug)}/adjust", json=request.to_upstream())
    license_ = TenantLicense.model_validate(unwrap_object(payload, "license"))
    log_event(
        "info",
        "license.adjusted",
        tenant_id=tenant_id,
        event_type="license",
        extra={"application_slug": app_slug, "user_limit": request.user_limit},
    )
    return license_


async def list_app_users(
    api: UpstreamClient,
    tenant_id: int,
    app_slug: str,
    *,
    q: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> AppUsersView:
    payload = await api.get(
        f"{_license_path(tenant_id, app_slug)}/users",
        params={"q": q, "page": page, "limit": limit},
    )
    data = payload.get("data") if isinstance(payload, dict) else None
    return AppUsersView.model_validate(data if isinstance(data, dict) else payload)


def _ensure_seat_free(usage: Optional[SeatUsage]) -> None:
    if usage is not None and usage.available is not None and usage.available <= 0:
        raise FormValidationError({"user_id": DOMAIN_MESSAGES["NO_SEATS_AVAILABLE"]})


async def grant_access(
    api: UpstreamClient,
    tenant_id: int,
    user_id: int,
    app_slug: str,
    usage: Optional[SeatUsage] = None,
) -> Optional[SeatUsage]:
    """Grant a seat. Returns the caller's usage counters advanced by one seat."""
    _ensure_seat_free(usage)
    await api.post(f"{_access_path(tenant_id, user_id, app_slug)}/grant")
    log_event("info", "access.granted", tenant_id=tenant_id, event_type="license", extra={"user_id": user_id, "application_slug": app_slug})
    return usage.after_grant() if usage is not None else None


async def revoke_access(
    api: UpstreamClient,
    tenant_id: int,
    user_id: int,
    app_slug: str,
    usage: Optional[SeatUsage] = None,
) -> Optional[SeatUsage]:
    await api.post(f"{_access_path(tenant_id, user_id, app_slug)}/revoke")
    log_event("info", "access.revoked", tenant_id=tenant_id, event_type="license", extra={"user_id": user_id, "application_slug": app_slug})
    return usage.after_revoke() if usage is not None else None


async def reactivate_access(
    api: UpstreamClient,
    tenant_id: int,
    user_id: int,
    app_slug: str,
    usage: Optional[SeatUsage] = None,
) -> Optional[SeatUsage]:
    """Reactivating a revoked grant takes a seat again."""
    _ensure_seat_free(usage)
    await api.put(f"{_access_path(tenant_id, user_id, app_slug)}/reactivate")
    log_event("info", "access.reactivated", tenant_id=tenant_id, event_type="license", extra={"user_id": user_id, "application_slug": app_slug})
    return usage.after_grant() if usage is not None else None


async def update_role_in_app(
    api: UpstreamClient,
    tenant_id: int,
    user_id: int,
    app_slug: str,
    role: AppRole,
) -> AppRole:
    payload = await api.put(f"{_access_path(tenant_id, user_id, app_slug)}/role", json={"roleInApp": role.value})
    data = payload.get("data") if isinstance(payload, dict) else None
    if isinstance(data, dict) and data.get("roleInApp"):
        return AppRole(data["roleInApp"])
    return role
