"""Tenant list/detail/edit screens and address/contact management."""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query

from admin_console.core.auth import get_notifier, get_upstream
from admin_console.core.config import settings
from admin_console.core.state import SessionNotifier
from admin_console.features.licenses import service as licenses
from admin_console.features.tenants import service as tenants
from admin_console.models.tenant import (
    AddressType,
    ContactType,
    CreateTenantRequest,
    TenantAddress,
    TenantContact,
    TenantEditRequest,
    TenantStatus,
    UpdateTenantRequest,
)
from admin_console.services.upstream import UpstreamClient

router = APIRouter(prefix="/v1/tenants")


async def _detail_view(api: UpstreamClient, tenant_id: int) -> dict:
    detail, licensed = await asyncio.gather(
        tenants.get_tenant_detail(api, tenant_id),
        licenses.list_licenses(api, tenant_id),
    )
    tenant = detail.tenant
    return {
        "tenant": {**tenant.model_dump(mode="json"), "status_badge": tenant.status.badge},
        "metrics": detail.metrics.model_dump(mode="json"),
        "licenses": [
            {**license_.model_dump(mode="json"), "status_badge": license_.status.badge}
            for license_ in licensed
        ],
    }


@router.get("")
async def list_tenants(
    status: Optional[TenantStatus] = None,
    search: Optional[str] = None,
    page: Optional[int] = Query(None, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    api: UpstreamClient = Depends(get_upstream),
):
    result = await tenants.list_tenants(api, status=status, search=search, page=page, limit=limit)
    return result.model_dump(mode="json")


@router.post("", status_code=201)
async def create_tenant(
    req: CreateTenantRequest,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    tenant = await tenants.create_tenant(api, req)
    notifier.success(f"Tenant '{tenant.name}' created successfully")
    return tenant.model_dump(mode="json")


@router.get("/{tenant_id}")
async def get_tenant(tenant_id: int, api: UpstreamClient = Depends(get_upstream)):
    return await _detail_view(api, tenant_id)


@router.put("/{tenant_id}")
async def update_tenant(
    tenant_id: int,
    req: UpdateTenantRequest,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    await tenants.update_tenant(api, tenant_id, req)
    notifier.success("Tenant updated successfully")
    return await _detail_view(api, tenant_id)


@router.get("/{tenant_id}/edit")
async def get_edit_state(tenant_id: int, api: UpstreamClient = Depends(get_upstream)):
    """Snapshot the edit screen starts from; send it back unchanged as `snapshot` on save."""
    state = await tenants.load_edit_state(api, tenant_id)
    return state.model_dump(mode="json")


@router.put("/{tenant_id}/edit")
async def save_edit(
    tenant_id: int,
    req: TenantEditRequest,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    report = await tenants.save_tenant_edit(api, tenant_id, req, notifier=notifier)
    state = await tenants.load_edit_state(api, tenant_id)
    return {"report": report.to_dict(), "state": state.model_dump(mode="json")}


# ---- addresses --------------------------------------------------------------

@router.get("/{tenant_id}/addresses")
async def list_addresses(
    tenant_id: int,
    type: Optional[AddressType] = None,
    active: Optional[bool] = None,
    api: UpstreamClient = Depends(get_upstream),
):
    items = await tenants.list_addresses(api, tenant_id, address_type=type, active=active)
    return {"items": [item.model_dump(mode="json") for item in items]}


@router.post("/{tenant_id}/addresses", status_code=201)
async def create_address(tenant_id: int, req: TenantAddress, api: UpstreamClient = Depends(get_upstream)):
    address = await tenants.create_address(api, tenant_id, req)
    return address.model_dump(mode="json")


@router.put("/{tenant_id}/addresses/{address_id}")
async def update_address(tenant_id: int, address_id: int, req: TenantAddress, api: UpstreamClient = Depends(get_upstream)):
    address = await tenants.update_address(api, tenant_id, address_id, req)
    return address.model_dump(mode="json")


@router.delete("/{tenant_id}/addresses/{address_id}")
async def delete_address(tenant_id: int, address_id: int, api: UpstreamClient = Depends(get_upstream)):
    await tenants.delete_address(api, tenant_id, address_id)
    return {"status": "ok"}


# ---- contacts ---------------------------------------------------------------

@router.get("/{tenant_id}/contacts")
async def list_contacts(
    tenant_id: int,
    type: Optional[ContactType] = None,
    active: Optional[bool] = None,
    api: UpstreamClient = Depends(get_upstream),
):
    items = await tenants.list_contacts(api, tenant_id, contact_type=type, active=active)
    return {"items": [item.model_dump(mode="json") for item in items]}


@router.post("/{tenant_id}/contacts", status_code=201)
async def create_contact(tenant_id: int, req: TenantContact, api: UpstreamClient = Depends(get_upstream)):
    contact = await tenants.create_contact(api, tenant_id, req)
    return contact.model_dump(mode="json")


@router.put("/{tenant_id}/contacts/{contact_id}")
async def update_contact(tenant_id: int, contact_id: int, req: TenantContact, api: UpstreamClient = Depends(get_upstream)):
    contact = await tenants.update_contact(api, tenant_id, contact_id, req)
    return contact.model_dump(mode="json")


@router.delete("/{tenant_id}/contacts/{contact_id}")
async def delete_contact(tenant_id: int, contact_id: int, api: UpstreamClient = Depends(get_upstream)):
    await tenants.delete_contact(api, tenant_id, contact_id)
    return {"status": "ok"}
