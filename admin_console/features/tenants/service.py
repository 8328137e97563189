"""
Tenant management: list/create/detail/update, address and contact CRUD, and
the multi-call save of the tenant edit screen.

The edit screen is saved as a sequence of independent upstream calls. They are
awaited one at a time with no rollback, so a failure part-way leaves the
backend partially updated; the error says how far the save got.
"""

import asyncio
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Union

from admin_console.core.errors import AppError, FormValidationError, UpstreamError, UpstreamUnavailableError
from admin_console.core.logging import log_event
from admin_console.core.state import SessionNotifier
from admin_console.features.feedback.catalog import ERROR_MESSAGES, map_status_to_error
from admin_console.features.tenants.diff import RecordDiff, diff_records
from admin_console.features.tenants.forms import validate_tenant_create, validate_tenant_edit, validate_tenant_name
from admin_console.models.common import Page, build_page, page_to_offset
from admin_console.models.tenant import (
    AddressType,
    ContactType,
    CreateTenantRequest,
    RecordId,
    Tenant,
    TenantAddress,
    TenantContact,
    TenantCore,
    TenantDetail,
    TenantEditRequest,
    TenantEditState,
    TenantStatus,
    UpdateTenantRequest,
)
from admin_console.services.upstream import UpstreamClient, unwrap, unwrap_object, unwrap_pagination

SAVE_FAILURE_MESSAGES = {
    409: ERROR_MESSAGES["CONFLICT"],
    403: "You do not have permission to edit this tenant.",
    404: "Tenant not found. It may have been deleted.",
}
SAVE_SERVER_MESSAGE = "Server error occurred. Please try again later."
SAVE_FALLBACK_MESSAGE = "Failed to update tenant. Please try again."


class PartialSaveError(AppError):
    """A tenant save failed after `completed` of `total` calls went through."""
    code = "save_failed"
    status_code = 502


def save_failure_message(exc: Union[UpstreamError, UpstreamUnavailableError]) -> str:
    if isinstance(exc, UpstreamUnavailableError):
        return ERROR_MESSAGES["NETWORK"]
    status = exc.upstream_status
    if status in SAVE_FAILURE_MESSAGES:
        return SAVE_FAILURE_MESSAGES[status]
    if status >= 500:
        return SAVE_SERVER_MESSAGE
    return SAVE_FALLBACK_MESSAGE


# ---- tenants ----------------------------------------------------------------

async def list_tenants(
    api: UpstreamClient,
    *,
    status: Optional[TenantStatus] = None,
    search: Optional[str] = None,
    page: Optional[int] = None,
    limit: int = 20,
    offset: Optional[int] = None,
) -> Page:
    start = page_to_offset(page, limit, offset)
    payload = await api.get(
        "/tenants",
        params={
            "status": status.value if status else None,
            "search": search,
            "limit": limit,
            "offset": start,
        },
    )
    tenants = [Tenant.model_validate(item) for item in unwrap(payload, "tenants")]
    return build_page(tenants, unwrap_pagination(payload), limit=limit, offset=start)


async def create_tenant(api: UpstreamClient, request: CreateTenantRequest) -> Tenant:
    errors = validate_tenant_create(request.name, request.subdomain, request.timezone)
    if errors:
        raise FormValidationError(errors)
    body = {
        "name": request.name.strip(),
        "subdomain": request.subdomain.strip(),
        "timezone": request.timezone.strip(),
        "status": request.status.value,
    }
    payload = await api.post("/tenants", json=body)
    tenant = Tenant.model_validate(unwrap_object(payload, "tenant"))
    log_event("info", "tenant.created", tenant_id=tenant.id, event_type="tenant")
    return tenant


async def get_tenant_detail(api: UpstreamClient, tenant_id: int) -> TenantDetail:
    payload = await api.get(f"/tenants/{tenant_id}")
    data = payload.get("data") if isinstance(payload, dict) else None
    if isinstance(data, dict) and isinstance(data.get("tenant"), dict):
        return TenantDetail.model_validate(data)
    return TenantDetail(tenant=Tenant.model_validate(unwrap_object(payload, "tenant")))


async def update_tenant(api: UpstreamClient, tenant_id: int, request: UpdateTenantRequest) -> Tenant:
    if request.name is not None:
        name = request.name.strip()
        name_error = validate_tenant_name(name)
        if name_error:
            raise FormValidationError({"name": name_error})
        request = request.model_copy(update={"name": name})
    payload = await api.put(f"/tenants/{tenant_id}", json=request.to_upstream())
    log_event("info", "tenant.updated", tenant_id=tenant_id, event_type="tenant")
    return Tenant.model_validate(unwrap_object(payload, "tenant"))


# ---- addresses --------------------------------------------------------------

def address_payload(address: TenantAddress) -> Dict[str, Any]:
    return address.to_upstream(exclude={"id", "active"})


async def list_addresses(
    api: UpstreamClient,
    tenant_id: int,
    *,
    address_type: Optional[AddressType] = None,
    active: Optional[bool] = None,
) -> List[TenantAddress]:
    payload = await api.get(
        f"/tenants/{tenant_id}/addresses",
        params={"type": address_type.value if address_type else None, "active": active},
    )
    return [TenantAddress.model_validate(item) for item in unwrap(payload, "addresses")]


async def create_address(api: UpstreamClient, tenant_id: int, address: TenantAddress) -> TenantAddress:
    payload = await api.post(f"/tenants/{tenant_id}/addresses", json=address_payload(address))
    return TenantAddress.model_validate(unwrap_object(payload, "address"))


async def update_address(api: UpstreamClient, tenant_id: int, address_id: RecordId, address: TenantAddress) -> TenantAddress:
    payload = await api.put(f"/tenants/{tenant_id}/addresses/{address_id}", json=address_payload(address))
    return TenantAddress.model_validate(unwrap_object(payload, "address"))


async def delete_address(api: UpstreamClient, tenant_id: int, address_id: RecordId) -> None:
    await api.delete(f"/tenants/{tenant_id}/addresses/{address_id}")


# ---- contacts ---------------------------------------------------------------

def contact_payload(contact: TenantContact) -> Dict[str, Any]:
    return contact.to_upstream(exclude={"id", "active"})


async def list_contacts(
    api: UpstreamClient,
    tenant_id: int,
    *,
    contact_type: Optional[ContactType] = None,
    active: Optional[bool] = None,
) -> List[TenantContact]:
    payload = await api.get(
        f"/tenants/{tenant_id}/contacts",
        params={"type": contact_type.value if contact_type else None, "active": active},
    )
    return [TenantContact.model_validate(item) for item in unwrap(payload, "contacts")]


async def create_contact(api: UpstreamClient, tenant_id: int, contact: TenantContact) -> TenantContact:
    payload = await api.post(f"/tenants/{tenant_id}/contacts", json=contact_payload(contact))
    return TenantContact.model_validate(unwrap_object(payload, "contact"))


async def update_contact(api: UpstreamClient, tenant_id: int, contact_id: RecordId, contact: TenantContact) -> TenantContact:
    payload = await api.put(f"/tenants/{tenant_id}/contacts/{contact_id}", json=contact_payload(contact))
    return TenantContact.model_validate(unwrap_object(payload, "contact"))


async def delete_contact(api: UpstreamClient, tenant_id: int, contact_id: RecordId) -> None:
    await api.delete(f"/tenants/{tenant_id}/contacts/{contact_id}")


# ---- edit screen ------------------------------------------------------------

async def load_edit_state(api: UpstreamClient, tenant_id: int) -> TenantEditState:
    detail, addresses, contacts = await asyncio.gather(
        get_tenant_detail(api, tenant_id),
        list_addresses(api, tenant_id, active=True),
        list_contacts(api, tenant_id, active=True),
    )
    tenant = detail.tenant
    return TenantEditState(
        core=TenantCore(name=tenant.name, status=tenant.status, description=tenant.description),
        addresses=addresses,
        contacts=contacts,
    )


@dataclass
class SaveReport:
    tenant_id: int
    core_updated: bool = False
    addresses_created: int = 0
    addresses_updated: int = 0
    addresses_deleted: int = 0
    contacts_created: int = 0
    contacts_updated: int = 0
    contacts_deleted: int = 0

    @property
    def calls(self) -> int:
        return (
            int(self.core_updated)
            + self.addresses_created
            + self.addresses_updated
            + self.addresses_deleted
            + self.contacts_created
            + self.contacts_updated
            + self.contacts_deleted
        )

    def to_dict(self) -> dict:
        return {**asdict(self), "calls": self.calls}


@dataclass
class EditPlan:
    core_changed: bool
    addresses: RecordDiff
    contacts: RecordDiff

    @property
    def total_calls(self) -> int:
        return int(self.core_changed) + self.addresses.call_count + self.contacts.call_count


def plan_tenant_edit(edit: TenantEditRequest) -> EditPlan:
    return EditPlan(
        core_changed=edit.snapshot.core.model_dump() != edit.current.core.model_dump(),
        addresses=diff_records(edit.snapshot.addresses, edit.current.addresses),
        contacts=diff_records(edit.snapshot.contacts, edit.current.contacts),
    )


async def save_tenant_edit(
    api: UpstreamClient,
    tenant_id: int,
    edit: TenantEditRequest,
    notifier: Optional[SessionNotifier] = None,
) -> SaveReport:
    current = edit.current
    errors = validate_tenant_edit(current.core.name, current.addresses, current.contacts)
    if errors:
        raise FormValidationError(errors)

    plan = plan_tenant_edit(edit)
    report = SaveReport(tenant_id=tenant_id)
    step = "core"
    try:
        if plan.core_changed:
            core = UpdateTenantRequest(
                name=current.core.name.strip(),
                status=current.core.status,
                description=current.core.description,
            )
            await api.put(f"/tenants/{tenant_id}", json=core.to_upstream())
            report.core_updated = True

        step = "addresses"
        for record in plan.addresses.created:
            await create_address(api, tenant_id, TenantAddress.model_validate(record))
            report.addresses_created += 1
        for record in plan.addresses.updated:
            await update_address(api, tenant_id, record["id"], TenantAddress.model_validate(record))
            report.addresses_updated += 1
        for address_id in plan.addresses.deleted_ids:
            await delete_address(api, tenant_id, address_id)
            report.addresses_deleted += 1

        step = "contacts"
        for record in plan.contacts.created:
            await create_contact(api, tenant_id, TenantContact.model_validate(record))
            report.contacts_created += 1
        for record in plan.contacts.updated:
            await update_contact(api, tenant_id, record["id"], TenantContact.model_validate(record))
            report.contacts_updated += 1
        for contact_id in plan.contacts.deleted_ids:
            await delete_contact(api, tenant_id, contact_id)
            report.contacts_deleted += 1
    except (UpstreamError, UpstreamUnavailableError) as exc:
        message = save_failure_message(exc)
        log_event(
            "warning",
            "tenant.save.partial",
            tenant_id=tenant_id,
            event_type="tenant",
            error_code=exc.code,
            extra={"step": step, "completed": report.calls, "total": plan.total_calls},
        )
        if notifier is not None:
            notifier.error(message)
        if isinstance(exc, UpstreamError):
            _, catalog_code = map_status_to_error(exc.upstream_status, exc.path)
            code, status = catalog_code.lower(), exc.status_code
        else:
            code, status = "network", exc.status_code
        raise PartialSaveError(
            message,
            code=code,
            status_code=status,
            details={
                "completed": report.calls,
                "total": plan.total_calls,
                "failed_step": step,
                "report": report.to_dict(),
            },
        ) from exc

    log_event(
        "info",
        "tenant.saved",
        tenant_id=tenant_id,
        event_type="tenant",
        extra={"calls": report.calls},
    )
    if notifier is not None:
        notifier.success("Tenant updated successfully")
    return report
