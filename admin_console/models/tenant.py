"""
Tenant, address and contact models.

A tenant is an isolated customer organization. Addresses and contacts are
repeated sub-entities edited as a list and saved as per-record calls.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import Field

from admin_console.models.common import UpstreamModel


class TenantStatus(str, Enum):
    ACTIVE = "active"
    TRIAL = "trial"
    INACTIVE = "inactive"

    @property
    def badge(self) -> str:
        return _TENANT_BADGES[self]


_TENANT_BADGES = {
    TenantStatus.ACTIVE: "success",
    TenantStatus.TRIAL: "warning",
    TenantStatus.INACTIVE: "default",
}


class AddressType(str, Enum):
    MAIN = "MAIN"
    BILLING = "BILLING"
    SHIPPING = "SHIPPING"
    OTHER = "OTHER"


class ContactType(str, Enum):
    ADMIN = "ADMIN"
    BILLING = "BILLING"
    TECHNICAL = "TECHNICAL"
    OTHER = "OTHER"


# Upstream ids are integers; records added in the console carry a
# client-only "tmp-..." placeholder until the backend assigns one.
RecordId = Union[int, str]


class Tenant(UpstreamModel):
    id: int
    name: str
    subdomain: Optional[str] = None
    schema_name: Optional[str] = None
    timezone: Optional[str] = None
    status: TenantStatus = TenantStatus.ACTIVE
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LicenseSummary(UpstreamModel):
    slug: str
    status: str
    user_limit: Optional[int] = None
    seats_used: int = 0
    expires_at: Optional[datetime] = None


class TenantMetrics(UpstreamModel):
    total_users: int = 0
    active_users: int = 0
    applications: List[LicenseSummary] = Field(default_factory=list)


class TenantDetail(UpstreamModel):
    tenant: Tenant
    metrics: TenantMetrics = Field(default_factory=TenantMetrics)


class TenantAddress(UpstreamModel):
    id: Optional[RecordId] = None
    type: AddressType = AddressType.OTHER
    label: Optional[str] = None
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country_code: Optional[str] = None
    is_primary: bool = False
    active: bool = True


class TenantContact(UpstreamModel):
    id: Optional[RecordId] = None
    type: ContactType = ContactType.OTHER
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    department: Optional[str] = None
    notes: Optional[str] = None
    is_primary: bool = False
    active: bool = True


class CreateTenantRequest(UpstreamModel):
    name: str
    subdomain: str
    timezone: str
    status: TenantStatus = TenantStatus.ACTIVE


class UpdateTenantRequest(UpstreamModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TenantStatus] = None


class TenantCore(UpstreamModel):
    """The editable scalar fields of a tenant on the edit screen."""
    name: str
    status: TenantStatus = TenantStatus.ACTIVE
    description: Optional[str] = None


class TenantEditState(UpstreamModel):
    """One full state of the edit screen: core fields plus repeated sub-entities."""
    core: TenantCore
    addresses: List[TenantAddress] = Field(default_factory=list)
    contacts: List[TenantContact] = Field(default_factory=list)


class TenantEditRequest(UpstreamModel):
    """The state the screen was loaded with and the state being saved."""
    snapshot: TenantEditState
    current: TenantEditState
