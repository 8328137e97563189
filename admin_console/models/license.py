"""Tenant licenses (application entitlements), seats and per-user access."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from admin_console.models.common import UpstreamModel


class LicenseStatus(str, Enum):
    ACTIVE = "active"
    TRIAL = "trial"
    SUSPENDED = "suspended"
    EXPIRED = "expired"

    @property
    def badge(self) -> str:
        return _LICENSE_BADGES[self]


_LICENSE_BADGES = {
    LicenseStatus.ACTIVE: "success",
    LicenseStatus.TRIAL: "warning",
    LicenseStatus.SUSPENDED: "danger",
    LicenseStatus.EXPIRED: "default",
}


class ActivationStatus(str, Enum):
    """Statuses a platform admin may pick when activating a license."""
    ACTIVE = "active"
    TRIAL = "trial"


class AppRole(str, Enum):
    USER = "user"
    OPERATIONS = "operations"
    MANAGER = "manager"
    ADMIN = "admin"


class TenantLicense(UpstreamModel):
    id: Optional[int] = None
    tenant_id: Optional[int] = None
    application_slug: str = Field(validation_alias="slug")
    application_name: Optional[str] = Field(default=None, validation_alias="name")
    status: LicenseStatus = LicenseStatus.ACTIVE
    user_limit: Optional[int] = None
    seats_used: int = 0
    seats_available: Optional[int] = None
    expiry_date: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_upstream_shapes(cls, data):
        # Licensed-app listings use slug/name/expiresAt, license payloads use
        # applicationSlug/applicationName/expiryDate.
        if isinstance(data, dict):
            data = dict(data)
            data.setdefault("slug", data.get("applicationSlug") or data.get("application_slug"))
            data.setdefault("name", data.get("applicationName") or data.get("application_name"))
            if "expiryDate" not in data and "expiresAt" in data:
                data["expiryDate"] = data["expiresAt"]
            if "userLimit" not in data and "seatsPurchased" in data:
                data["userLimit"] = data["seatsPurchased"]
        return data

    @model_validator(mode="after")
    def _derive_available(self):
        if self.seats_available is None and self.user_limit is not None:
            self.seats_available = max(0, self.user_limit - self.seats_used)
        return self

    @property
    def is_unlimited(self) -> bool:
        return self.user_limit is None


class SeatUsage(UpstreamModel):
    used: int = 0
    total: Optional[int] = None
    available: Optional[int] = None

    def after_grant(self) -> "SeatUsage":
        return SeatUsage(
            used=self.used + 1,
            total=self.total,
            available=self.available - 1 if self.available is not None else None,
        )

    def after_revoke(self) -> "SeatUsage":
        return SeatUsage(
            used=max(0, self.used - 1),
            total=self.total,
            available=self.available + 1 if self.available is not None else None,
        )


class AppUserAccess(UpstreamModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    granted: bool = False
    access_id: Optional[int] = None
    granted_at: Optional[datetime] = None
    role_in_app: Optional[AppRole] = None


class AppUsersView(UpstreamModel):
    usage: SeatUsage = Field(default_factory=SeatUsage)
    users: List[AppUserAccess] = Field(default_factory=list)


class ActivateLicenseRequest(UpstreamModel):
    user_limit: Optional[int] = Field(default=None, ge=0)
    expiry_date: Optional[datetime] = None
    status: ActivationStatus = ActivationStatus.ACTIVE


class AdjustSeatsRequest(UpstreamModel):
    user_limit: int = Field(ge=0)
