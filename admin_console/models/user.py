"""User models for platform-wide and tenant-scoped user management."""

from datetime import datetime
from enum import Enum
from typing import Optional

from admin_console.models.common import UpstreamModel


class UserRole(str, Enum):
    """Tenant roles, lowest to highest."""
    OPERATIONS = "operations"
    MANAGER = "manager"
    ADMIN = "admin"

    @property
    def hierarchy_level(self) -> int:
        return _ROLE_LEVELS[self]

    @property
    def label(self) -> str:
        return _ROLE_LABELS[self]


_ROLE_LEVELS = {
    UserRole.OPERATIONS: 1,
    UserRole.MANAGER: 2,
    UserRole.ADMIN: 3,
}

_ROLE_LABELS = {
    UserRole.OPERATIONS: "Operations",
    UserRole.MANAGER: "Manager",
    UserRole.ADMIN: "Administrator",
}


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"

    @property
    def badge(self) -> str:
        return _USER_BADGES[self]


_USER_BADGES = {
    UserStatus.ACTIVE: "success",
    UserStatus.INACTIVE: "default",
    UserStatus.SUSPENDED: "danger",
}


class UserStatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class PlatformRole(str, Enum):
    INTERNAL_ADMIN = "internal_admin"


class User(UpstreamModel):
    id: int
    tenant_id: Optional[int] = None
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole = UserRole.OPERATIONS
    status: UserStatus = UserStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part) or self.email


class CreateUserRequest(UpstreamModel):
    email: str = ""
    first_name: str = ""
    last_name: Optional[str] = None
    password: str = ""
    role: UserRole = UserRole.OPERATIONS
    status: UserStatus = UserStatus.ACTIVE


class UpdateUserRequest(UpstreamModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None


class AdminProfile(UpstreamModel):
    """The signed-in platform administrator, as returned by platform-auth."""
    user_id: int
    email: str
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    platform_role: Optional[PlatformRole] = None
