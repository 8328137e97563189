"""API keys used by external integrations to call the provisioning API."""

from datetime import datetime
from typing import Optional

from admin_console.models.common import UpstreamModel

DEFAULT_SCOPE = "provisioning"


class ApiKey(UpstreamModel):
    """Key metadata. The plain `key` is only present in the create response."""
    id: str
    name: str
    key_prefix: Optional[str] = None
    scope: str = DEFAULT_SCOPE
    created_by_fk: Optional[int] = None
    last_used_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    key: Optional[str] = None


class ApiKeyForm(UpstreamModel):
    name: str = ""
    scope: str = DEFAULT_SCOPE
    expires_at: Optional[datetime] = None


class ApiKeyUpdate(UpstreamModel):
    name: Optional[str] = None
    expires_at: Optional[datetime] = None
