"""Transcription quota plans assigned to tenants."""

from datetime import datetime
from typing import Optional

from admin_console.models.common import UpstreamModel


class TranscriptionPlan(UpstreamModel):
    id: int
    slug: str
    name: str
    description: Optional[str] = None
    monthly_minutes_limit: int
    allows_custom_limits: bool = False
    allows_overage: bool = False
    stt_model: Optional[str] = None
    cost_per_minute_usd: Optional[float] = None
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TranscriptionPlanForm(UpstreamModel):
    """Create/update form. Unset fields on update are left untouched upstream."""
    slug: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    monthly_minutes_limit: Optional[int] = None
    allows_custom_limits: Optional[bool] = None
    allows_overage: Optional[bool] = None
    stt_model: Optional[str] = None
    cost_per_minute_usd: Optional[float] = None
    active: Optional[bool] = None
