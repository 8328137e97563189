"""Platform overview counters shown on the console landing page."""

from datetime import datetime
from enum import Enum
from typing import Optional

from admin_console.models.common import UpstreamModel


class Trend(str, Enum):
    UP = "up"
    STABLE = "stable"


class GrowthCount(UpstreamModel):
    total: int = 0
    new_this_week: int = 0
    new_this_month: int = 0

    @property
    def trend(self) -> Trend:
        if self.new_this_week > 0 or self.new_this_month > 0:
            return Trend.UP
        return Trend.STABLE


class ActiveCount(UpstreamModel):
    active: int = 0


class PlatformOverview(UpstreamModel):
    tenants: GrowthCount
    users: GrowthCount
    applications: ActiveCount
    licenses: ActiveCount
    cached_at: Optional[datetime] = None
