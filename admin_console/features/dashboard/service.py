"""Platform overview for the console landing page."""

from typing import Any, Dict, List

from admin_console.core.logging import log_event
from admin_console.models.metrics import PlatformOverview
from admin_console.services.upstream import UpstreamClient, unwrap, unwrap_meta


async def get_platform_overview(api: UpstreamClient) -> PlatformOverview:
    """Aggregated tenant, user, application and license counts.

    The backend caches the aggregate for a minute; `cached_at` says when it
    was computed.
    """
    payload = await api.get("/metrics/overview")
    counters = {key: unwrap(payload, key) for key in ("tenants", "users", "applications", "licenses")}
    overview = PlatformOverview.model_validate(
        {**counters, "cachedAt": unwrap_meta(payload).get("cachedAt")}
    )
    log_event(
        "info",
        "dashboard.overview",
        event_type="metrics",
        extra={"tenants": overview.tenants.total, "users": overview.users.total},
    )
    return overview


def _growth_subtitle(new_this_week: int, new_this_month: int) -> str:
    return f"{new_this_week} new this week, {new_this_month} this month"


def overview_cards(overview: PlatformOverview) -> List[Dict[str, Any]]:
    return [
        {
            "key": "tenants",
            "title": "Total Tenants",
            "value": overview.tenants.total,
            "subtitle": _growth_subtitle(overview.tenants.new_this_week, overview.tenants.new_this_month),
            "trend": overview.tenants.trend.value,
        },
        {
            "key": "users",
            "title": "Total Users",
            "value": overview.users.total,
            "subtitle": _growth_subtitle(overview.users.new_this_week, overview.users.new_this_month),
            "trend": overview.users.trend.value,
        },
        {
            "key": "applications",
            "title": "Active Applications",
            "value": overview.applications.active,
            "subtitle": "Applications currently available",
            "trend": "stable",
        },
        {
            "key": "licenses",
            "title": "Active Licenses",
            "value": overview.licenses.active,
            "subtitle": "Total active tenant licenses",
            "trend": "stable",
        },
    ]
