import pytest

from admin_console.features.dashboard.service import get_platform_overview
from admin_console.models.metrics import GrowthCount, Trend

OVERVIEW = {
    "success": True,
    "data": {
        "tenants": {"total": 45, "newThisWeek": 3, "newThisMonth": 8},
        "users": {"total": 234, "newThisWeek": 0, "newThisMonth": 0},
        "applications": {"active": 4},
        "licenses": {"active": 67},
    },
    "meta": {"cachedAt": "2024-06-01T12:00:00.000Z", "executionTime": "45ms"},
}


@pytest.mark.parametrize(
    "week, month, trend",
    [(3, 8, Trend.UP), (0, 2, Trend.UP), (0, 0, Trend.STABLE)],
)
def test_growth_trend(week, month, trend):
    assert GrowthCount(total=10, new_this_week=week, new_this_month=month).trend == trend


@pytest.mark.asyncio
async def test_overview_unwraps_data_and_meta(api, upstream):
    upstream.json("GET", "/metrics/overview", OVERVIEW)
    overview = await get_platform_overview(api)
    assert overview.tenants.new_this_month == 8
    assert overview.licenses.active == 67
    assert overview.cached_at.year == 2024


def test_dashboard_cards(client, upstream, auth_headers):
    upstream.json("GET", "/metrics/overview", OVERVIEW)
    resp = client.get("/v1/dashboard", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["tenants"]["total"] == 45
    assert [(c["key"], c["value"], c["trend"]) for c in body["cards"]] == [
        ("tenants", 45, "up"),
        ("users", 234, "stable"),
        ("applications", 4, "stable"),
        ("licenses", 67, "stable"),
    ]
    assert body["cards"][0]["subtitle"] == "3 new this week, 8 this month"


def test_dashboard_requires_session(client):
    assert client.get("/v1/dashboard").status_code == 401


def test_dashboard_failure_is_a_banner(client, upstream, auth_headers, notes):
    upstream.json("GET", "/metrics/overview", {"error": "Internal Server Error", "message": "Failed to calculate platform metrics"}, status=500)
    resp = client.get("/v1/dashboard", headers=auth_headers)
    assert resp.status_code == 502
    assert notes() == [("error", "We're having issues right now. Please try again later.")]
