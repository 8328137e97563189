"""Tenant edit screen: validation, ordered multi-call save, partial failures."""

import copy

import httpx
import pytest

from admin_console.features.tenants.service import PartialSaveError, plan_tenant_edit, save_tenant_edit
from admin_console.models.tenant import TenantEditRequest
from admin_console.tests.mocks import address_json, contact_json, tenant_json


def _seed(upstream):
    upstream.json("GET", "/tenants/1", {"data": {"tenant": tenant_json(1), "metrics": {"totalUsers": 3, "activeUsers": 2}}})
    upstream.json("GET", "/tenants/1/addresses", {"data": [address_json(11), address_json(12, city="Rio", isPrimary=False)]})
    upstream.json("GET", "/tenants/1/contacts", {"data": [contact_json(21)]})


def _seed_writes(upstream):
    upstream.json("PUT", "/tenants/1", {"data": tenant_json(1, name="Acme Holdings")})
    upstream.json("POST", "/tenants/1/addresses", {"data": address_json(13, city="Curitiba")}, status=201)
    upstream.json("PUT", "/tenants/1/addresses/12", {"data": address_json(12, city="Niteroi")})
    upstream.on("DELETE", "/tenants/1/addresses/11", (204, None))
    upstream.json("POST", "/tenants/1/contacts", {"data": contact_json(22, fullName="Joao")}, status=201)
    upstream.on("DELETE", "/tenants/1/contacts/21", (204, None))


def _edited(snapshot):
    current = copy.deepcopy(snapshot)
    current["core"]["name"] = "Acme Holdings"
    current["addresses"] = [
        {**snapshot["addresses"][1], "city": "Niteroi"},
        {"id": "tmp-1", "type": "BILLING", "line1": "Av. B, 5", "city": "Curitiba", "country_code": "BR"},
    ]
    current["contacts"] = [{"type": "BILLING", "full_name": "Joao", "email": "joao@acme.test"}]
    return current


def test_edit_state_is_loaded_concurrently(client, upstream, auth_headers):
    _seed(upstream)
    resp = client.get("/v1/tenants/1/edit", headers=auth_headers)
    assert resp.status_code == 200
    state = resp.json()
    assert state["core"] == {"name": "Acme Corp", "status": "active", "description": None}
    assert [a["id"] for a in state["addresses"]] == [11, 12]
    assert upstream.calls_to("GET", "/tenants/1/addresses")[0].params == {"active": "true"}


def test_save_issues_calls_in_order(client, upstream, auth_headers, notes):
    _seed(upstream)
    _seed_writes(upstream)
    snapshot = client.get("/v1/tenants/1/edit", headers=auth_headers).json()

    resp = client.put(
        "/v1/tenants/1/edit",
        json={"snapshot": snapshot, "current": _edited(snapshot)},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert upstream.mutations == [
        ("PUT", "/tenants/1"),
        ("POST", "/tenants/1/addresses"),
        ("PUT", "/tenants/1/addresses/12"),
        ("DELETE", "/tenants/1/addresses/11"),
        ("POST", "/tenants/1/contacts"),
        ("DELETE", "/tenants/1/contacts/21"),
    ]
    report = resp.json()["report"]
    assert report["calls"] == 6
    assert report["addresses_created"] == 1
    assert report["contacts_deleted"] == 1

    created = upstream.calls_to("POST", "/tenants/1/addresses")[0].body
    assert "id" not in created
    assert created["countryCode"] == "BR"
    assert upstream.calls_to("PUT", "/tenants/1")[0].body == {"name": "Acme Holdings", "status": "active"}
    assert notes() == [("success", "Tenant updated successfully")]


def test_unchanged_form_makes_no_calls(client, upstream, auth_headers):
    _seed(upstream)
    snapshot = client.get("/v1/tenants/1/edit", headers=auth_headers).json()
    resp = client.put("/v1/tenants/1/edit", json={"snapshot": snapshot, "current": snapshot}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["report"]["calls"] == 0
    assert upstream.mutations == []


def test_partial_failure_reports_progress(client, upstream, auth_headers, notes):
    _seed(upstream)
    _seed_writes(upstream)
    upstream.json("PUT", "/tenants/1/addresses/12", {"message": "db down"}, status=500)
    snapshot = client.get("/v1/tenants/1/edit", headers=auth_headers).json()

    resp = client.put(
        "/v1/tenants/1/edit",
        json={"snapshot": snapshot, "current": _edited(snapshot)},
        headers=auth_headers,
    )
    assert resp.status_code == 502
    error = resp.json()["error"]
    assert error["code"] == "server"
    assert error["message"] == "Server error occurred. Please try again later."
    assert error["details"]["completed"] == 2
    assert error["details"]["total"] == 6
    assert error["details"]["failed_step"] == "addresses"
    # nothing after the failed call is attempted, nothing is rolled back
    assert upstream.mutations[-1] == ("PUT", "/tenants/1/addresses/12")
    assert len(upstream.mutations) == 3
    assert notes() == [("error", "Server error occurred. Please try again later.")]


def test_conflict_on_core_update(client, upstream, auth_headers):
    _seed(upstream)
    upstream.json("PUT", "/tenants/1", {"message": "stale"}, status=409)
    snapshot = client.get("/v1/tenants/1/edit", headers=auth_headers).json()

    resp = client.put(
        "/v1/tenants/1/edit",
        json={"snapshot": snapshot, "current": _edited(snapshot)},
        headers=auth_headers,
    )
    assert resp.status_code == 409
    error = resp.json()["error"]
    assert error["code"] == "conflict"
    assert error["message"] == "Conflict detected. Please refresh and try again."
    assert error["details"]["completed"] == 0


def test_validation_blocks_save(client, upstream, auth_headers):
    _seed(upstream)
    snapshot = client.get("/v1/tenants/1/edit", headers=auth_headers).json()
    current = copy.deepcopy(snapshot)
    current["core"]["name"] = "Ac"
    current["addresses"] = []
    current["contacts"] = [{"full_name": "", "email": "not-an-email"}]

    resp = client.put("/v1/tenants/1/edit", json={"snapshot": snapshot, "current": current}, headers=auth_headers)
    assert resp.status_code == 400
    field_errors = resp.json()["error"]["field_errors"]
    assert field_errors["name"] == "Tenant name must be at least 3 characters"
    assert field_errors["addresses"] == "At least one address is required"
    assert field_errors["contact_errors"]["temp-0"] == {
        "full_name": "Contact name is required",
        "email": "Invalid email format",
    }
    assert upstream.mutations == []


def test_address_errors_keyed_by_id(client, upstream, auth_headers):
    _seed(upstream)
    snapshot = client.get("/v1/tenants/1/edit", headers=auth_headers).json()
    current = copy.deepcopy(snapshot)
    current["addresses"][0]["city"] = " "
    resp = client.put("/v1/tenants/1/edit", json={"snapshot": snapshot, "current": current}, headers=auth_headers)
    assert resp.json()["error"]["field_errors"]["address_errors"] == {"11": {"city": "City is required"}}


@pytest.mark.asyncio
async def test_network_failure_mid_save(api, upstream):
    upstream.json("PUT", "/tenants/1", {"data": tenant_json(1, name="Acme Holdings")})
    upstream.on("POST", "/tenants/1/addresses", httpx.ConnectError("refused"))
    edit = TenantEditRequest.model_validate(
        {
            "snapshot": {"core": {"name": "Acme Corp"}, "addresses": [address_json(11)]},
            "current": {
                "core": {"name": "Acme Holdings"},
                "addresses": [address_json(11), {"line1": "x", "city": "y", "countryCode": "BR"}],
            },
        }
    )
    assert plan_tenant_edit(edit).total_calls == 2

    with pytest.raises(PartialSaveError) as exc_info:
        await save_tenant_edit(api, 1, edit)
    err = exc_info.value
    assert err.code == "network"
    assert err.status_code == 503
    assert err.details["completed"] == 1
