"""License activation, seat limits and per-user access."""

from admin_console.tests.mocks import application_json, license_json

SEATS = "/tenants/1/applications/crm"
ACCESS = "/tenants/1/users/5/applications/crm"


def test_list_licenses_derives_available_seats(client, upstream, auth_headers):
    upstream.json("GET", "/tenants/1/applications", {"data": [license_json("crm"), license_json("chat", userLimit=None)]})
    resp = client.get("/v1/tenants/1/licenses", headers=auth_headers)
    assert resp.status_code == 200
    crm, chat = resp.json()["items"]
    assert crm["application_slug"] == "crm"
    assert crm["seats_available"] == 2
    assert crm["status_badge"] == "success"
    assert chat["user_limit"] is None
    assert chat["seats_available"] is None


def test_activatable_excludes_licensed_apps(client, upstream, auth_headers):
    upstream.json("GET", "/applications", {"data": [application_json(1, "crm"), application_json(2, "erp"), application_json(3, "chat")]})
    upstream.json("GET", "/tenants/1/applications", {"data": [license_json("crm")]})

    resp = client.get("/v1/tenants/1/licenses/activatable", headers=auth_headers)
    assert [a["slug"] for a in resp.json()["items"]] == ["erp", "chat"]

    resp = client.get("/v1/tenants/1/licenses/activatable", params={"search": "ER"}, headers=auth_headers)
    assert [a["slug"] for a in resp.json()["items"]] == ["erp"]


def test_activate_license(client, upstream, auth_headers, notes):
    upstream.json(
        "POST",
        "/tenants/1/applications/erp/activate",
        {"data": {"license": {"applicationSlug": "erp", "applicationName": "ERP", "status": "trial", "userLimit": 10, "seatsUsed": 0}}},
        status=201,
    )
    resp = client.post(
        "/v1/tenants/1/licenses/erp/activate",
        json={"user_limit": 10, "status": "trial"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "trial"
    assert body["seats_available"] == 10
    assert upstream.calls_to("POST", "/tenants/1/applications/erp/activate")[0].body == {"userLimit": 10, "status": "trial"}
    assert notes() == [("success", "Application 'ERP' activated successfully")]


def test_activate_rejects_zero_seats_locally(client, upstream, auth_headers):
    resp = client.post("/v1/tenants/1/licenses/erp/activate", json={"user_limit": 0}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["field_errors"] == {"user_limit": "Seat limit must be at least 1"}
    assert upstream.mutations == []


def test_activate_already_licensed_is_inline(client, upstream, auth_headers, notes):
    upstream.json(
        "POST",
        "/tenants/1/applications/crm/activate",
        {"error": {"code": "VALIDATION_ERROR", "message": "nope", "details": {"reason": "ALREADY_LICENSED"}}},
        status=422,
    )
    resp = client.post("/v1/tenants/1/licenses/crm/activate", json={}, headers=auth_headers)
    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["code"] == "already_licensed"
    assert error["field_errors"] == {"application_slug": "This application is already licensed for this tenant."}
    assert notes() == []


def test_adjust_below_used_is_blocked_locally(client, upstream, auth_headers):
    upstream.json("GET", "/tenants/1/applications", {"data": [license_json("crm", seatsUsed=3)]})
    resp = client.put("/v1/tenants/1/licenses/crm/seats", json={"user_limit": 2}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["field_errors"] == {"user_limit": "Cannot reduce limit below 3 seats currently in use."}
    assert upstream.mutations == []


def test_adjust_backend_total_lt_used(client, upstream, auth_headers):
    upstream.json("GET", "/tenants/1/applications", {"data": [license_json("crm", seatsUsed=3)]})
    upstream.json(
        "PUT",
        f"{SEATS}/adjust",
        {"code": "TOTAL_LT_USED", "details": {"reason": "TOTAL_LT_USED", "seatsUsed": 5, "requestedLimit": 4}},
        status=422,
    )
    resp = client.put("/v1/tenants/1/licenses/crm/seats", json={"user_limit": 4}, headers=auth_headers)
    assert resp.status_code == 422
    assert resp.json()["error"]["field_errors"] == {"user_limit": "Cannot reduce limit to 4. Currently using 5 seats."}


def test_adjust_seats(client, upstream, auth_headers, notes):
    upstream.json("GET", "/tenants/1/applications", {"data": [license_json("crm", seatsUsed=3)]})
    upstream.json("PUT", f"{SEATS}/adjust", {"data": {"license": license_json("crm", userLimit=8, seatsUsed=3)}})
    resp = client.put("/v1/tenants/1/licenses/crm/seats", json={"user_limit": 8}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["seats_available"] == 5
    assert upstream.calls_to("PUT", f"{SEATS}/adjust")[0].body == {"userLimit": 8}
    assert notes() == [("success", "Seat limit updated successfully")]


def test_list_app_users(client, upstream, auth_headers):
    upstream.json(
        "GET",
        f"{SEATS}/users",
        {
            "data": {
                "usage": {"used": 3, "total": 5, "available": 2},
                "users": [{"id": 5, "name": "Ana", "email": "ana@acme.test", "granted": True, "roleInApp": "manager"}],
            }
        },
    )
    resp = client.get("/v1/tenants/1/licenses/crm/users", params={"q": "ana"}, headers=auth_headers)
    body = resp.json()
    assert body["usage"] == {"used": 3, "total": 5, "available": 2}
    assert body["users"][0]["role_in_app"] == "manager"
    assert upstream.calls_to("GET", f"{SEATS}/users")[0].params == {"q": "ana", "limit": "20"}


def test_grant_updates_local_counters(client, upstream, auth_headers, notes):
    upstream.json("POST", f"{ACCESS}/grant", {"data": {"accessId": 99}})
    resp = client.post(
        "/v1/tenants/1/users/5/applications/crm/grant",
        json={"usage": {"used": 3, "total": 5, "available": 2}},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["usage"] == {"used": 4, "total": 5, "available": 1}
    assert notes() == [("success", "Access granted successfully")]


def test_grant_without_free_seat_is_blocked(client, upstream, auth_headers):
    resp = client.post(
        "/v1/tenants/1/users/5/applications/crm/grant",
        json={"usage": {"used": 5, "total": 5, "available": 0}},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["field_errors"] == {"user_id": "No seats available. Adjust the seat limit first."}
    assert upstream.mutations == []


def test_grant_backend_no_seats(client, upstream, auth_headers):
    upstream.json("POST", f"{ACCESS}/grant", {"code": "NO_SEATS_AVAILABLE", "message": "full"}, status=422)
    resp = client.post("/v1/tenants/1/users/5/applications/crm/grant", headers=auth_headers)
    assert resp.status_code == 422
    assert resp.json()["error"]["scope"] == "inline"


def test_revoke_and_reactivate(client, upstream, auth_headers):
    upstream.json("POST", f"{ACCESS}/revoke", {"data": {}})
    upstream.json("PUT", f"{ACCESS}/reactivate", {"data": {}})

    resp = client.post(
        "/v1/tenants/1/users/5/applications/crm/revoke",
        json={"usage": {"used": 3, "total": 5, "available": 2}},
        headers=auth_headers,
    )
    assert resp.json()["usage"] == {"used": 2, "total": 5, "available": 3}

    resp = client.post("/v1/tenants/1/users/5/applications/crm/revoke", headers=auth_headers)
    assert resp.json()["usage"] is None

    resp = client.put("/v1/tenants/1/users/5/applications/crm/reactivate", json={"usage": {"used": 2}}, headers=auth_headers)
    assert resp.json()["usage"] == {"used": 3, "total": None, "available": None}


def test_update_role_in_app(client, upstream, auth_headers):
    upstream.json("PUT", f"{ACCESS}/role", {"data": {"roleInApp": "admin"}})
    resp = client.put("/v1/tenants/1/users/5/applications/crm/role", json={"role_in_app": "admin"}, headers=auth_headers)
    assert resp.json() == {"status": "ok", "role_in_app": "admin"}
    assert upstream.calls_to("PUT", f"{ACCESS}/role")[0].body == {"roleInApp": "admin"}
