import httpx
import pytest

from admin_console.core.errors import UpstreamError, UpstreamUnavailableError
from admin_console.core.logging import request_id_ctx_var
from admin_console.services.upstream import (
    BAD_UPSTREAM_RESPONSE,
    parse_error_body,
    unwrap,
    unwrap_object,
    unwrap_pagination,
)


def test_unwrap_envelope_order():
    assert unwrap({"tenants": [1]}, "tenants") == [1]
    assert unwrap({"data": {"tenants": [2]}}, "tenants") == [2]
    assert unwrap({"data": {"data": {"tenants": [3]}}}, "tenants") == [3]
    assert unwrap({"data": [4]}, "tenants") == [4]
    # top-level key wins over nested ones
    assert unwrap({"tenants": [1], "data": {"tenants": [2]}}, "tenants") == [1]


def test_unwrap_missing_resource_is_bad_gateway():
    with pytest.raises(UpstreamError) as exc_info:
        unwrap({"data": {"other": 1}}, "tenants")
    assert exc_info.value.status_code == 502
    assert exc_info.value.upstream_code == BAD_UPSTREAM_RESPONSE


def test_unwrap_object_accepts_bare_objects():
    assert unwrap_object({"data": {"id": 1, "name": "x"}}, "tenant") == {"id": 1, "name": "x"}
    assert unwrap_object({"id": 2}, "tenant") == {"id": 2}
    assert unwrap_object({"data": {"data": {"id": 3}}}, "tenant") == {"id": 3}


def test_unwrap_pagination_locations():
    block = {"total": 1, "limit": 20, "offset": 0, "hasMore": False}
    assert unwrap_pagination({"pagination": block}) == block
    assert unwrap_pagination({"data": {"pagination": block}}) == block
    assert unwrap_pagination({"meta": {"pagination": block}}) == block
    assert unwrap_pagination({"data": []}) is None


def test_parse_error_body_shapes():
    assert parse_error_body({"code": "X", "message": "m", "details": {"reason": "R"}}) == ("X", "R", "m", {"reason": "R"})
    nested = {"error": {"code": "Y", "message": "n", "details": {"reason": "S"}}}
    assert parse_error_body(nested) == ("Y", "S", "n", {"reason": "S"})
    assert parse_error_body({"error": "plain"}) == (None, None, "plain", {})
    assert parse_error_body("oops") == (None, None, None, {})


@pytest.mark.asyncio
async def test_forwards_token_request_id_and_prefix(api, upstream):
    upstream.json("GET", "/tenants", {"tenants": []})
    token = request_id_ctx_var.set("rid-42")
    try:
        await api.get("/tenants", params={"search": "", "status": None, "active": True, "limit": 20})
    finally:
        request_id_ctx_var.reset(token)

    call = upstream.calls[0]
    assert call.path == "/tenants"
    assert call.headers["authorization"] == "Bearer tok-admin-1"
    assert call.headers["x-request-id"] == "rid-42"
    assert call.params == {"active": "true", "limit": "20"}


@pytest.mark.asyncio
async def test_non_2xx_raises_upstream_error(api, upstream):
    upstream.json(
        "POST",
        "/applications/10/pricing",
        {"code": "PRICING_OVERLAP", "message": "overlap", "details": {"conflict": {"existingRange": "a - b"}}},
        status=422,
    )
    with pytest.raises(UpstreamError) as exc_info:
        await api.post("/applications/10/pricing", json={})
    err = exc_info.value
    assert err.upstream_status == 422
    assert err.status_code == 422
    assert err.upstream_code == "PRICING_OVERLAP"
    assert err.details["conflict"]["existingRange"] == "a - b"
    assert err.path == "/internal/api/v1/applications/10/pricing"


@pytest.mark.asyncio
async def test_server_error_becomes_gateway_error(api, upstream):
    upstream.json("GET", "/tenants", {"message": "kaput"}, status=500)
    with pytest.raises(UpstreamError) as exc_info:
        await api.get("/tenants")
    assert exc_info.value.upstream_status == 500
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_transport_failure_is_unavailable(api, upstream):
    upstream.on("GET", "/tenants", httpx.ConnectError("refused"))
    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await api.get("/tenants")
    assert exc_info.value.status_code == 503
    assert exc_info.value.details == {"kind": "network"}


@pytest.mark.asyncio
async def test_empty_body_decodes_to_dict(api, upstream):
    upstream.on("DELETE", "/tenants/1/addresses/2", (204, None))
    assert await api.delete("/tenants/1/addresses/2") == {}


@pytest.mark.asyncio
async def test_probe(api, upstream):
    upstream.json("GET", "/health", {"status": "ok"})
    ok, bucket = await api.probe()
    assert ok is True
    assert bucket

    upstream.on("GET", "/health", httpx.ConnectError("refused"))
    ok, _ = await api.probe()
    assert ok is False
