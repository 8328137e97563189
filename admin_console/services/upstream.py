"""
Upstream platform API client.

All console data lives behind the platform's internal REST API. This module
owns the single shared httpx.AsyncClient, forwards the admin's bearer token
and the current request id, and turns non-2xx answers into UpstreamError.

The backend wraps resources inconsistently ({"tenant": ...}, {"data": {...}},
{"data": {"data": {...}}}, {"data": [...]}); `unwrap` hides that.
"""

import time
from typing import Any, Dict, Optional, Tuple

import httpx

from admin_console.core.config import Settings, settings
from admin_console.core.errors import UpstreamError, UpstreamUnavailableError
from admin_console.core.logging import get_request_id, latency_bucket_ms, log_event

BAD_UPSTREAM_RESPONSE = "BAD_UPSTREAM_RESPONSE"


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    cleaned: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned


def _decode(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {"message": response.text}


def parse_error_body(body: Any) -> Tuple[Optional[str], Optional[str], Optional[str], Dict[str, Any]]:
    """Pull (code, reason, message, details) out of a backend error body.

    The backend uses both flat ({"code", "message", "details"}) and nested
    ({"error": {"code", "message", "details"}}) shapes, and sometimes a bare
    string under "error".
    """
    if not isinstance(body, dict):
        return None, None, None, {}

    nested = body.get("error") if isinstance(body.get("error"), dict) else {}
    code = body.get("code") or nested.get("code")

    details = body.get("details")
    if not isinstance(details, dict):
        details = nested.get("details") if isinstance(nested.get("details"), dict) else {}
    reason = details.get("reason")

    message = body.get("message") or nested.get("message")
    if not message and isinstance(body.get("error"), str):
        message = body["error"]
    return code, reason, message, details


def _bad_response(key: str) -> UpstreamError:
    return UpstreamError(
        f"Unexpected response from the platform API: missing '{key}'",
        upstream_status=502,
        code=BAD_UPSTREAM_RESPONSE,
    )


def unwrap(payload: Any, key: str) -> Any:
    """Extract `key` from whichever envelope the backend used."""
    if isinstance(payload, dict):
        if key in payload:
            return payload[key]
        data = payload.get("data")
        if isinstance(data, dict):
            if key in data:
                return data[key]
            inner = data.get("data")
            if isinstance(inner, dict) and key in inner:
                return inner[key]
        if isinstance(data, list):
            return data
    raise _bad_response(key)


def unwrap_object(payload: Any, key: str) -> Dict[str, Any]:
    """Like unwrap, but single-resource GETs may also return the bare object."""
    if isinstance(payload, dict):
        if key in payload:
            return payload[key]
        data = payload.get("data")
        if isinstance(data, dict):
            if key in data:
                return data[key]
            inner = data.get("data")
            if isinstance(inner, dict):
                return inner.get(key, inner)
            if "id" in data:
                return data
        if "id" in payload:
            return payload
    raise _bad_response(key)


def unwrap_pagination(payload: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return None
    for holder in (payload, payload.get("data"), payload.get("meta")):
        if isinstance(holder, dict) and isinstance(holder.get("pagination"), dict):
            return holder["pagination"]
    return None


def unwrap_meta(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, dict) and isinstance(payload.get("meta"), dict):
        return payload["meta"]
    return {}


class UpstreamClient:
    """Thin async wrapper over the platform API.

    A client bound to a session token is obtained with `with_token`; the
    bound copy shares the underlying connection pool.
    """

    def __init__(
        self,
        settings_obj: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http: Optional[httpx.AsyncClient] = None,
        token: Optional[str] = None,
    ):
        cfg = settings_obj or settings
        self.settings = cfg
        self.prefix = cfg.UPSTREAM_API_PREFIX.rstrip("/")
        self.token = token
        self._http = http or httpx.AsyncClient(
            base_url=cfg.UPSTREAM_API_URL,
            timeout=cfg.UPSTREAM_TIMEOUT_SECONDS,
            transport=transport,
        )

    def with_token(self, token: Optional[str]) -> "UpstreamClient":
        return UpstreamClient(self.settings, http=self._http, token=token)

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        rid = get_request_id()
        if rid:
            headers["x-request-id"] = rid
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        prefixed: bool = True,
    ) -> Any:
        url = f"{self.prefix}{path}" if prefixed else path
        start = time.perf_counter()
        try:
            response = await self._http.request(
                method,
                url,
                params=_clean_params(params),
                json=json,
                headers=self._headers(),
            )
        except httpx.TransportError as exc:
            log_event(
                "error",
                "upstream.unavailable",
                event_type="upstream",
                error_code="upstream_unavailable",
                extra={"method": method, "path": url, "error": exc.__class__.__name__},
            )
            raise UpstreamUnavailableError(
                "Could not reach the platform API.",
                details={"kind": "network"},
            ) from exc

        bucket = latency_bucket_ms((time.perf_counter() - start) * 1000)
        body = _decode(response)

        if response.is_success:
            log_event(
                "info",
                "upstream.request",
                event_type="upstream",
                extra={"method": method, "path": url, "status": response.status_code, "latency_bucket": bucket},
            )
            return body

        code, reason, message, details = parse_error_body(body)
        log_event(
            "warning" if response.status_code < 500 else "error",
            "upstream.error",
            event_type="upstream",
            error_code=code or reason,
            extra={"method": method, "path": url, "status": response.status_code, "latency_bucket": bucket},
        )
        raise UpstreamError(
            message or f"Platform API request failed ({response.status_code})",
            upstream_status=response.status_code,
            code=code,
            reason=reason,
            path=url,
            details=details,
        )

    async def get(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json if json is not None else {})

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json if json is not None else {})

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def probe(self) -> Tuple[bool, str]:
        """Hit the upstream health endpoint. Returns (ok, latency bucket)."""
        start = time.perf_counter()
        try:
            response = await self._http.get(self.settings.UPSTREAM_HEALTH_PATH, headers=self._headers())
        except httpx.TransportError:
            return False, latency_bucket_ms((time.perf_counter() - start) * 1000)
        return response.is_success, latency_bucket_ms((time.perf_counter() - start) * 1000)
