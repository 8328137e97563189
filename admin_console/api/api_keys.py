"""API keys for external integrations."""

from typing import Optional

from fastapi import APIRouter, Depends

from admin_console.core.auth import get_notifier, get_upstream
from admin_console.core.state import SessionNotifier
from admin_console.features.api_keys import service as api_keys
from admin_console.models.api_key import ApiKey, ApiKeyForm, ApiKeyUpdate
from admin_console.services.upstream import UpstreamClient

router = APIRouter(prefix="/v1/api-keys")


def _key_view(key: ApiKey) -> dict:
    data = key.model_dump(mode="json", exclude={"key"})
    data["display_key"] = api_keys.mask_key(key.key) if key.key else f"{key.key_prefix or ''}…"
    return data


@router.get("")
async def list_api_keys(
    scope: Optional[str] = None,
    include_inactive: bool = False,
    api: UpstreamClient = Depends(get_upstream),
):
    keys = await api_keys.list_api_keys(api, scope=scope, include_inactive=include_inactive)
    return {"items": [_key_view(key) for key in keys]}


@router.get("/{key_id}")
async def get_api_key(key_id: str, api: UpstreamClient = Depends(get_upstream)):
    return _key_view(await api_keys.get_api_key(api, key_id))


@router.post("", status_code=201)
async def create_api_key(
    form: ApiKeyForm,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    """The plain key is in this response only; it cannot be fetched again."""
    created, result = await api_keys.create_api_key(api, form)
    notifier.success(result.message or "API key created successfully")
    return {**_key_view(created), "key": created.key}


@router.put("/{key_id}")
async def update_api_key(
    key_id: str,
    update: ApiKeyUpdate,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    key = await api_keys.update_api_key(api, key_id, update)
    notifier.success("API key updated successfully")
    return _key_view(key)


@router.delete("/{key_id}")
async def revoke_api_key(
    key_id: str,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    result = await api_keys.revoke_api_key(api, key_id)
    notifier.success(result.message or "API key revoked successfully")
    return {"status": "ok", **result.model_dump(mode="json")}
