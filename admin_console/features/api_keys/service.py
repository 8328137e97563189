"""API keys for external integrations (N8N, Zapier and similar)."""

from typing import List, Optional, Tuple

from admin_console.core.errors import FormValidationError
from admin_console.core.logging import log_event
from admin_console.models.api_key import DEFAULT_SCOPE, ApiKey, ApiKeyForm, ApiKeyUpdate
from admin_console.models.common import MutationResult
from admin_console.services.upstream import UpstreamClient, unwrap, unwrap_meta, unwrap_object

VISIBLE_KEY_CHARS = 12


def mask_key(key: str) -> str:
    """Show the first characters of a plain key and mask the rest."""
    if len(key) <= VISIBLE_KEY_CHARS:
        return key
    return key[:VISIBLE_KEY_CHARS] + "•" * (len(key) - VISIBLE_KEY_CHARS)


async def list_api_keys(
    api: UpstreamClient,
    *,
    scope: Optional[str] = None,
    include_inactive: bool = False,
) -> List[ApiKey]:
    params = {"scope": scope, "includeInactive": True if include_inactive else None}
    payload = await api.get("/api-keys", params=params)
    return [ApiKey.model_validate(item) for item in unwrap(payload, "apiKeys")]


async def get_api_key(api: UpstreamClient, key_id: str) -> ApiKey:
    payload = await api.get(f"/api-keys/{key_id}")
    return ApiKey.model_validate(unwrap_object(payload, "apiKey"))


async def create_api_key(api: UpstreamClient, form: ApiKeyForm) -> Tuple[ApiKey, MutationResult]:
    """Create a key. The returned ApiKey carries the plain key, which upstream never returns again."""
    name = form.name.strip()
    if not name:
        raise FormValidationError({"name": "Name is required"})

    body = form.model_copy(update={"name": name, "scope": form.scope.strip() or DEFAULT_SCOPE})
    payload = await api.post("/api-keys", json=body.to_upstream())
    created = ApiKey.model_validate(unwrap_object(payload, "apiKey"))
    log_event("info", "api_key.created", event_type="api_key", extra={"api_key_id": created.id, "scope": created.scope})
    return created, MutationResult.model_validate(unwrap_meta(payload))


async def update_api_key(api: UpstreamClient, key_id: str, update: ApiKeyUpdate) -> ApiKey:
    if update.name is not None:
        if not update.name.strip():
            raise FormValidationError({"name": "Name is required"})
        update = update.model_copy(update={"name": update.name.strip()})
    payload = await api.put(f"/api-keys/{key_id}", json=update.to_upstream())
    return ApiKey.model_validate(unwrap_object(payload, "apiKey"))


async def revoke_api_key(api: UpstreamClient, key_id: str) -> MutationResult:
    payload = await api.delete(f"/api-keys/{key_id}")
    log_event("info", "api_key.revoked", event_type="api_key", extra={"api_key_id": key_id})
    return MutationResult.model_validate(unwrap_meta(payload))
