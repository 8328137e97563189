"""Platform-wide and tenant-scoped user management."""

from typing import Any, Dict, Optional

from pydantic.alias_generators import to_snake

from admin_console.core.errors import FormValidationError, UpstreamError
from admin_console.core.logging import log_event
from admin_console.features.tenants.forms import is_valid_email
from admin_console.models.common import MutationResult, Page, build_page, page_to_offset
from admin_console.models.user import (
    CreateUserRequest,
    UpdateUserRequest,
    User,
    UserStatus,
    UserStatusFilter,
)
from admin_console.services.upstream import UpstreamClient, unwrap, unwrap_meta, unwrap_object, unwrap_pagination

PASSWORD_MIN_LENGTH = 8


def _user_path(tenant_id: int, user_id: Optional[int] = None) -> str:
    base = f"/tenants/{tenant_id}/users"
    return f"{base}/{user_id}" if user_id is not None else base


def _status_param(status: UserStatusFilter) -> Optional[str]:
    return None if status == UserStatusFilter.ALL else status.value


async def list_users(
    api: UpstreamClient,
    *,
    tenant_id: Optional[int] = None,
    search: Optional[str] = None,
    status: UserStatusFilter = UserStatusFilter.ALL,
    page: Optional[int] = None,
    limit: int = 20,
    offset: Optional[int] = None,
) -> Page:
    """All users, or one tenant's users when `tenant_id` is given."""
    start = page_to_offset(page, limit, offset)
    params = {"search": search, "status": _status_param(status), "limit": limit, "offset": start}
    if tenant_id is not None:
        payload = await api.get(_user_path(tenant_id), params=params)
    else:
        payload = await api.get("/users", params=params)
    users = [User.model_validate(item) for item in unwrap(payload, "users")]
    return build_page(users, unwrap_pagination(payload), limit=limit, offset=start)


async def get_user(api: UpstreamClient, user_id: int, tenant_id: Optional[int] = None) -> User:
    path = _user_path(tenant_id, user_id) if tenant_id is not None else f"/users/{user_id}"
    payload = await api.get(path)
    return User.model_validate(unwrap_object(payload, "user"))


def validate_new_user(tenant_id: Optional[int], request: CreateUserRequest) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if tenant_id is None:
        errors["tenant_id"] = "Tenant is required"

    email = request.email.strip()
    if not email:
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Invalid email format"

    if not request.first_name.strip():
        errors["first_name"] = "First name is required"

    if not request.password.strip():
        errors["password"] = "Password is required"
    elif len(request.password) < PASSWORD_MIN_LENGTH:
        errors["password"] = f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    return errors


DUPLICATE_EMAIL_MESSAGE = "A user with this email already exists"


def create_user_field_errors(exc: UpstreamError) -> Dict[str, str]:
    """Inline errors for a rejected create: duplicate email, or the backend's per-field errors."""
    if exc.upstream_status == 409:
        return {"email": DUPLICATE_EMAIL_MESSAGE}
    if exc.upstream_status == 422:
        raw: Any = exc.details.get("validationErrors")
        if isinstance(raw, dict) and raw:
            return {to_snake(str(key)): str(message) for key, message in raw.items()}
    return {}


async def create_user(api: UpstreamClient, tenant_id: Optional[int], request: CreateUserRequest) -> User:
    errors = validate_new_user(tenant_id, request)
    if errors:
        raise FormValidationError(errors)

    body = {
        "email": request.email.strip().lower(),
        "firstName": request.first_name.strip(),
        "lastName": (request.last_name or "").strip(),
        "role": request.role.value,
        "status": request.status.value,
        "password": request.password,
    }
    try:
        payload = await api.post(_user_path(tenant_id), json=body)
    except UpstreamError as exc:
        field_errors = create_user_field_errors(exc)
        if field_errors:
            raise FormValidationError(field_errors) from exc
        raise
    user = User.model_validate(unwrap_object(payload, "user"))
    log_event("info", "user.created", tenant_id=tenant_id, event_type="user", extra={"user_id": user.id})
    return user


async def update_user(api: UpstreamClient, tenant_id: int, user_id: int, request: UpdateUserRequest) -> User:
    if request.email is not None:
        email = request.email.strip().lower()
        if not is_valid_email(email):
            raise FormValidationError({"email": "Invalid email format"})
        request = request.model_copy(update={"email": email})
    payload = await api.put(_user_path(tenant_id, user_id), json=request.to_upstream())
    log_event("info", "user.updated", tenant_id=tenant_id, event_type="user", extra={"user_id": user_id})
    return User.model_validate(unwrap_object(payload, "user"))


async def deactivate_user(api: UpstreamClient, tenant_id: int, user_id: int) -> MutationResult:
    payload = await api.delete(_user_path(tenant_id, user_id))
    log_event("info", "user.deactivated", tenant_id=tenant_id, event_type="user", extra={"user_id": user_id})
    return MutationResult.model_validate(unwrap_meta(payload))


async def activate_user(api: UpstreamClient, tenant_id: int, user_id: int) -> User:
    return await update_user(api, tenant_id, user_id, UpdateUserRequest(status=UserStatus.ACTIVE))


async def reset_password(api: UpstreamClient, tenant_id: int, user_id: int, new_password: str) -> MutationResult:
    if len(new_password or "") < PASSWORD_MIN_LENGTH:
        raise FormValidationError({"password": f"Password must be at least {PASSWORD_MIN_LENGTH} characters"})
    payload = await api.post(f"{_user_path(tenant_id, user_id)}/reset-password", json={"password": new_password})
    log_event("info", "user.password_reset", tenant_id=tenant_id, event_type="user", extra={"user_id": user_id})
    return MutationResult.model_validate(unwrap_meta(payload))
