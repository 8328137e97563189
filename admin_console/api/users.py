"""Platform-wide user list and tenant-scoped user management."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from admin_console.core.auth import get_notifier, get_upstream
from admin_console.core.config import settings
from admin_console.core.state import SessionNotifier
from admin_console.features.users import service as users
from admin_console.models.common import UpstreamModel
from admin_console.models.user import CreateUserRequest, UpdateUserRequest, User, UserStatusFilter
from admin_console.services.upstream import UpstreamClient

router = APIRouter(prefix="/v1")


class CreateUserIn(CreateUserRequest):
    tenant_id: Optional[int] = None


class ResetPasswordIn(UpstreamModel):
    password: str


def _user_view(user: User) -> dict:
    return {
        **user.model_dump(mode="json"),
        "full_name": user.full_name,
        "role_label": user.role.label,
        "status_badge": user.status.badge,
    }


async def _list(api: UpstreamClient, tenant_id: Optional[int], search, status, page, limit) -> dict:
    result = await users.list_users(api, tenant_id=tenant_id, search=search, status=status, page=page, limit=limit)
    data = result.model_dump(mode="json")
    data["items"] = [_user_view(user) for user in result.items]
    return data


@router.get("/users")
async def list_all_users(
    search: Optional[str] = None,
    status: UserStatusFilter = UserStatusFilter.ALL,
    tenant_id: Optional[int] = None,
    page: Optional[int] = Query(None, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    api: UpstreamClient = Depends(get_upstream),
):
    return await _list(api, tenant_id, search, status, page, limit)


@router.post("/users", status_code=201)
async def create_user(
    req: CreateUserIn,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    """Create a user from the global list, where the tenant is picked in the form."""
    request = CreateUserRequest.model_validate(req.model_dump(exclude={"tenant_id"}))
    user = await users.create_user(api, req.tenant_id, request)
    notifier.success("User created successfully")
    return _user_view(user)


@router.get("/tenants/{tenant_id}/users")
async def list_tenant_users(
    tenant_id: int,
    search: Optional[str] = None,
    status: UserStatusFilter = UserStatusFilter.ALL,
    page: Optional[int] = Query(None, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    api: UpstreamClient = Depends(get_upstream),
):
    return await _list(api, tenant_id, search, status, page, limit)


@router.post("/tenants/{tenant_id}/users", status_code=201)
async def create_tenant_user(
    tenant_id: int,
    req: CreateUserRequest,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    user = await users.create_user(api, tenant_id, req)
    notifier.success("User created successfully")
    return _user_view(user)


@router.get("/tenants/{tenant_id}/users/{user_id}")
async def get_user(tenant_id: int, user_id: int, api: UpstreamClient = Depends(get_upstream)):
    return _user_view(await users.get_user(api, user_id, tenant_id=tenant_id))


@router.put("/tenants/{tenant_id}/users/{user_id}")
async def update_user(
    tenant_id: int,
    user_id: int,
    req: UpdateUserRequest,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    user = await users.update_user(api, tenant_id, user_id, req)
    notifier.success("User updated successfully")
    return _user_view(user)


@router.delete("/tenants/{tenant_id}/users/{user_id}")
async def deactivate_user(
    tenant_id: int,
    user_id: int,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    result = await users.deactivate_user(api, tenant_id, user_id)
    notifier.success(result.message or "User deactivated successfully")
    return {"status": "ok", **result.model_dump(mode="json")}


@router.post("/tenants/{tenant_id}/users/{user_id}/activate")
async def activate_user(
    tenant_id: int,
    user_id: int,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    user = await users.activate_user(api, tenant_id, user_id)
    notifier.success("User activated successfully")
    return _user_view(user)


@router.post("/tenants/{tenant_id}/users/{user_id}/reset-password")
async def reset_password(
    tenant_id: int,
    user_id: int,
    req: ResetPasswordIn,
    api: UpstreamClient = Depends(get_upstream),
    notifier: SessionNotifier = Depends(get_notifier),
):
    result = await users.reset_password(api, tenant_id, user_id, req.password)
    notifier.success(result.message or "Password reset successfully")
    return {"status": "ok", **result.model_dump(mode="json")}
