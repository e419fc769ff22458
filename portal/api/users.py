"""User routes, scoped to the caller's company."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from portal.api.deps import get_user_service
from portal.api.responses import ok
from portal.auth.context import Principal
from portal.auth.policies import require_company_access
from portal.core.models import Role
from portal.services import UserService

router = APIRouter(prefix="/users", tags=["users"])


class UpdateUserRequest(BaseModel):
    name: str | None = None
    role: Role | None = None
    is_active: bool | None = None


@router.get("")
async def list_users(
    principal: Principal = Depends(require_company_access()),
    users: UserService = Depends(get_user_service),
):
    return ok([user.public() for user in await users.list_users(principal)])


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    principal: Principal = Depends(require_company_access()),
    users: UserService = Depends(get_user_service),
):
    user = await users.get_user(principal, user_id)
    return ok(user.public())


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    data: UpdateUserRequest,
    principal: Principal = Depends(require_company_access()),
    users: UserService = Depends(get_user_service),
):
    user = await users.update_user(principal, user_id, data.name, data.role, data.is_active)
    return ok(user.public(), "User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    principal: Principal = Depends(require_company_access()),
    users: UserService = Depends(get_user_service),
):
    await users.delete_user(principal, user_id)
    return ok(message="User deleted successfully")
