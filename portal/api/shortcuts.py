"""Browser shortcut routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from portal.api.deps import get_shortcut_service
from portal.api.responses import ok
from portal.auth.context import Principal
from portal.auth.policies import require_company_access
from portal.core.models import ShortcutCategory
from portal.services import ShortcutService

router = APIRouter(prefix="/shortcuts", tags=["shortcuts"])


class CreateShortcutRequest(BaseModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    icon: str = ""
    description: str = ""
    order: int = 0
    category: ShortcutCategory | None = None


class UpdateShortcutRequest(BaseModel):
    name: str | None = None
    url: str | None = None
    icon: str | None = None
    description: str | None = None
    order: int | None = None
    is_active: bool | None = None


@router.get("")
async def list_shortcuts(
    category: ShortcutCategory | None = None,
    principal: Principal = Depends(require_company_access()),
    shortcuts: ShortcutService = Depends(get_shortcut_service),
):
    return ok([shortcut.public() for shortcut in await shortcuts.list_shortcuts(principal, category)])


@router.post("", status_code=201)
async def create_shortcut(
    data: CreateShortcutRequest,
    principal: Principal = Depends(require_company_access()),
    shortcuts: ShortcutService = Depends(get_shortcut_service),
):
    shortcut = await shortcuts.create_shortcut(principal, **data.model_dump())
    return ok(shortcut.public(), "Shortcut created successfully", status_code=201)


@router.put("/{shortcut_id}")
async def update_shortcut(
    shortcut_id: str,
    data: UpdateShortcutRequest,
    principal: Principal = Depends(require_company_access()),
    shortcuts: ShortcutService = Depends(get_shortcut_service),
):
    shortcut = await shortcuts.update_shortcut(principal, shortcut_id, **data.model_dump())
    return ok(shortcut.public(), "Shortcut updated successfully")


@router.delete("/{shortcut_id}")
async def delete_shortcut(
    shortcut_id: str,
    principal: Principal = Depends(require_company_access()),
    shortcuts: ShortcutService = Depends(get_shortcut_service),
):
    await shortcuts.delete_shortcut(principal, shortcut_id)
    return ok(message="Shortcut deleted successfully")
