"""
Shortcut service - browser shortcuts pinned for a company.
"""

from __future__ import annotations

from portal.auth.context import Principal
from portal.core.models import BrowserShortcut, ShortcutCategory
from portal.services.base import PortalService


class ShortcutService(PortalService):

    async def list_shortcuts(
        self,
        principal: Principal,
        category: ShortcutCategory | str | None = None,
    ) -> list[BrowserShortcut]:
        return await self.store.list_shortcuts(self.company_id(principal), category)

    async def get_shortcut(self, principal: Principal, shortcut_id: str) -> BrowserShortcut:
        shortcut = await self.store.get_shortcut(shortcut_id)
        self.check_tenant(principal, shortcut.company_id)
        return shortcut

    async def create_shortcut(
        self,
        principal: Principal,
        name: str,
        url: str,
        icon: str = "",
        description: str = "",
        order: int = 0,
        category: ShortcutCategory | str | None = None,
    ) -> BrowserShortcut:
        company_id = self.company_id(principal)
        self.require_admin(principal, "Only admins can create shortcuts")

        shortcut = BrowserShortcut(
            company_id=company_id,
            name=name,
            url=url,
            icon=icon,
            description=description,
            order=order,
            category=category or ShortcutCategory.CUSTOM,
            is_suggested=False,
            source="manual",
        )
        return await self.store.save_shortcut(shortcut)

    async def update_shortcut(
        self,
        principal: Principal,
        shortcut_id: str,
        name: str | None = None,
        url: str | None = None,
        icon: str | None = None,
        description: str | None = None,
        order: int | None = None,
        is_active: bool | None = None,
    ) -> BrowserShortcut:
        """Partial update; None leaves a field unchanged."""
        self.require_admin(principal, "Only admins can update shortcuts")
        shortcut = await self.get_shortcut(principal, shortcut_id)

        if name is not None:
            shortcut.name = name
        if url is not None:
            shortcut.url = url
        if icon is not None:
            shortcut.icon = icon
        if description is not None:
            shortcut.description = description
        if order is not None:
            shortcut.order = order
        if is_active is not None:
            shortcut.is_active = is_active

        return await self.store.update_shortcut(shortcut)

    async def delete_shortcut(self, principal: Principal, shortcut_id: str) -> None:
        self.require_admin(principal, "Only admins can delete shortcuts")
        await self.get_shortcut(principal, shortcut_id)
        await self.store.delete_shortcut(shortcut_id)
