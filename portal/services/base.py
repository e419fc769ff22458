"""
Base class for portal services.

Services hold the long-lived capability handles (data store, identity
provider, settings) and take the request's Principal as an explicit
argument on every call. They never see HTTP.
"""

from __future__ import annotations

from portal.auth.context import Principal
from portal.auth.providers.base import AuthProvider
from portal.config import Settings
from portal.core.errors import Forbidden
from portal.storage.datastore import DataStore


class PortalService:
    """
    Shared plumbing for services.

    Example:
        class ShortcutService(PortalService):
            async def delete(self, principal: Principal, shortcut_id: str) -> None:
                self.require_admin(principal, "Only admins can delete shortcuts")
                shortcut = await self.store.get_shortcut(shortcut_id)
                self.check_tenant(principal, shortcut.company_id)
                await self.store.delete_shortcut(shortcut_id)
    """

    def __init__(self, store: DataStore, auth_provider: AuthProvider, settings: Settings):
        self.store = store
        self.auth_provider = auth_provider
        self.settings = settings

    @staticmethod
    def company_id(principal: Principal) -> str:
        """The caller's company id; Forbidden when they have none."""
        if not principal.company_id:
            raise Forbidden("User not associated with any company")
        return principal.company_id

    @staticmethod
    def require_admin(principal: Principal, message: str = "Insufficient permissions") -> None:
        if not principal.is_admin:
            raise Forbidden(message)

    @staticmethod
    def check_tenant(principal: Principal, company_id: str | None) -> None:
        """Entity-level isolation: the entity must belong to the caller's company."""
        if not principal.owns(company_id):
            raise Forbidden("Access denied")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
