"""
User service - listing, profile updates and deletion within a company.
"""

from __future__ import annotations

import logging

from portal.auth.context import Principal
from portal.core.errors import AuthProviderError, Forbidden, InvalidState, NotFoundError
from portal.core.models import Role, User
from portal.services.base import PortalService

logger = logging.getLogger(__name__)


class UserService(PortalService):
    """User management scoped to the caller's company."""

    async def list_users(self, principal: Principal) -> list[User]:
        return await self.store.list_users(self.company_id(principal))

    async def get_user(self, principal: Principal, user_id: str) -> User:
        user = await self.store.get_user(user_id)
        self.check_tenant(principal, user.company_id)
        return user

    async def update_user(
        self,
        principal: Principal,
        user_id: str,
        name: str | None = None,
        role: Role | str | None = None,
        is_active: bool | None = None,
    ) -> User:
        """
        Update a user.

        Anyone may rename themselves; only admins may touch other users or
        change role / active status.
        """
        user = await self.get_user(principal, user_id)

        if principal.user_id != user_id and not principal.is_admin:
            raise Forbidden("Only admins can update other users")
        if role is not None and not principal.is_admin:
            raise Forbidden("Only admins can change user roles")
        if is_active is not None and not principal.is_admin:
            raise Forbidden("Only admins can deactivate users")

        if name is not None:
            user.name = name
        if role is not None:
            user.role = role
        if is_active is not None:
            user.is_active = is_active

        return await self.store.update_user(user)

    async def delete_user(self, principal: Principal, user_id: str) -> None:
        """
        Delete a user from the identity provider, then from the store.

        No admin can be deleted while the company has at most one active
        admin. If the identity provider refuses, the stored record is left
        untouched.
        """
        self.require_admin(principal, "Only admins can delete users")
        user = await self.get_user(principal, user_id)

        if user.is_admin:
            admins = await self.store.count_active_admins(user.company_id)
            if admins <= 1:
                raise InvalidState("Cannot delete the last admin user")

        try:
            await self.auth_provider.delete_user(user_id)
        except NotFoundError:
            raise AuthProviderError("Failed to delete user from auth provider")

        await self.store.delete_user(user_id)
        logger.info(f"User {user_id} deleted by {principal.user_id}")
