"""
Account service - registration, login and session operations.
"""

from __future__ import annotations

import logging

from portal.auth.context import Principal
from portal.auth.tokens import TokenPair
from portal.core.errors import Conflict, Forbidden, InvalidCredentials, NotFoundError, Unauthenticated
from portal.core.models import Role, User, UserInvitationStatus
from portal.core.utils import utc_now
from portal.services.base import PortalService

logger = logging.getLogger(__name__)


class AccountService(PortalService):
    """Identity bootstrap on top of the configured auth provider."""

    async def register(self, email: str, password: str, name: str) -> tuple[User, TokenPair]:
        """
        Create an identity and its portal user.

        Every registrant starts as an admin; joining a company through an
        invitation later resets the role to user.
        """
        if await self.store.find_user_by_email(email) is not None:
            raise Conflict("User already exists")

        identity = await self.auth_provider.register(email, password, name)

        user = User(
            id=identity.id,
            email=identity.email,
            name=identity.name or name,
            picture=identity.picture,
            role=Role.ADMIN,
            is_active=True,
            invitation_status=UserInvitationStatus.ACTIVE,
        )
        await self.store.save_user(user)
        logger.info(f"Registered user {user.id}")

        return user, self.auth_provider.issue_tokens(identity)

    async def login(self, email: str, password: str) -> tuple[User, TokenPair]:
        identity = await self.auth_provider.authenticate(email, password)

        try:
            user = await self.store.get_user(identity.id)
        except NotFoundError:
            raise InvalidCredentials()
        if not user.is_active:
            raise Forbidden("User account is inactive")

        user.last_login_at = utc_now()
        await self.store.update_user(user)
        return user, self.auth_provider.issue_tokens(identity)

    async def sign_in_with_token(self, access_token: str) -> tuple[User, TokenPair]:
        """
        Sign in with an OAuth provider's access token.

        The first sign-in creates the portal user as an admin, the same way
        `register` does; later sign-ins reuse the stored user.
        """
        identity = await self.auth_provider.authenticate_with_token(access_token)

        try:
            user = await self.store.get_user(identity.id)
        except NotFoundError:
            if await self.store.find_user_by_email(identity.email) is not None:
                raise Conflict("User already exists")
            user = User(
                id=identity.id,
                email=identity.email,
                name=identity.name,
                picture=identity.picture,
                role=Role.ADMIN,
                is_active=True,
                invitation_status=UserInvitationStatus.ACTIVE,
            )
            await self.store.save_user(user)
            logger.info(f"Created user {user.id} on first {self.auth_provider.name} sign-in")

        if not user.is_active:
            raise Forbidden("User account is inactive")

        user.last_login_at = utc_now()
        await self.store.update_user(user)
        return user, self.auth_provider.issue_tokens(identity)

    async def refresh(self, principal: Principal, refresh_token: str) -> TokenPair:
        """New token pair for a valid refresh token of a still-active user."""
        user_id = self.auth_provider.validate_refresh_token(refresh_token)
        if user_id != principal.user_id:
            raise Unauthenticated("Refresh token does not belong to this session")
        try:
            user = await self.store.get_user(user_id)
        except NotFoundError:
            raise Unauthenticated("User not found")
        if not user.is_active:
            raise Forbidden("User account is inactive")

        return self.auth_provider.tokens.create_token_pair(user.id, user.email, user.name)

    async def current_user(self, principal: Principal) -> User:
        return await self.store.get_user(principal.user_id)

    async def change_password(self, principal: Principal, old_password: str, new_password: str) -> None:
        await self.auth_provider.change_password(principal.user_id, old_password, new_password)
        logger.info(f"Password changed for {principal.user_id}")

    async def reset_password(self, email: str) -> None:
        await self.auth_provider.reset_password(email)
