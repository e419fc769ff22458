"""
In-memory identity provider for local development and tests.

Identities live in a process-local map guarded by an asyncio lock, so
concurrent registrations cannot both claim an email and concurrent
password changes cannot overwrite each other.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel

from portal.auth.providers.base import AuthProvider, Identity
from portal.auth.tokens import hash_password, verify_password
from portal.config import Settings
from portal.core.errors import AuthProviderError, Conflict, InvalidCredentials, InvalidState, NotFoundError
from portal.core.utils import generate_id, generate_token
from portal.integrations.email import EmailService

logger = logging.getLogger(__name__)


class StoredIdentity(BaseModel):
    id: str
    email: str
    name: str
    password_hash: str


class CustomAuthProvider(AuthProvider):
    """Username/password identities held in memory."""

    name = "custom"

    def __init__(self, settings: Settings, email_service: EmailService | None = None):
        super().__init__(settings)
        self.email = email_service or EmailService(settings)
        self._identities: dict[str, StoredIdentity] = {}
        self._by_email: dict[str, str] = {}  # email -> id
        self._lock = asyncio.Lock()

    async def authenticate(self, email: str, password: str) -> Identity:
        async with self._lock:
            user_id = self._by_email.get(email)
            stored = self._identities.get(user_id) if user_id else None
        if stored is None or not verify_password(password, stored.password_hash):
            raise InvalidCredentials()
        return Identity(id=stored.id, email=stored.email, name=stored.name)

    async def register(self, email: str, password: str, name: str) -> Identity:
        async with self._lock:
            if email in self._by_email:
                raise Conflict("User already exists")
            stored = StoredIdentity(
                id=generate_id("user"),
                email=email,
                name=name,
                password_hash=hash_password(password),
            )
            self._identities[stored.id] = stored
            self._by_email[email] = stored.id
        logger.info(f"Registered identity {stored.id}")
        return Identity(id=stored.id, email=stored.email, name=stored.name)

    async def delete_user(self, user_id: str) -> None:
        async with self._lock:
            stored = self._identities.pop(user_id, None)
            if stored is None:
                raise NotFoundError("User not found")
            self._by_email.pop(stored.email, None)

    async def send_invitation(
        self,
        email: str,
        company_id: str,
        invited_by: str,
        token: str | None = None,
    ) -> None:
        sent = await self.email.send_invitation(email, company_id, invited_by, token)
        # Unconfigured SES only logs the mail; a configured one that fails is a delivery error
        if self.email.is_configured and not sent:
            raise AuthProviderError(f"Invitation email to {email} was not delivered")

    async def reset_password(self, email: str) -> None:
        async with self._lock:
            known = email in self._by_email
        # Unknown emails get no mail and no error, so callers cannot discover accounts
        if known:
            await self.email.send_password_reset(email, generate_token())

    async def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        async with self._lock:
            stored = self._identities.get(user_id)
            if stored is None:
                raise NotFoundError("User not found")
            if not verify_password(old_password, stored.password_hash):
                raise InvalidState("Current password is incorrect")
            stored.password_hash = hash_password(new_password)
