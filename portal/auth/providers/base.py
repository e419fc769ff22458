"""
Identity provider interface.

A provider verifies credentials, manages identities in an external system
(Auth0, Google, or the in-memory custom store), and issues session tokens.
Token issuing and validation are shared: all providers sign HS256 session
tokens with the configured secret.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from portal.auth.tokens import TokenPair, TokenService
from portal.config import Settings
from portal.core.errors import AuthProviderError


class Identity(BaseModel):
    """Minimal identity as known to the provider."""

    id: str
    email: str
    name: str = ""
    picture: str = ""


class AuthProvider(ABC):
    """Identity capability consumed by the auth middleware and services."""

    name: str = "base"

    def __init__(self, settings: Settings):
        self.settings = settings
        self.tokens = TokenService(settings)

    # =========================================================================
    # Session tokens (shared)
    # =========================================================================

    def issue_tokens(self, identity: Identity) -> TokenPair:
        return self.tokens.create_token_pair(identity.id, identity.email, identity.name)

    def validate_token(self, token: str) -> Identity:
        """
        Validate a session access token.

        Raises TokenExpiredError / TokenInvalidError (both Unauthenticated).
        """
        payload = self.tokens.decode(token, expected_type="access")
        return Identity(id=payload.sub, email=payload.email, name=payload.name)

    def validate_refresh_token(self, token: str) -> str:
        """Return the subject id of a valid refresh token."""
        return self.tokens.decode(token, expected_type="refresh").sub

    # =========================================================================
    # Identity operations
    # =========================================================================

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> Identity:
        """Verify an email/password pair."""
        pass

    async def authenticate_with_token(self, access_token: str) -> Identity:
        """Resolve a third-party access token. Only OAuth providers support this."""
        raise AuthProviderError(f"Token sign-in is not supported by the {self.name} provider")

    @abstractmethod
    async def register(self, email: str, password: str, name: str) -> Identity:
        """Create an identity."""
        pass

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        """Remove an identity."""
        pass

    @abstractmethod
    async def send_invitation(
        self,
        email: str,
        company_id: str,
        invited_by: str,
        token: str | None = None,
    ) -> None:
        """Deliver an invitation. Callers treat failures as best-effort."""
        pass

    @abstractmethod
    async def reset_password(self, email: str) -> None:
        pass

    @abstractmethod
    async def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        pass

    async def close(self) -> None:
        return None
