"""
Error taxonomy.

Services raise these; the API layer maps each one to an HTTP status and the
standard response envelope. Backend failures (store, identity provider)
carry a generic public message so internal details never reach callers.
"""

from __future__ import annotations


class PortalError(Exception):
    """Base class for all errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.message


class Unauthenticated(PortalError):
    """Missing, malformed or expired credentials, or an unknown subject."""

    status_code = 401
    default_message = "Authentication required"


class Forbidden(PortalError):
    """Authenticated, but not allowed to do this."""

    status_code = 403
    default_message = "Access denied"


class NotFoundError(PortalError):
    """Entity does not exist."""

    status_code = 404
    default_message = "Not found"


class Conflict(PortalError):
    """Uniqueness violation (domain, email)."""

    status_code = 409
    default_message = "Already exists"


class InvalidState(PortalError):
    """Request is well-formed but the entity is not in a state that allows it."""

    status_code = 400
    default_message = "Invalid request"


class StorageError(PortalError):
    """Persistence backend failure or misconfiguration."""

    status_code = 500

    @property
    def public_message(self) -> str:
        return self.default_message


class AuthProviderError(PortalError):
    """Identity provider failure (network, non-2xx, unsupported operation)."""

    status_code = 500

    @property
    def public_message(self) -> str:
        return self.default_message


class InvalidCredentials(Unauthenticated):
    """Email/password pair rejected by the identity provider."""

    default_message = "Invalid credentials"


class TokenError(Unauthenticated):
    """Base exception for token errors."""

    default_message = "Invalid token"


class TokenExpiredError(TokenError):
    """Token has expired."""

    default_message = "Token has expired"


class TokenInvalidError(TokenError):
    """Token is invalid or malformed."""
