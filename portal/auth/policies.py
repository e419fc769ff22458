"""
Policies - session authentication and route guards.

Usage:
    `principal: Principal = Depends(require_role(Role.ADMIN))`

Design:
- Every guarded route first authenticates the session: bearer token →
  identity provider validation → authoritative user lookup → Principal
- A token proves identity only; role, company and active status come from
  the data store, so deactivation takes effect on the very next request
- Guards (role, any-of-roles, has-company) then run against the Principal
- Cross-tenant checks on loaded entities happen in the services, because
  the target's company is only known after the entity is fetched
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import Request

from portal.auth.context import Principal
from portal.auth.providers.base import AuthProvider
from portal.core.errors import Forbidden, NotFoundError, PortalError, Unauthenticated
from portal.core.models import Role
from portal.storage.datastore import DataStore

logger = logging.getLogger(__name__)


# =============================================================================
# Session Authentication
# =============================================================================


def extract_bearer_token(header: str | None) -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header.

    The scheme must be exactly "Bearer" and the header exactly two parts.
    """
    if not header:
        raise Unauthenticated("Authorization header required")
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise Unauthenticated("Invalid authorization header format")
    return parts[1]


class SessionAuthenticator:
    """Turns an Authorization header into a Principal."""

    def __init__(self, auth_provider: AuthProvider, store: DataStore):
        self.auth_provider = auth_provider
        self.store = store

    async def authenticate(self, authorization: str | None) -> Principal:
        token = extract_bearer_token(authorization)
        identity = self.auth_provider.validate_token(token)

        try:
            user = await self.store.get_user(identity.id)
        except NotFoundError:
            # Valid token for a deleted user
            raise Unauthenticated("User not found")

        if not user.is_active:
            raise Forbidden("User account is inactive")

        return Principal.from_user(user)

    async def authenticate_optional(self, authorization: str | None) -> Principal | None:
        """Same as authenticate, but any failure means anonymous."""
        try:
            return await self.authenticate(authorization)
        except PortalError as e:
            logger.debug(f"Proceeding anonymously: {e.message}")
            return None


def get_authenticator(request: Request) -> SessionAuthenticator:
    state = request.app.state
    return SessionAuthenticator(state.auth_provider, state.store)


# =============================================================================
# Policy - the guard type
# =============================================================================


class Policy:
    """
    A set of guards checked against a Principal.

    Guards compose by AND; each only reads the Principal, so order does
    not change the outcome.
    """

    def __init__(
        self,
        roles: list[Role | str] | None = None,
        require_company: bool = False,
    ):
        self.roles = {Role(r).value for r in roles or []}
        self.require_company = require_company

    def check(self, principal: Principal) -> tuple[bool, str | None]:
        """
        Check if the principal satisfies this policy.

        Returns: (allowed, error_message)
        """
        if self.roles and principal.role not in self.roles:
            return False, "Insufficient permissions"

        if self.require_company and not principal.has_company:
            return False, "User not associated with any company"

        return True, None


# =============================================================================
# Main Interface - FastAPI dependencies
# =============================================================================


def require(*roles: Role | str, require_company: bool = False) -> Callable:
    """
    Require an authenticated, active user that passes the given guards.

    Usage:
        @router.delete("/users/{user_id}")
        async def delete_user(
            user_id: str,
            principal: Principal = Depends(require(Role.ADMIN, require_company=True)),
        ):
            ...

    Args:
        *roles: If given, the principal's role must be one of these
        require_company: If True, the principal must belong to a company

    Returns:
        FastAPI dependency that resolves to a Principal
    """
    return _create_dependency(Policy(roles=list(roles), require_company=require_company))


def require_auth() -> Callable:
    """Just require authentication."""
    return require()


def require_role(role: Role | str) -> Callable:
    """Require exactly this role."""
    return require(role)


def require_any_role(*roles: Role | str) -> Callable:
    """Require one of the listed roles."""
    return require(*roles)


def require_company_access() -> Callable:
    """Require the caller to belong to a company."""
    return require(require_company=True)


def require_admin() -> Callable:
    """Company admin: admin role and a company to administer."""
    return require(Role.ADMIN, require_company=True)


def optional_auth() -> Callable:
    """Resolve to a Principal when the request carries a valid session, else None."""

    async def dependency(request: Request) -> Principal | None:
        principal = await get_authenticator(request).authenticate_optional(
            request.headers.get("Authorization")
        )
        request.state.principal = principal
        return principal

    return dependency


# =============================================================================
# Internal: Create the FastAPI Dependency
# =============================================================================


def _create_dependency(policy: Policy) -> Callable:
    """Create a FastAPI dependency from a policy."""

    async def dependency(request: Request) -> Principal:
        principal = await get_authenticator(request).authenticate(
            request.headers.get("Authorization")
        )

        allowed, error = policy.check(principal)
        if not allowed:
            raise Forbidden(error)

        request.state.principal = principal
        return principal

    return dependency
