"""
Authentication and authorization.

Design principles:
1. One dependency per route: `Depends(require(...))` resolves a Principal
2. Tokens prove identity only; role and company come from the data store
3. Identity providers are swappable behind AuthProvider
4. Services receive the Principal explicitly, never from request state
"""

from portal.auth.context import Principal
from portal.auth.policies import (
    Policy,
    SessionAuthenticator,
    extract_bearer_token,
    optional_auth,
    require,
    require_admin,
    require_any_role,
    require_auth,
    require_company_access,
    require_role,
)
from portal.auth.providers import AuthProvider, Identity, create_auth_provider
from portal.auth.tokens import TokenPair, TokenService, hash_password, verify_password

__all__ = [
    # Main interface
    "require",
    "require_auth",
    "require_role",
    "require_any_role",
    "require_company_access",
    "require_admin",
    "optional_auth",
    "Principal",
    # Types
    "Policy",
    "SessionAuthenticator",
    "extract_bearer_token",
    # Providers
    "AuthProvider",
    "Identity",
    "create_auth_provider",
    # Tokens
    "TokenPair",
    "TokenService",
    "hash_password",
    "verify_password",
]
