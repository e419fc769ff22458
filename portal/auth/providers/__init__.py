"""
Identity providers.

Select with AUTH_PROVIDER: "custom" (default), "auth0" or "google".
"""

from __future__ import annotations

import logging

from portal.auth.providers.auth0 import Auth0Provider
from portal.auth.providers.base import AuthProvider, Identity
from portal.auth.providers.custom import CustomAuthProvider
from portal.auth.providers.google import GoogleProvider
from portal.config import Settings

logger = logging.getLogger(__name__)


def create_auth_provider(settings: Settings) -> AuthProvider:
    provider = settings.auth_provider.lower()
    if provider == "auth0":
        return Auth0Provider(settings)
    if provider == "google":
        return GoogleProvider(settings)
    if provider != "custom":
        logger.warning(f"Unknown auth provider '{provider}', falling back to custom")
    return CustomAuthProvider(settings)


__all__ = [
    "AuthProvider",
    "Identity",
    "CustomAuthProvider",
    "Auth0Provider",
    "GoogleProvider",
    "create_auth_provider",
]
