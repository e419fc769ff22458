# =============================================================================
# Google OAuth Identity Provider
# =============================================================================
#
# Setup:
#   1. Create an OAuth 2.0 Client ID at https://console.cloud.google.com/apis/credentials
#   2. Set env vars:
#      - AUTH_PROVIDER=google
#      - GOOGLE_OAUTH_CLIENT_ID=...
#      - GOOGLE_OAUTH_CLIENT_SECRET=...
#
# The frontend completes the Google sign-in and hands us the Google access
# token; we resolve it against the userinfo endpoint. Passwords, account
# deletion and password resets are owned by Google.
#
# =============================================================================

from __future__ import annotations

import logging

import httpx

from portal.auth.providers.base import AuthProvider, Identity
from portal.config import Settings
from portal.core.errors import AuthProviderError, InvalidCredentials

logger = logging.getLogger(__name__)

USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
TIMEOUT_SECONDS = 10.0


class GoogleProvider(AuthProvider):
    """Identities owned by Google accounts."""

    name = "google"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(settings)
        self.client_id = settings.google_oauth_client_id
        self.transport = transport

    async def authenticate_with_token(self, access_token: str) -> Identity:
        """Resolve a Google OAuth access token to an identity."""
        try:
            async with httpx.AsyncClient(timeout=TIMEOUT_SECONDS, transport=self.transport) as client:
                response = await client.get(
                    USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Google userinfo request failed: {e}")
            raise AuthProviderError(str(e)) from e

        if response.status_code == 401:
            raise InvalidCredentials("Invalid Google token")
        if response.status_code != 200:
            logger.error(f"Google userinfo returned {response.status_code}")
            raise AuthProviderError(f"Failed to get user info: {response.status_code}")

        info = response.json()
        return Identity(
            id=info["id"],
            email=info["email"],
            name=info.get("name", ""),
            picture=info.get("picture", ""),
        )

    async def authenticate(self, email: str, password: str) -> Identity:
        raise AuthProviderError("Direct authentication is not supported with Google OAuth")

    async def register(self, email: str, password: str, name: str) -> Identity:
        raise AuthProviderError("Registration is handled by Google")

    async def delete_user(self, user_id: str) -> None:
        # Google accounts are not ours to delete; only the portal record goes
        logger.info(f"Google identity {user_id} released")

    async def send_invitation(
        self,
        email: str,
        company_id: str,
        invited_by: str,
        token: str | None = None,
    ) -> None:
        logger.info(f"Invitation for {email} to company {company_id} by {invited_by}")

    async def reset_password(self, email: str) -> None:
        logger.info(f"Password reset requested for {email} (handled by Google)")

    async def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        raise AuthProviderError("Password changes are handled by Google")
