# =============================================================================
# Auth0 Identity Provider
# =============================================================================
#
# Setup:
#   1. Create a Machine-to-Machine application in the Auth0 dashboard and
#      authorize it for the Management API (create:users, delete:users,
#      update:users, create:user_tickets)
#   2. Set env vars:
#      - AUTH_PROVIDER=auth0
#      - AUTH0_DOMAIN=your-tenant.us.auth0.com
#      - AUTH0_CLIENT_ID=...
#      - AUTH0_CLIENT_SECRET=...
#
# Password login goes through Auth0's own hosted flows; this provider only
# manages identities and issues portal session tokens.
#
# =============================================================================

from __future__ import annotations

import logging
import uuid
from typing import Any

import httpx

from portal.auth.providers.base import AuthProvider, Identity
from portal.config import Settings
from portal.core.errors import AuthProviderError

logger = logging.getLogger(__name__)

CONNECTION = "Username-Password-Authentication"
TIMEOUT_SECONDS = 10.0


class Auth0Provider(AuthProvider):
    """Identities managed through the Auth0 Management API."""

    name = "auth0"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(settings)
        self.domain = settings.auth0_domain
        self.client_id = settings.auth0_client_id
        self.client_secret = settings.auth0_client_secret
        self.transport = transport

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=TIMEOUT_SECONDS, transport=self.transport)

    async def _management_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            "/oauth/token",
            json={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "audience": f"{self.base_url}/api/v2/",
                "grant_type": "client_credentials",
            },
        )
        if response.status_code != 200:
            logger.error(f"Auth0 management token request failed: {response.status_code}")
            raise AuthProviderError(f"Failed to get management token: {response.status_code}")
        return response.json()["access_token"]

    async def _management_call(
        self,
        method: str,
        path: str,
        expected_status: int,
        payload: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            async with self._client() as client:
                token = await self._management_token(client)
                response = await client.request(
                    method,
                    path,
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Auth0 {method} {path} failed: {e}")
            raise AuthProviderError(str(e)) from e

        if response.status_code != expected_status:
            logger.error(f"Auth0 {method} {path} returned {response.status_code}")
            raise AuthProviderError(f"Auth0 {method} {path} returned {response.status_code}")
        return response

    # =========================================================================
    # Identity operations
    # =========================================================================

    async def authenticate(self, email: str, password: str) -> Identity:
        raise AuthProviderError("Direct authentication is not supported with Auth0")

    async def register(self, email: str, password: str, name: str) -> Identity:
        response = await self._management_call(
            "POST",
            "/api/v2/users",
            expected_status=201,
            payload={
                "user_id": str(uuid.uuid4()),
                "email": email,
                "password": password,
                "name": name,
                "connection": CONNECTION,
                "email_verified": True,
            },
        )
        created = response.json()
        return Identity(
            id=created["user_id"],
            email=created.get("email", email),
            name=created.get("name", name),
            picture=created.get("picture", ""),
        )

    async def delete_user(self, user_id: str) -> None:
        await self._management_call("DELETE", f"/api/v2/users/{user_id}", expected_status=204)

    async def send_invitation(
        self,
        email: str,
        company_id: str,
        invited_by: str,
        token: str | None = None,
    ) -> None:
        await self._management_call(
            "POST",
            "/api/v2/jobs/verification-email",
            expected_status=201,
            payload={
                "client_id": self.client_id,
                "email": email,
                "connection": CONNECTION,
                "app_metadata": {"company_id": company_id, "invited_by": invited_by},
            },
        )

    async def reset_password(self, email: str) -> None:
        await self._management_call(
            "POST",
            "/api/v2/jobs/verification-email",
            expected_status=201,
            payload={"client_id": self.client_id, "email": email, "connection": CONNECTION},
        )

    async def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        # Auth0 does not verify the old password on a management update
        await self._management_call(
            "PATCH",
            f"/api/v2/users/{user_id}",
            expected_status=200,
            payload={"password": new_password},
        )
