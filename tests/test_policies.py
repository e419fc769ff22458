"""
Tests for session authentication, tokens and route guards.

Core principle: a token proves identity only; the stored user decides.
"""

from datetime import timedelta

import jwt
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from conftest import API, create_company, register
from portal.auth.context import Principal
from portal.auth.policies import (
    Policy,
    SessionAuthenticator,
    extract_bearer_token,
    optional_auth,
    require_admin,
    require_any_role,
)
from portal.auth.tokens import TokenService, hash_password, verify_password
from portal.core.errors import Forbidden, TokenExpiredError, TokenInvalidError, Unauthenticated
from portal.core.models import Role, User
from portal.core.utils import utc_now


def _principal(role: str = "user", company_id: str | None = "c1") -> Principal:
    return Principal(user_id="u1", email="u1@x.com", company_id=company_id, role=role)


# =============================================================================
# Header parsing
# =============================================================================


class TestBearerHeader:
    def test_valid(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_missing(self):
        with pytest.raises(Unauthenticated, match="Authorization header required"):
            extract_bearer_token(None)
        with pytest.raises(Unauthenticated, match="Authorization header required"):
            extract_bearer_token("")

    @pytest.mark.parametrize(
        "header",
        ["Token abc", "bearer abc", "Bearer", "Bearer ", "Bearer a b", "abc"],
    )
    def test_malformed(self, header):
        with pytest.raises(Unauthenticated, match="Invalid authorization header format"):
            extract_bearer_token(header)


# =============================================================================
# Tokens
# =============================================================================


class TestTokens:
    def test_access_token_round_trip(self, settings):
        tokens = TokenService(settings)
        payload = tokens.decode(tokens.create_access_token("u1", "a@x.com", "A"))

        assert (payload.sub, payload.email, payload.name, payload.type) == ("u1", "a@x.com", "A", "access")

    def test_refresh_token_is_not_an_access_token(self, settings):
        tokens = TokenService(settings)
        refresh = tokens.create_refresh_token("u1")

        with pytest.raises(TokenInvalidError):
            tokens.decode(refresh, expected_type="access")
        assert tokens.decode(refresh, expected_type="refresh").sub == "u1"

    def test_expired(self, settings):
        now = utc_now()
        token = jwt.encode(
            {"sub": "u1", "email": "a@x.com", "type": "access", "iat": now - timedelta(hours=2), "exp": now - timedelta(hours=1)},
            settings.jwt_secret_key,
            algorithm="HS256",
        )
        with pytest.raises(TokenExpiredError):
            TokenService(settings).decode(token)

    def test_wrong_secret(self, settings):
        token = jwt.encode(
            {"sub": "u1", "email": "a@x.com", "type": "access", "iat": utc_now(), "exp": utc_now() + timedelta(hours=1)},
            "some-other-secret-that-is-long-enough",
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalidError):
            TokenService(settings).decode(token)

    def test_missing_email_claim(self, settings):
        token = jwt.encode(
            {"sub": "u1", "type": "access", "iat": utc_now(), "exp": utc_now() + timedelta(hours=1)},
            settings.jwt_secret_key,
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalidError):
            TokenService(settings).decode(token)

    def test_password_hashing(self):
        hashed = hash_password("password123")

        assert hashed != "password123"
        assert verify_password("password123", hashed)
        assert not verify_password("password124", hashed)
        assert hash_password("password123") != hashed  # salted


# =============================================================================
# Session authentication
# =============================================================================


class TestSessionAuthenticator:
    @pytest.mark.asyncio
    async def test_resolves_stored_user(self, store, auth_provider):
        await store.save_user(User(id="u1", email="a@x.com", name="A", company_id="c1", role=Role.ADMIN))
        token = auth_provider.tokens.create_access_token("u1", "a@x.com")

        principal = await SessionAuthenticator(auth_provider, store).authenticate(f"Bearer {token}")

        assert principal == Principal(user_id="u1", email="a@x.com", company_id="c1", role="admin")

    @pytest.mark.asyncio
    async def test_role_comes_from_store_not_token(self, store, auth_provider):
        await store.save_user(User(id="u1", email="a@x.com", name="A", role=Role.GUEST))
        token = auth_provider.tokens.create_access_token("u1", "a@x.com")

        principal = await SessionAuthenticator(auth_provider, store).authenticate(f"Bearer {token}")

        assert principal.role == "guest"
        assert principal.company_id is None

    @pytest.mark.asyncio
    async def test_deleted_user(self, store, auth_provider):
        token = auth_provider.tokens.create_access_token("gone", "gone@x.com")

        with pytest.raises(Unauthenticated, match="User not found"):
            await SessionAuthenticator(auth_provider, store).authenticate(f"Bearer {token}")

    @pytest.mark.asyncio
    async def test_inactive_user(self, store, auth_provider):
        await store.save_user(User(id="u1", email="a@x.com", name="A", is_active=False))
        token = auth_provider.tokens.create_access_token("u1", "a@x.com")

        with pytest.raises(Forbidden, match="User account is inactive"):
            await SessionAuthenticator(auth_provider, store).authenticate(f"Bearer {token}")

    @pytest.mark.asyncio
    async def test_optional_falls_back_to_anonymous(self, store, auth_provider):
        authenticator = SessionAuthenticator(auth_provider, store)

        assert await authenticator.authenticate_optional(None) is None
        assert await authenticator.authenticate_optional("Bearer not-a-jwt") is None


# =============================================================================
# Policies
# =============================================================================


class TestPolicy:
    def test_no_guards(self):
        assert Policy().check(_principal(company_id=None)) == (True, None)

    def test_role(self):
        policy = Policy(roles=[Role.ADMIN])

        assert policy.check(_principal("admin")) == (True, None)
        assert policy.check(_principal("user")) == (False, "Insufficient permissions")

    def test_any_of_roles(self):
        policy = Policy(roles=["admin", "user"])

        assert policy.check(_principal("user"))[0]
        assert not policy.check(_principal("guest"))[0]

    def test_company_required(self):
        policy = Policy(require_company=True)

        assert policy.check(_principal(company_id="c1"))[0]
        assert policy.check(_principal(company_id=None)) == (False, "User not associated with any company")

    def test_tenant_ownership(self):
        principal = _principal(company_id="c1")

        assert principal.owns("c1")
        assert not principal.owns("c2")
        assert not _principal(company_id=None).owns(None)


# =============================================================================
# Guards as route dependencies
# =============================================================================


@pytest.fixture
def guarded_client(app):
    @app.get("/guarded/any-role")
    async def any_role(principal: Principal = Depends(require_any_role(Role.ADMIN, Role.USER))):
        return {"user_id": principal.user_id}

    @app.get("/guarded/admin")
    async def admin_only(principal: Principal = Depends(require_admin())):
        return {"company_id": principal.company_id}

    @app.get("/guarded/optional")
    async def optional(principal: Principal | None = Depends(optional_auth())):
        return {"user_id": principal.user_id if principal else None}

    with TestClient(app) as client:
        yield client


class TestGuardDependencies:
    def test_any_role(self, guarded_client):
        headers = register(guarded_client, "a@x.com")

        assert guarded_client.get("/guarded/any-role", headers=headers).status_code == 200
        assert guarded_client.get("/guarded/any-role").status_code == 401

    def test_any_role_rejects_other_roles(self, guarded_client, store):
        headers = register(guarded_client, "a@x.com")
        user_id = guarded_client.get(f"{API}/auth/verify", headers=headers).json()["data"]["id"]
        user = guarded_client.portal.call(store.get_user, user_id)
        user.role = Role.GUEST
        guarded_client.portal.call(store.update_user, user)

        response = guarded_client.get("/guarded/any-role", headers=headers)

        assert response.status_code == 403
        assert response.json()["error"] == "Insufficient permissions"

    def test_admin_needs_company(self, guarded_client):
        headers = register(guarded_client, "a@x.com")

        before = guarded_client.get("/guarded/admin", headers=headers)
        company = create_company(guarded_client, headers, "acme.com")
        after = guarded_client.get("/guarded/admin", headers=headers)

        assert before.status_code == 403
        assert after.json() == {"company_id": company["id"]}

    def test_admin_rejects_members(self, guarded_client, store):
        headers = register(guarded_client, "a@x.com")
        create_company(guarded_client, headers, "acme.com")
        user_id = guarded_client.get(f"{API}/auth/verify", headers=headers).json()["data"]["id"]
        user = guarded_client.portal.call(store.get_user, user_id)
        user.role = Role.USER
        guarded_client.portal.call(store.update_user, user)

        assert guarded_client.get("/guarded/admin", headers=headers).status_code == 403

    def test_optional(self, guarded_client):
        headers = register(guarded_client, "a@x.com")

        assert guarded_client.get("/guarded/optional").json() == {"user_id": None}
        assert guarded_client.get("/guarded/optional", headers={"Authorization": "Bearer junk"}).json() == {
            "user_id": None
        }
        assert guarded_client.get("/guarded/optional", headers=headers).json()["user_id"]
