"""
Shared fixtures: an app over the in-memory store and the custom provider.
"""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from portal.api.app import create_app
from portal.auth.context import Principal
from portal.auth.providers import CustomAuthProvider
from portal.config import Settings
from portal.services import (
    AccountService,
    CompanyService,
    InvitationService,
    OnboardingService,
    ShortcutService,
    UserService,
)
from portal.storage import DataStore, InMemoryDocumentStore

API = "/api/v1"


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        jwt_secret_key="test-secret-key-with-enough-length-for-hs256",
        auth_provider="custom",
        db_provider="memory",
        sentry_dsn="",
        aws_access_key_id="",
        aws_secret_access_key="",
    )


@pytest.fixture
def store():
    return DataStore(InMemoryDocumentStore())


@pytest.fixture
def auth_provider(settings):
    return CustomAuthProvider(settings)


@pytest.fixture
def services(store, auth_provider, settings):
    """All services over the same store and provider."""
    handles = (store, auth_provider, settings)
    return SimpleNamespace(
        accounts=AccountService(*handles),
        companies=CompanyService(*handles),
        users=UserService(*handles),
        invitations=InvitationService(*handles),
        shortcuts=ShortcutService(*handles),
        onboarding=OnboardingService(*handles),
    )


@pytest.fixture
def app(settings, auth_provider, store):
    return create_app(settings=settings, auth_provider=auth_provider, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Helpers
# =============================================================================


async def make_admin(services, store, email: str, domain: str, name: str = "Admin"):
    """Register a user and give them a fresh company. Returns (principal, company)."""
    user, _ = await services.accounts.register(email, "password123", name)
    company = await services.companies.create_company(Principal.from_user(user), f"{domain} Inc", domain)
    user = await store.get_user(user.id)
    return Principal.from_user(user), company


async def make_member(services, store, email: str, company_id: str, role: str = "user", name: str = "Member"):
    """Register a user directly into a company."""
    user, _ = await services.accounts.register(email, "password123", name)
    user.company_id = company_id
    user.role = role
    await store.update_user(user)
    return Principal.from_user(user)


def register(client, email: str, password: str = "password123", name: str = "Test User") -> dict:
    """Register over HTTP and return auth headers."""
    response = client.post(f"{API}/auth/register", json={"email": email, "password": password, "name": name})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


def create_company(client, headers: dict, domain: str, name: str = "Acme") -> dict:
    response = client.post(f"{API}/companies", json={"name": name, "domain": domain}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]
