"""
Service dependencies.

Services are cheap wrappers over the long-lived handles kept on
`app.state`, so each request builds its own.
"""

from __future__ import annotations

from fastapi import Request

from portal.services import (
    AccountService,
    CompanyService,
    InvitationService,
    OnboardingService,
    ShortcutService,
    UserService,
)


def _handles(request: Request) -> tuple:
    state = request.app.state
    return state.store, state.auth_provider, state.settings


def get_account_service(request: Request) -> AccountService:
    return AccountService(*_handles(request))


def get_company_service(request: Request) -> CompanyService:
    return CompanyService(*_handles(request))


def get_user_service(request: Request) -> UserService:
    return UserService(*_handles(request))


def get_invitation_service(request: Request) -> InvitationService:
    return InvitationService(*_handles(request))


def get_shortcut_service(request: Request) -> ShortcutService:
    return ShortcutService(*_handles(request))


def get_onboarding_service(request: Request) -> OnboardingService:
    return OnboardingService(*_handles(request))
