"""Services - tenant-scoped operations that take the caller's Principal explicitly."""

from portal.services.base import PortalService
from portal.services.accounts import AccountService
from portal.services.companies import CompanyService
from portal.services.users import UserService
from portal.services.invitations import InvitationService
from portal.services.shortcuts import ShortcutService
from portal.services.onboarding import OnboardingService

__all__ = [
    "PortalService",
    "AccountService",
    "CompanyService",
    "UserService",
    "InvitationService",
    "ShortcutService",
    "OnboardingService",
]
