"""
Core module - data models, errors and shared helpers.

This module contains:
- models: Persisted entities (Company, User, Invitation, BrowserShortcut, ...)
- errors: Error taxonomy mapped to HTTP statuses by the API layer
- utils: Shared utility functions
"""

from portal.core.models import (
    CONFIGURATION_FEATURES,
    BrowserShortcut,
    Company,
    CompanySetupProgress,
    CompanyStatus,
    Invitation,
    InvitationStatus,
    Role,
    SetupStep,
    ShortcutCategory,
    Subscription,
    User,
    UserInvitationStatus,
)
from portal.core.errors import (
    AuthProviderError,
    Conflict,
    Forbidden,
    InvalidCredentials,
    InvalidState,
    NotFoundError,
    PortalError,
    StorageError,
    Unauthenticated,
)
from portal.core.utils import generate_id, generate_token, utc_now

__all__ = [
    # Models
    "Company",
    "User",
    "Invitation",
    "BrowserShortcut",
    "Subscription",
    "CompanySetupProgress",
    "Role",
    "CompanyStatus",
    "UserInvitationStatus",
    "InvitationStatus",
    "SetupStep",
    "ShortcutCategory",
    "CONFIGURATION_FEATURES",
    # Errors
    "PortalError",
    "Unauthenticated",
    "InvalidCredentials",
    "Forbidden",
    "NotFoundError",
    "Conflict",
    "InvalidState",
    "StorageError",
    "AuthProviderError",
    # Utils
    "generate_id",
    "generate_token",
    "utc_now",
]
