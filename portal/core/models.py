"""
Core data models for the admin portal.

These models represent the persisted entities: Companies (tenants), Users,
Invitations, Browser Shortcuts, Subscriptions and the per-company setup
wizard record. Enum-valued fields are stored as their plain string values
so documents round-trip through any document store unchanged.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from portal.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class Role(str, Enum):
    """Role of a user within their company."""

    ADMIN = "admin"
    USER = "user"
    GUEST = "guest"


class CompanyStatus(str, Enum):
    """Lifecycle status of a company."""

    TRIAL = "trial"
    ACTIVE = "active"  # Set by the billing system, not by the portal
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class UserInvitationStatus(str, Enum):
    """Where a user is in the invite/onboard flow."""

    INVITED = "invited"
    PENDING = "pending"
    ACTIVE = "active"


class InvitationStatus(str, Enum):
    """Status of an invitation."""

    PENDING = "pending"
    SENT = "sent"
    ACCEPTED = "accepted"  # Terminal
    EXPIRED = "expired"


class SetupStep(str, Enum):
    """Steps of the client-driven setup wizard."""

    DOMAIN = "domain"
    CUSTOMIZATION = "customization"
    INVITATIONS = "invitations"
    SUBSCRIPTION = "subscription"
    COMPLETE = "complete"


class ShortcutCategory(str, Enum):
    COMPANY = "company"
    SUGGESTED = "suggested"
    CUSTOM = "custom"


# Feature key (as sent by clients) -> Company flag attribute
CONFIGURATION_FEATURES: dict[str, str] = {
    "website_security": "website_security_configured",
    "malware_security": "malware_security_configured",
    "data_controls": "data_controls_configured",
    "reporting": "reporting_configured",
    "browser_customization": "browser_customized",
    "subscription": "subscription_active",
    "users_invited": "users_invited",
    "download_ready": "download_ready",
}


class Document(BaseModel):
    """Base for persisted entities."""

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump()


# =============================================================================
# Company
# =============================================================================


class Company(Document):
    """
    A company - the tenant boundary.

    Every user, invitation, shortcut and subscription belongs to exactly one
    company. `domain` is unique across all companies.
    """

    id: str = Field(default_factory=lambda: generate_id("comp"))

    name: str
    domain: str
    color_theme: str = ""
    logo_url: str = ""

    admin_user_id: str
    subscription_id: str | None = None

    status: CompanyStatus = CompanyStatus.TRIAL
    trial_ends_at: datetime | None = None

    onboarded: bool = False
    onboarded_at: datetime | None = None
    setup_completed: bool = False
    setup_completed_at: datetime | None = None

    # Configuration flags, mutated through the setup wizard
    website_security_configured: bool = False
    malware_security_configured: bool = False
    data_controls_configured: bool = False
    reporting_configured: bool = False
    browser_customized: bool = False
    subscription_active: bool = False
    users_invited: bool = False
    download_ready: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def configuration_status(self) -> dict[str, bool]:
        """All eight feature keys with their current flag values."""
        return {key: getattr(self, attr) for key, attr in CONFIGURATION_FEATURES.items()}

    def setup_score(self) -> int:
        """
        Aggregate setup progress: 20 points per completed milestone.

        Always one of 0, 20, 40, 60, 80, 100.
        """
        milestones = [
            bool(self.domain),
            bool(self.color_theme),
            self.users_invited,
            self.subscription_active,
            self.download_ready,
        ]
        return 20 * sum(milestones)


# =============================================================================
# User
# =============================================================================


class User(Document):
    """
    A portal user.

    The id is the subject id issued by the identity provider, so a validated
    token resolves directly to this record.
    """

    id: str
    email: str
    name: str
    picture: str = ""

    company_id: str | None = None
    role: Role = Role.USER
    is_active: bool = True

    invitation_status: UserInvitationStatus | None = None
    invited_at: datetime | None = None
    activated_at: datetime | None = None

    onboarded: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    last_login_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def public(self) -> dict[str, Any]:
        """Fields returned to API clients."""
        return self.model_dump(
            mode="json",
            include={"id", "email", "name", "picture", "company_id", "role", "is_active", "invitation_status", "created_at"},
        )


# =============================================================================
# Invitation
# =============================================================================


class Invitation(Document):
    """
    An invitation binding an email address to a company.

    The token is a bearer credential: whoever holds it (and authenticates
    with the matching email) may join the company.
    """

    id: str = Field(default_factory=lambda: generate_id("inv"))
    email: str
    company_id: str
    invited_by: str
    token: str

    status: InvitationStatus = InvitationStatus.PENDING
    expires_at: datetime

    sent_at: datetime | None = None
    sent_count: int = 0
    last_sent_at: datetime | None = None
    accepted_at: datetime | None = None

    created_at: datetime = Field(default_factory=utc_now)

    def public(self) -> dict[str, Any]:
        # Token is deliberately excluded; it only travels by email
        return self.model_dump(
            mode="json",
            include={"id", "email", "invited_by", "status", "expires_at", "created_at", "accepted_at", "sent_count"},
        )


# =============================================================================
# Browser Shortcut
# =============================================================================


class BrowserShortcut(Document):
    """A shortcut pinned in the company's managed browser."""

    id: str = Field(default_factory=lambda: generate_id("sc"))
    company_id: str
    name: str
    url: str
    icon: str = ""
    description: str = ""
    order: int = 0
    is_active: bool = True

    category: ShortcutCategory = ShortcutCategory.CUSTOM
    is_suggested: bool = False
    source: str = "manual"

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def public(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"company_id", "created_at", "updated_at"})


# =============================================================================
# Subscription
# =============================================================================


class Subscription(Document):
    """
    Mirror of the company's external billing subscription.

    Only `max_users` is read by the portal itself.
    """

    id: str = Field(default_factory=lambda: generate_id("sub"))
    company_id: str
    external_id: str = ""
    plan: str = ""
    status: str = ""

    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    trial_start: datetime | None = None
    trial_end: datetime | None = None

    max_users: int = 20
    active_users: int = 0
    invited_users: int = 0
    is_trial_active: bool = False
    trial_days_remaining: int = 0

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Setup Progress
# =============================================================================


class CompanySetupProgress(Document):
    """
    Wizard position as reported by the client.

    `step` and `progress` are stored verbatim; nothing here is derived from
    the company's configuration flags.
    """

    company_id: str
    step: SetupStep = SetupStep.DOMAIN
    progress: int = Field(default=0, ge=0, le=100)

    domain_provided: bool = False
    customization_completed: bool = False
    invitations_sent: bool = False
    subscription_started: bool = False
    setup_completed: bool = False

    last_updated: datetime = Field(default_factory=utc_now)
