"""
Typed repository over a DocumentStore.

Services talk to DataStore, never to the raw document store. Lookups by
id (`get_*`) raise NotFoundError; lookups by secondary index (`find_*`)
return None when nothing matches.
"""

from __future__ import annotations

import logging
from typing import Any

from portal.core.errors import NotFoundError
from portal.core.models import (
    CONFIGURATION_FEATURES,
    BrowserShortcut,
    Company,
    CompanySetupProgress,
    Invitation,
    InvitationStatus,
    Role,
    SetupStep,
    ShortcutCategory,
    Subscription,
    User,
    UserInvitationStatus,
)
from portal.core.utils import utc_now
from portal.storage.base import Collections, DocumentStore, Filter

logger = logging.getLogger(__name__)


def domain_shortcuts(company_id: str, domain: str) -> list[BrowserShortcut]:
    """
    The four shortcuts generated for a company's domain.

    Ids are a pure function of the company id, so regenerating overwrites.
    """
    def suggested(suffix: str, name: str, url: str, icon: str, order: int) -> BrowserShortcut:
        return BrowserShortcut(
            id=f"shortcut_{company_id}_{suffix}",
            company_id=company_id,
            name=name,
            url=url,
            icon=icon,
            description=f"Access {name}",
            order=order,
            category=ShortcutCategory.SUGGESTED,
            is_suggested=True,
            source="auto-generated",
        )

    return [
        suggested("gmail", "Gmail", "https://mail.google.com", "gmail-icon", 1),
        suggested("calendar", "Google Calendar", "https://calendar.google.com", "calendar-icon", 2),
        suggested("drive", "Google Drive", "https://drive.google.com", "drive-icon", 3),
        BrowserShortcut(
            id=f"shortcut_{company_id}_company",
            company_id=company_id,
            name=f"{domain} Website",
            url=f"https://{domain}",
            icon="company-icon",
            description=f"Access {domain} website",
            order=0,
            category=ShortcutCategory.COMPANY,
            is_suggested=True,
            source="auto-generated",
        ),
    ]


class DataStore:
    """Persistence capability for companies, users, invitations and the rest."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def close(self) -> None:
        await self.store.close()

    # =========================================================================
    # Internal helpers
    # =========================================================================

    async def _get(self, collection: str, id: str, model: type, label: str):
        doc = await self.store.get(collection, id)
        if doc is None:
            raise NotFoundError(f"{label} not found")
        return model.model_validate(doc)

    async def _find_one(self, collection: str, filters: list[Filter], model: type):
        docs = await self.store.query(collection, filters, limit=1)
        return model.model_validate(docs[0]) if docs else None

    async def _list(self, collection: str, filters: list[Filter], model: type, **kwargs: Any) -> list:
        return [model.model_validate(doc) for doc in await self.store.query(collection, filters, **kwargs)]

    # =========================================================================
    # Companies
    # =========================================================================

    async def save_company(self, company: Company) -> Company:
        await self.store.save(Collections.COMPANIES, company.id, company.to_document())
        return company

    async def update_company(self, company: Company) -> Company:
        company.updated_at = utc_now()
        return await self.save_company(company)

    async def get_company(self, company_id: str) -> Company:
        return await self._get(Collections.COMPANIES, company_id, Company, "Company")

    async def find_company_by_domain(self, domain: str) -> Company | None:
        return await self._find_one(Collections.COMPANIES, [("domain", "==", domain)], Company)

    async def delete_company(self, company_id: str) -> bool:
        return await self.store.delete(Collections.COMPANIES, company_id)

    async def list_companies(self, limit: int, offset: int) -> list[Company]:
        """Newest first."""
        return await self._list(
            Collections.COMPANIES, [], Company,
            order_by="created_at", descending=True, limit=limit, offset=offset,
        )

    async def count_companies(self) -> int:
        return await self.store.count(Collections.COMPANIES)

    # =========================================================================
    # Users
    # =========================================================================

    async def save_user(self, user: User) -> User:
        await self.store.save(Collections.USERS, user.id, user.to_document())
        return user

    async def update_user(self, user: User) -> User:
        user.updated_at = utc_now()
        return await self.save_user(user)

    async def get_user(self, user_id: str) -> User:
        return await self._get(Collections.USERS, user_id, User, "User")

    async def find_user_by_email(self, email: str) -> User | None:
        return await self._find_one(Collections.USERS, [("email", "==", email)], User)

    async def delete_user(self, user_id: str) -> bool:
        return await self.store.delete(Collections.USERS, user_id)

    async def list_users(self, company_id: str) -> list[User]:
        return await self._list(Collections.USERS, [("company_id", "==", company_id)], User)

    async def count_users(self, company_id: str) -> int:
        return await self.store.count(Collections.USERS, [("company_id", "==", company_id)])

    async def count_active_users(self, company_id: str) -> int:
        return await self.store.count(
            Collections.USERS, [("company_id", "==", company_id), ("is_active", "==", True)],
        )

    async def count_invited_users(self, company_id: str) -> int:
        return await self.store.count(
            Collections.USERS,
            [("company_id", "==", company_id), ("invitation_status", "==", UserInvitationStatus.INVITED.value)],
        )

    async def count_active_admins(self, company_id: str) -> int:
        return await self.store.count(
            Collections.USERS,
            [
                ("company_id", "==", company_id),
                ("role", "==", Role.ADMIN.value),
                ("is_active", "==", True),
            ],
        )

    # =========================================================================
    # Invitations
    # =========================================================================

    async def save_invitation(self, invitation: Invitation) -> Invitation:
        await self.store.save(Collections.INVITATIONS, invitation.id, invitation.to_document())
        return invitation

    async def get_invitation(self, invitation_id: str) -> Invitation:
        return await self._get(Collections.INVITATIONS, invitation_id, Invitation, "Invitation")

    async def find_invitation_by_token(self, token: str) -> Invitation | None:
        return await self._find_one(Collections.INVITATIONS, [("token", "==", token)], Invitation)

    async def delete_invitation(self, invitation_id: str) -> bool:
        return await self.store.delete(Collections.INVITATIONS, invitation_id)

    async def list_invitations(self, company_id: str) -> list[Invitation]:
        return await self._list(Collections.INVITATIONS, [("company_id", "==", company_id)], Invitation)

    async def list_pending_invitations(self, company_id: str) -> list[Invitation]:
        return await self._list(
            Collections.INVITATIONS,
            [("company_id", "==", company_id), ("status", "==", InvitationStatus.PENDING.value)],
            Invitation,
        )

    async def count_pending_invitations(self, company_id: str) -> int:
        return await self.store.count(
            Collections.INVITATIONS,
            [("company_id", "==", company_id), ("status", "==", InvitationStatus.PENDING.value)],
        )

    async def resend_invitation(self, invitation_id: str) -> Invitation:
        """Record another delivery of an invitation. Status is left as is."""
        invitation = await self.get_invitation(invitation_id)
        now = utc_now()
        invitation.sent_at = now
        invitation.last_sent_at = now
        invitation.sent_count += 1
        return await self.save_invitation(invitation)

    async def delete_expired_invitations(self) -> int:
        """Hard-delete every invitation past its expiry, whatever its status."""
        expired = await self.store.query(Collections.INVITATIONS, [("expires_at", "<", utc_now())])
        if not expired:
            return 0
        ids = [doc["id"] for doc in expired]
        deleted = await self.store.delete_many(Collections.INVITATIONS, ids)
        logger.info(f"Deleted {deleted} expired invitations")
        return deleted

    # =========================================================================
    # Browser shortcuts
    # =========================================================================

    async def save_shortcut(self, shortcut: BrowserShortcut) -> BrowserShortcut:
        await self.store.save(Collections.SHORTCUTS, shortcut.id, shortcut.to_document())
        return shortcut

    async def update_shortcut(self, shortcut: BrowserShortcut) -> BrowserShortcut:
        shortcut.updated_at = utc_now()
        return await self.save_shortcut(shortcut)

    async def get_shortcut(self, shortcut_id: str) -> BrowserShortcut:
        return await self._get(Collections.SHORTCUTS, shortcut_id, BrowserShortcut, "Shortcut")

    async def delete_shortcut(self, shortcut_id: str) -> bool:
        return await self.store.delete(Collections.SHORTCUTS, shortcut_id)

    async def list_shortcuts(
        self,
        company_id: str,
        category: ShortcutCategory | str | None = None,
    ) -> list[BrowserShortcut]:
        """Shortcuts of a company ordered by `order` ascending."""
        filters: list[Filter] = [("company_id", "==", company_id)]
        if category == ShortcutCategory.SUGGESTED:
            filters.append(("is_suggested", "==", True))
        elif category == ShortcutCategory.CUSTOM:
            filters.append(("category", "==", ShortcutCategory.CUSTOM.value))
        return await self._list(Collections.SHORTCUTS, filters, BrowserShortcut, order_by="order")

    async def delete_shortcuts_by_company(self, company_id: str) -> int:
        docs = await self.store.query(Collections.SHORTCUTS, [("company_id", "==", company_id)])
        return await self.store.delete_many(Collections.SHORTCUTS, [doc["id"] for doc in docs])

    async def generate_shortcuts_for_domain(self, company_id: str, domain: str) -> list[BrowserShortcut]:
        shortcuts = domain_shortcuts(company_id, domain)
        for shortcut in shortcuts:
            await self.save_shortcut(shortcut)
        return shortcuts

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def save_subscription(self, subscription: Subscription) -> Subscription:
        subscription.updated_at = utc_now()
        await self.store.save(Collections.SUBSCRIPTIONS, subscription.id, subscription.to_document())
        return subscription

    async def find_subscription_by_company(self, company_id: str) -> Subscription | None:
        return await self._find_one(Collections.SUBSCRIPTIONS, [("company_id", "==", company_id)], Subscription)

    async def delete_subscription(self, subscription_id: str) -> bool:
        return await self.store.delete(Collections.SUBSCRIPTIONS, subscription_id)

    # =========================================================================
    # Setup progress and configuration flags
    # =========================================================================

    async def get_setup_progress(self, company_id: str) -> CompanySetupProgress:
        """Stored wizard progress, or a fresh record at the first step."""
        doc = await self.store.get(Collections.SETUP_PROGRESS, company_id)
        if doc is None:
            return CompanySetupProgress(company_id=company_id, step=SetupStep.DOMAIN, progress=0)
        return CompanySetupProgress.model_validate(doc)

    async def save_setup_progress(self, progress: CompanySetupProgress) -> CompanySetupProgress:
        progress.last_updated = utc_now()
        await self.store.save(Collections.SETUP_PROGRESS, progress.company_id, progress.to_document())
        return progress

    async def update_setup_step(self, company_id: str, step: SetupStep | str, progress: int) -> CompanySetupProgress:
        record = await self.get_setup_progress(company_id)
        record.step = step
        record.progress = progress
        return await self.save_setup_progress(record)

    async def delete_setup_progress(self, company_id: str) -> bool:
        return await self.store.delete(Collections.SETUP_PROGRESS, company_id)

    async def update_configuration_status(self, company_id: str, feature: str, status: bool) -> Company:
        """
        Set one configuration flag on a company.

        Unknown feature keys leave the company untouched.
        """
        company = await self.get_company(company_id)
        attr = CONFIGURATION_FEATURES.get(feature)
        if attr is None:
            logger.info(f"Ignoring unknown configuration feature '{feature}' for {company_id}")
            return company
        setattr(company, attr, status)
        return await self.update_company(company)

    async def get_configuration_status(self, company_id: str) -> dict[str, bool]:
        company = await self.get_company(company_id)
        return company.configuration_status()
