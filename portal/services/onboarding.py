"""
Onboarding service - the company setup wizard.

Two progress representations live side by side and are never merged:

1. Wizard progress (CompanySetupProgress): a (step, progress) pair the
   client reports and we store verbatim.
2. Aggregate progress: derived on every stats request from the company's
   flags, 20 points per milestone (domain, color theme, users invited,
   subscription active, download ready).

Download info is gated on the company's download_ready flag alone.
"""

from __future__ import annotations

import logging
from typing import Any

from portal.auth.context import Principal
from portal.core.errors import InvalidState
from portal.core.models import BrowserShortcut, CompanySetupProgress, SetupStep
from portal.core.utils import utc_now
from portal.services.base import PortalService
from portal.services.invitations import InvitationService

logger = logging.getLogger(__name__)


DOWNLOAD_INFO = {
    "download_url": "https://download.pab-smb.com/browser/latest",
    "version": "1.0.0",
    "file_size": "45.2 MB",
    "supported_os": ["macOS", "Windows", "Linux"],
    "installation_instructions": "Download and run the installer. Follow the setup wizard to complete installation.",
}


class OnboardingService(PortalService):
    """Setup wizard state and the actions it drives."""

    async def get_progress(self, principal: Principal) -> CompanySetupProgress:
        return await self.store.get_setup_progress(self.company_id(principal))

    async def update_step(
        self,
        principal: Principal,
        step: SetupStep | str,
        progress: int,
    ) -> CompanySetupProgress:
        """Store the wizard position as given. Progress must be 0-100."""
        company_id = self.company_id(principal)
        self.require_admin(principal, "Only admins can update company setup")
        if not 0 <= progress <= 100:
            raise InvalidState("Progress must be between 0 and 100")
        return await self.store.update_setup_step(company_id, step, progress)

    async def stats(self, principal: Principal) -> dict[str, Any]:
        company_id = self.company_id(principal)
        company = await self.store.get_company(company_id)
        subscription = await self.store.find_subscription_by_company(company_id)
        max_users = subscription.max_users if subscription else self.settings.default_max_users

        return {
            "total_users": await self.store.count_users(company_id),
            "active_users": await self.store.count_active_users(company_id),
            "invited_users": await self.store.count_invited_users(company_id),
            "pending_invitations": await self.store.count_pending_invitations(company_id),
            "max_users": max_users,
            "setup_progress": company.setup_score(),
            "configuration_status": company.configuration_status(),
        }

    async def get_configuration(self, principal: Principal) -> dict[str, bool]:
        return await self.store.get_configuration_status(self.company_id(principal))

    async def update_configuration(self, principal: Principal, feature: str, status: bool) -> dict[str, Any]:
        """
        Toggle one configuration flag.

        Unknown features are ignored rather than rejected; the response
        echoes the feature key so callers can spot a typo.
        """
        company_id = self.company_id(principal)
        self.require_admin(principal, "Only admins can update company setup")
        company = await self.store.update_configuration_status(company_id, feature, status)
        configuration = company.configuration_status()
        return {
            "feature": feature,
            "status": status,
            "applied": feature in configuration,
            "configuration_status": configuration,
        }

    async def generate_shortcuts(self, principal: Principal, domain: str | None = None) -> list[BrowserShortcut]:
        """Upsert the four domain shortcuts; defaults to the company's own domain."""
        company_id = self.company_id(principal)
        self.require_admin(principal, "Only admins can update company setup")
        if not domain:
            domain = (await self.store.get_company(company_id)).domain
        return await self.store.generate_shortcuts_for_domain(company_id, domain)

    async def nudge_users(self, principal: Principal) -> int:
        self.require_admin(principal, "Only admins can nudge users")
        invitations = InvitationService(self.store, self.auth_provider, self.settings)
        resent = await invitations.nudge_pending(principal)
        logger.info(f"Nudged {resent} pending invitations for {principal.company_id}")
        return resent

    async def download_info(self, principal: Principal) -> dict[str, Any]:
        company = await self.store.get_company(self.company_id(principal))
        if not company.download_ready:
            raise InvalidState("Company setup not complete. Download not ready.")
        return {**DOWNLOAD_INFO, "release_date": utc_now().date().isoformat()}
