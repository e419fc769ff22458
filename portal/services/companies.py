"""
Company service - tenant creation, settings, deletion and listing.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from portal.auth.context import Principal
from portal.core.errors import Conflict
from portal.core.models import Company, CompanyStatus, Role
from portal.core.utils import utc_now
from portal.services.base import PortalService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100


class CompanyService(PortalService):
    """Tenant lifecycle."""

    async def _ensure_domain_free(self, domain: str, company_id: str | None = None) -> None:
        """Conflict if another company owns this domain (exact match)."""
        existing = await self.store.find_company_by_domain(domain)
        if existing is not None and existing.id != company_id:
            raise Conflict("Domain already taken")

    async def create_company(
        self,
        principal: Principal,
        name: str,
        domain: str,
        color_theme: str = "",
    ) -> Company:
        """
        Create a company with the caller as its admin.

        The company starts on a trial; only the billing system moves it to
        active.
        """
        await self._ensure_domain_free(domain)

        company = Company(
            name=name,
            domain=domain,
            color_theme=color_theme,
            admin_user_id=principal.user_id,
            status=CompanyStatus.TRIAL,
            trial_ends_at=utc_now() + timedelta(days=self.settings.trial_days),
        )
        await self.store.save_company(company)

        user = await self.store.get_user(principal.user_id)
        user.company_id = company.id
        user.role = Role.ADMIN
        await self.store.update_user(user)

        logger.info(f"Company {company.id} created by {principal.user_id}")
        return company

    async def get_company(self, principal: Principal) -> Company:
        return await self.store.get_company(self.company_id(principal))

    async def update_company(
        self,
        principal: Principal,
        name: str | None = None,
        domain: str | None = None,
        color_theme: str | None = None,
        logo_url: str | None = None,
    ) -> Company:
        """Partial update; None leaves a field unchanged."""
        company = await self.get_company(principal)
        self.require_admin(principal, "Only admins can update company settings")

        if domain is not None and domain != company.domain:
            await self._ensure_domain_free(domain, company.id)
            company.domain = domain
        if name is not None:
            company.name = name
        if color_theme is not None:
            company.color_theme = color_theme
        if logo_url is not None:
            company.logo_url = logo_url

        return await self.store.update_company(company)

    async def delete_company(self, principal: Principal) -> None:
        """
        Delete the caller's company and everything scoped to it.

        Invitations, shortcuts, setup progress and the subscription are
        removed. Users keep their identities but are detached from the
        company.
        """
        company_id = self.company_id(principal)
        self.require_admin(principal, "Only admins can delete company")
        company = await self.store.get_company(company_id)

        invitations = await self.store.list_invitations(company_id)
        for invitation in invitations:
            await self.store.delete_invitation(invitation.id)
        await self.store.delete_shortcuts_by_company(company_id)
        await self.store.delete_setup_progress(company_id)

        subscription = await self.store.find_subscription_by_company(company_id)
        if subscription is not None:
            await self.store.delete_subscription(subscription.id)

        for user in await self.store.list_users(company_id):
            user.company_id = None
            await self.store.update_user(user)

        await self.store.delete_company(company.id)
        logger.info(f"Company {company_id} deleted by {principal.user_id}")

    async def company_stats(self, principal: Principal) -> dict[str, Any]:
        company = await self.get_company(principal)
        return {
            "total_users": await self.store.count_users(company.id),
            "company_status": company.status,
            "trial_ends_at": company.trial_ends_at,
            "onboarded": company.onboarded,
        }

    async def list_companies(self, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> dict[str, Any]:
        """
        All companies, newest first.

        Out-of-range paging values fall back to page 1 / the default limit.
        """
        if page < 1:
            page = 1
        if limit < 1 or limit > MAX_PAGE_LIMIT:
            limit = DEFAULT_PAGE_LIMIT

        companies = await self.store.list_companies(limit=limit, offset=(page - 1) * limit)
        return {
            "companies": companies,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": await self.store.count_companies(),
            },
        }
