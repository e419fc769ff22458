"""
Tests for the company and user lifecycle.
"""

import pytest

from conftest import make_admin, make_member
from portal.auth.context import Principal
from portal.core.errors import AuthProviderError, Conflict, Forbidden, InvalidCredentials, InvalidState, NotFoundError
from portal.core.models import BrowserShortcut, Role, Subscription


# =============================================================================
# Registration
# =============================================================================


class TestRegistration:
    @pytest.mark.asyncio
    async def test_registrant_is_admin_without_company(self, services):
        user, tokens = await services.accounts.register("a@x.com", "pw123456", "A")

        assert user.role == "admin"
        assert user.company_id is None
        assert user.is_active
        assert tokens.access_token and tokens.refresh_token

    @pytest.mark.asyncio
    async def test_duplicate_email(self, services):
        await services.accounts.register("a@x.com", "pw123456", "A")

        with pytest.raises(Conflict, match="User already exists"):
            await services.accounts.register("a@x.com", "other-password", "Other")

    @pytest.mark.asyncio
    async def test_login_checks_password(self, services):
        await services.accounts.register("a@x.com", "pw123456", "A")

        user, _ = await services.accounts.login("a@x.com", "pw123456")
        assert user.last_login_at is not None

        with pytest.raises(InvalidCredentials):
            await services.accounts.login("a@x.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_refresh_rejects_deactivated_user(self, services, store):
        user, tokens = await services.accounts.register("a@x.com", "pw123456", "A")
        assert (await services.accounts.refresh(Principal.from_user(user), tokens.refresh_token)).access_token

        user.is_active = False
        await store.update_user(user)

        with pytest.raises(Forbidden):
            await services.accounts.refresh(Principal.from_user(user), tokens.refresh_token)


# =============================================================================
# Companies
# =============================================================================


class TestCompanies:
    @pytest.mark.asyncio
    async def test_create_makes_caller_admin(self, services, store, settings):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")

        assert admin.company_id == company.id
        assert admin.role == "admin"
        assert company.admin_user_id == admin.user_id
        assert company.status == "trial"
        assert company.trial_ends_at is not None

    @pytest.mark.asyncio
    async def test_domain_taken(self, services, store):
        await make_admin(services, store, "a@x.com", "acme.com")
        user_b, _ = await services.accounts.register("b@y.com", "pw123456", "B")

        with pytest.raises(Conflict, match="Domain already taken"):
            await services.companies.create_company(Principal.from_user(user_b), "Acme 2", "acme.com")

    @pytest.mark.asyncio
    async def test_update_to_own_domain(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")

        updated = await services.companies.update_company(admin, name="Acme Corp", domain="acme.com")

        assert (updated.name, updated.domain) == ("Acme Corp", "acme.com")

    @pytest.mark.asyncio
    async def test_update_to_other_tenants_domain(self, services, store):
        await make_admin(services, store, "a@x.com", "acme.com")
        admin_b, _ = await make_admin(services, store, "b@y.com", "beta.com")

        with pytest.raises(Conflict):
            await services.companies.update_company(admin_b, domain="acme.com")

    @pytest.mark.asyncio
    async def test_update_leaves_absent_fields(self, services, store):
        admin, _ = await make_admin(services, store, "a@x.com", "acme.com")

        updated = await services.companies.update_company(admin, color_theme="#000000")

        assert (updated.name, updated.domain, updated.color_theme) == ("acme.com Inc", "acme.com", "#000000")

    @pytest.mark.asyncio
    async def test_update_admin_only(self, services, store):
        _, company = await make_admin(services, store, "a@x.com", "acme.com")
        member = await make_member(services, store, "m@x.com", company.id)

        with pytest.raises(Forbidden, match="Only admins can update company settings"):
            await services.companies.update_company(member, name="Hijacked")

    @pytest.mark.asyncio
    async def test_delete_cascades(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        member = await make_member(services, store, "m@x.com", company.id)
        await services.invitations.create_invitations(admin, ["new@x.com"])
        await services.onboarding.generate_shortcuts(admin)
        await services.onboarding.update_step(admin, "customization", 20)
        await store.save_subscription(Subscription(company_id=company.id))

        await services.companies.delete_company(admin)

        with pytest.raises(NotFoundError):
            await store.get_company(company.id)
        assert await store.list_invitations(company.id) == []
        assert await store.list_shortcuts(company.id) == []
        assert await store.find_subscription_by_company(company.id) is None
        assert (await store.get_setup_progress(company.id)).progress == 0
        assert (await store.get_user(member.user_id)).company_id is None
        assert (await store.get_user(admin.user_id)).company_id is None

    @pytest.mark.asyncio
    async def test_domain_free_after_delete(self, services, store):
        admin, _ = await make_admin(services, store, "a@x.com", "acme.com")
        await services.companies.delete_company(admin)

        await make_admin(services, store, "b@y.com", "acme.com")

    @pytest.mark.asyncio
    async def test_list_companies_pagination(self, services, store):
        for i in range(3):
            await make_admin(services, store, f"a{i}@x.com", f"c{i}.com")

        result = await services.companies.list_companies(page=2, limit=2)

        assert len(result["companies"]) == 1
        assert result["pagination"] == {"page": 2, "limit": 2, "total": 3}

    @pytest.mark.asyncio
    async def test_list_companies_clamps_paging(self, services):
        result = await services.companies.list_companies(page=0, limit=1000)

        assert result["pagination"]["page"] == 1
        assert result["pagination"]["limit"] == 10


# =============================================================================
# Users
# =============================================================================


class TestUsers:
    @pytest.mark.asyncio
    async def test_list_is_tenant_scoped(self, services, store):
        admin_a, company_a = await make_admin(services, store, "a@x.com", "a.com")
        await make_member(services, store, "m@x.com", company_a.id)
        await make_admin(services, store, "b@y.com", "b.com")

        emails = sorted(u.email for u in await services.users.list_users(admin_a))

        assert emails == ["a@x.com", "m@x.com"]

    @pytest.mark.asyncio
    async def test_member_renames_self(self, services, store):
        _, company = await make_admin(services, store, "a@x.com", "acme.com")
        member = await make_member(services, store, "m@x.com", company.id)

        updated = await services.users.update_user(member, member.user_id, name="New Name")

        assert updated.name == "New Name"

    @pytest.mark.asyncio
    async def test_member_limits(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        member = await make_member(services, store, "m@x.com", company.id)

        with pytest.raises(Forbidden, match="Only admins can update other users"):
            await services.users.update_user(member, admin.user_id, name="X")
        with pytest.raises(Forbidden, match="Only admins can change user roles"):
            await services.users.update_user(member, member.user_id, role=Role.ADMIN)
        with pytest.raises(Forbidden, match="Only admins can deactivate users"):
            await services.users.update_user(member, member.user_id, is_active=False)

    @pytest.mark.asyncio
    async def test_admin_updates_member(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        member = await make_member(services, store, "m@x.com", company.id)

        updated = await services.users.update_user(admin, member.user_id, role=Role.ADMIN, is_active=False)

        assert (updated.role, updated.is_active) == ("admin", False)

    @pytest.mark.asyncio
    async def test_last_admin_cannot_be_deleted(self, services, store):
        admin, _ = await make_admin(services, store, "a@x.com", "acme.com")

        with pytest.raises(InvalidState, match="Cannot delete the last admin user"):
            await services.users.delete_user(admin, admin.user_id)
        assert await store.get_user(admin.user_id)

    @pytest.mark.asyncio
    async def test_inactive_admin_blocked_with_single_active_admin(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        second = await make_member(services, store, "s@x.com", company.id, role="admin")
        await services.users.update_user(admin, second.user_id, is_active=False)
        assert await store.count_active_admins(company.id) == 1

        with pytest.raises(InvalidState, match="Cannot delete the last admin user"):
            await services.users.delete_user(admin, second.user_id)
        assert await store.get_user(second.user_id)

    @pytest.mark.asyncio
    async def test_one_of_two_admins_can_be_deleted(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        second = await make_member(services, store, "s@x.com", company.id, role="admin")

        await services.users.delete_user(admin, second.user_id)

        with pytest.raises(NotFoundError):
            await store.get_user(second.user_id)

    @pytest.mark.asyncio
    async def test_provider_failure_keeps_record(self, services, store, auth_provider, monkeypatch):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        member = await make_member(services, store, "m@x.com", company.id)

        async def refuse(user_id):
            raise AuthProviderError("upstream down")

        monkeypatch.setattr(auth_provider, "delete_user", refuse)

        with pytest.raises(AuthProviderError):
            await services.users.delete_user(admin, member.user_id)
        assert (await store.get_user(member.user_id)).email == "m@x.com"


# =============================================================================
# Cross-tenant isolation
# =============================================================================


class TestCrossTenant:
    @pytest.mark.asyncio
    async def test_every_entity_kind(self, services, store):
        admin_a, company_a = await make_admin(services, store, "a@x.com", "a.com")
        admin_b, _ = await make_admin(services, store, "b@y.com", "b.com")
        member_a = await make_member(services, store, "m@x.com", company_a.id)
        shortcut = await store.save_shortcut(BrowserShortcut(company_id=company_a.id, name="Wiki", url="https://wiki"))
        [invitation] = await services.invitations.create_invitations(admin_a, ["new@x.com"])

        with pytest.raises(Forbidden, match="Access denied"):
            await services.users.get_user(admin_b, member_a.user_id)
        with pytest.raises(Forbidden, match="Access denied"):
            await services.users.update_user(admin_b, member_a.user_id, name="X")
        with pytest.raises(Forbidden, match="Access denied"):
            await services.users.delete_user(admin_b, member_a.user_id)
        with pytest.raises(Forbidden, match="Access denied"):
            await services.shortcuts.get_shortcut(admin_b, shortcut.id)
        with pytest.raises(Forbidden, match="Access denied"):
            await services.shortcuts.update_shortcut(admin_b, shortcut.id, name="X")
        with pytest.raises(Forbidden, match="Access denied"):
            await services.shortcuts.delete_shortcut(admin_b, shortcut.id)
        with pytest.raises(Forbidden, match="Access denied"):
            await services.invitations.get_invitation(admin_b, invitation.id)

    @pytest.mark.asyncio
    async def test_no_company(self, services):
        user, _ = await services.accounts.register("a@x.com", "pw123456", "A")

        with pytest.raises(Forbidden, match="User not associated with any company"):
            await services.users.list_users(Principal.from_user(user))
