"""
Tests for the setup wizard.

Two progress values exist side by side: the wizard step the client reports
and the aggregate score derived from the company's flags.
"""

import pytest

from conftest import make_admin, make_member
from portal.core.errors import Forbidden, InvalidState
from portal.core.models import Company, Subscription


# =============================================================================
# Aggregate score
# =============================================================================


class TestSetupScore:
    def test_empty_company(self):
        assert Company(name="Acme", domain="", admin_user_id="u1").setup_score() == 0

    def test_each_milestone_is_twenty(self):
        company = Company(name="Acme", domain="acme.com", admin_user_id="u1")
        assert company.setup_score() == 20

        company.color_theme = "#112233"
        assert company.setup_score() == 40

        company.users_invited = True
        company.subscription_active = True
        company.download_ready = True
        assert company.setup_score() == 100

    def test_other_flags_do_not_count(self):
        company = Company(
            name="Acme",
            domain="",
            admin_user_id="u1",
            website_security_configured=True,
            malware_security_configured=True,
            data_controls_configured=True,
            reporting_configured=True,
            browser_customized=True,
        )
        assert company.setup_score() == 0


# =============================================================================
# OnboardingService
# =============================================================================


class TestOnboardingService:
    @pytest.mark.asyncio
    async def test_progress_defaults_to_first_step(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")

        progress = await services.onboarding.get_progress(admin)

        assert (progress.company_id, progress.step, progress.progress) == (company.id, "domain", 0)

    @pytest.mark.asyncio
    async def test_step_is_stored_not_derived(self, services, store):
        admin, _ = await make_admin(services, store, "a@x.com", "acme.com")

        await services.onboarding.update_step(admin, "invitations", 55)
        progress = await services.onboarding.get_progress(admin)
        stats = await services.onboarding.stats(admin)

        assert (progress.step, progress.progress) == ("invitations", 55)
        assert stats["setup_progress"] == 20  # domain only

    @pytest.mark.asyncio
    async def test_step_progress_bounds(self, services, store):
        admin, _ = await make_admin(services, store, "a@x.com", "acme.com")

        with pytest.raises(InvalidState):
            await services.onboarding.update_step(admin, "domain", 101)

    @pytest.mark.asyncio
    async def test_setup_mutations_are_admin_only(self, services, store):
        _, company = await make_admin(services, store, "a@x.com", "acme.com")
        member = await make_member(services, store, "m@x.com", company.id)

        with pytest.raises(Forbidden):
            await services.onboarding.update_step(member, "domain", 10)
        with pytest.raises(Forbidden):
            await services.onboarding.update_configuration(member, "reporting", True)

    @pytest.mark.asyncio
    async def test_configuration_status_has_every_key(self, services, store):
        admin, _ = await make_admin(services, store, "a@x.com", "acme.com")

        result = await services.onboarding.update_configuration(admin, "website_security", True)
        status = await services.onboarding.get_configuration(admin)

        assert result["applied"] is True
        assert status["website_security"] is True
        assert set(status) == {
            "website_security",
            "malware_security",
            "data_controls",
            "reporting",
            "browser_customization",
            "subscription",
            "users_invited",
            "download_ready",
        }
        assert not any(v for k, v in status.items() if k != "website_security")

    @pytest.mark.asyncio
    async def test_unknown_feature_is_ignored(self, services, store):
        admin, _ = await make_admin(services, store, "a@x.com", "acme.com")

        result = await services.onboarding.update_configuration(admin, "websit_security", True)

        assert result["applied"] is False
        assert not any(result["configuration_status"].values())

    @pytest.mark.asyncio
    async def test_stats(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        await make_member(services, store, "m@x.com", company.id)
        await services.invitations.create_invitations(admin, ["new@x.com"])

        stats = await services.onboarding.stats(admin)

        assert stats["total_users"] == 2
        assert stats["active_users"] == 2
        assert stats["pending_invitations"] == 1
        assert stats["max_users"] == 20

    @pytest.mark.asyncio
    async def test_stats_max_users_from_subscription(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        await store.save_subscription(Subscription(company_id=company.id, max_users=50))

        assert (await services.onboarding.stats(admin))["max_users"] == 50


class TestDownloadGate:
    @pytest.mark.asyncio
    async def test_not_ready(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        # Every other milestone complete; still gated
        for feature in ("subscription", "users_invited"):
            await services.onboarding.update_configuration(admin, feature, True)

        with pytest.raises(InvalidState, match="Download not ready"):
            await services.onboarding.download_info(admin)

    @pytest.mark.asyncio
    async def test_ready_regardless_of_score(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        company = await store.get_company(company.id)
        company.domain = ""
        await store.update_company(company)
        await services.onboarding.update_configuration(admin, "download_ready", True)

        info = await services.onboarding.download_info(admin)

        assert info["download_url"].startswith("https://")
        assert set(info) >= {"version", "release_date", "file_size", "supported_os", "installation_instructions"}


class TestShortcutGeneration:
    @pytest.mark.asyncio
    async def test_generates_four(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")

        generated = await services.onboarding.generate_shortcuts(admin)
        shortcuts = await store.list_shortcuts(company.id)

        assert len(generated) == 4
        assert [s.name for s in shortcuts] == ["acme.com Website", "Gmail", "Google Calendar", "Google Drive"]
        assert shortcuts[0].url == "https://acme.com"

    @pytest.mark.asyncio
    async def test_regenerating_overwrites(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")

        await services.onboarding.generate_shortcuts(admin, "acme.com")
        await services.onboarding.generate_shortcuts(admin, "acme.com")

        assert len(await store.list_shortcuts(company.id)) == 4

    @pytest.mark.asyncio
    async def test_custom_shortcuts_survive(self, services, store):
        admin, company = await make_admin(services, store, "a@x.com", "acme.com")
        await services.shortcuts.create_shortcut(admin, "Wiki", "https://wiki.acme.com")

        await services.onboarding.generate_shortcuts(admin)

        assert len(await store.list_shortcuts(company.id)) == 5
        assert [s.name for s in await store.list_shortcuts(company.id, "custom")] == ["Wiki"]
