"""
Invitation service - the invitation lifecycle.

An invitation stays pending across sends until it is accepted. Expiry is
detected lazily on accept and garbage-collected by the sweep; there is
no timer.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from portal.auth.context import Principal
from portal.core.errors import Forbidden, InvalidState, NotFoundError, PortalError
from portal.core.models import Invitation, InvitationStatus, Role, User, UserInvitationStatus
from portal.core.utils import as_utc, generate_token, utc_now
from portal.services.base import PortalService

logger = logging.getLogger(__name__)


class InvitationService(PortalService):
    """Create, accept, resend and expire invitations."""

    async def _deliver(self, invitation: Invitation) -> bool:
        """Best-effort delivery. Failures are logged, never raised."""
        try:
            await self.auth_provider.send_invitation(
                invitation.email,
                invitation.company_id,
                invitation.invited_by,
                invitation.token,
            )
        except PortalError as e:
            logger.warning(f"Invitation {invitation.id} to {invitation.email} not delivered: {e.message}")
            return False
        return True

    async def create_invitations(self, principal: Principal, emails: list[str]) -> list[Invitation]:
        """
        Invite each email that does not already belong to a user.

        Returns the invitations created; skipped emails are simply absent.
        """
        company_id = self.company_id(principal)
        self.require_admin(principal, "Only admins can invite users")

        created: list[Invitation] = []
        for email in dict.fromkeys(emails):
            if await self.store.find_user_by_email(email) is not None:
                logger.info(f"Skipping invitation for existing user {email}")
                continue

            now = utc_now()
            invitation = Invitation(
                email=email,
                company_id=company_id,
                invited_by=principal.user_id,
                token=generate_token(),
                status=InvitationStatus.PENDING,
                expires_at=now + timedelta(days=self.settings.invitation_expiry_days),
            )
            await self.store.save_invitation(invitation)

            if await self._deliver(invitation):
                invitation.sent_at = now
                invitation.last_sent_at = now
                invitation.sent_count = 1
                await self.store.save_invitation(invitation)

            created.append(invitation)

        logger.info(f"{len(created)} invitations created for company {company_id}")
        return created

    async def list_invitations(self, principal: Principal) -> list[Invitation]:
        company_id = self.company_id(principal)
        self.require_admin(principal, "Only admins can view invitations")
        return await self.store.list_invitations(company_id)

    async def get_invitation(self, principal: Principal, invitation_id: str) -> Invitation:
        self.require_admin(principal, "Only admins can view invitations")
        invitation = await self.store.get_invitation(invitation_id)
        self.check_tenant(principal, invitation.company_id)
        return invitation

    async def delete_invitation(self, principal: Principal, invitation_id: str) -> None:
        self.require_admin(principal, "Only admins can delete invitations")
        invitation = await self.store.get_invitation(invitation_id)
        self.check_tenant(principal, invitation.company_id)
        await self.store.delete_invitation(invitation_id)

    async def accept_invitation(self, principal: Principal, token: str) -> User:
        """
        Join the invitation's company as a regular user.

        Checks, in order: token exists, not expired, not already accepted,
        caller's email matches exactly.
        """
        invitation = await self.store.find_invitation_by_token(token)
        if invitation is None:
            raise NotFoundError("Invalid invitation token")

        now = utc_now()
        if now > as_utc(invitation.expires_at):
            raise InvalidState("Invitation has expired")
        if invitation.status == InvitationStatus.ACCEPTED:
            raise InvalidState("Invitation has already been accepted")
        if principal.email != invitation.email:
            raise Forbidden("Email does not match invitation")

        user = await self.store.get_user(principal.user_id)
        user.company_id = invitation.company_id
        user.role = Role.USER
        user.invitation_status = UserInvitationStatus.ACTIVE
        user.activated_at = now
        await self.store.update_user(user)

        invitation.status = InvitationStatus.ACCEPTED
        invitation.accepted_at = now
        await self.store.save_invitation(invitation)

        logger.info(f"Invitation {invitation.id} accepted by {user.id}")
        return user

    async def nudge_pending(self, principal: Principal) -> int:
        """
        Resend every pending invitation of the caller's company.

        One failure does not stop the batch. Returns how many were resent.
        """
        company_id = self.company_id(principal)
        resent = 0
        for invitation in await self.store.list_pending_invitations(company_id):
            try:
                await self.auth_provider.send_invitation(
                    invitation.email,
                    invitation.company_id,
                    invitation.invited_by,
                    invitation.token,
                )
                await self.store.resend_invitation(invitation.id)
            except PortalError as e:
                logger.warning(f"Nudge for invitation {invitation.id} ({invitation.email}) failed: {e.message}")
                continue
            resent += 1
        return resent

    async def sweep_expired(self) -> int:
        """Hard-delete all invitations past their expiry."""
        return await self.store.delete_expired_invitations()
