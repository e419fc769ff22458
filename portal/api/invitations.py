"""
Invitation routes.

Create / list / delete are admin-only and tenant-scoped. Accept only needs
a session: the caller usually has no company yet.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from portal.api.deps import get_invitation_service
from portal.api.responses import ok
from portal.auth.context import Principal
from portal.auth.policies import require_auth, require_company_access
from portal.services import InvitationService

router = APIRouter(prefix="/invitations", tags=["invitations"])


class CreateInvitationsRequest(BaseModel):
    emails: list[EmailStr] = Field(min_length=1)


@router.post("", status_code=201)
async def create_invitations(
    data: CreateInvitationsRequest,
    principal: Principal = Depends(require_company_access()),
    invitations: InvitationService = Depends(get_invitation_service),
):
    created = await invitations.create_invitations(principal, [str(e) for e in data.emails])
    return ok(
        {"invitations": [invitation.public() for invitation in created]},
        "Invitations created successfully",
        status_code=201,
    )


@router.get("")
async def list_invitations(
    principal: Principal = Depends(require_company_access()),
    invitations: InvitationService = Depends(get_invitation_service),
):
    return ok([invitation.public() for invitation in await invitations.list_invitations(principal)])


@router.delete("/{invitation_id}")
async def delete_invitation(
    invitation_id: str,
    principal: Principal = Depends(require_company_access()),
    invitations: InvitationService = Depends(get_invitation_service),
):
    await invitations.delete_invitation(principal, invitation_id)
    return ok(message="Invitation deleted successfully")


@router.post("/{token}/accept")
async def accept_invitation(
    token: str,
    principal: Principal = Depends(require_auth()),
    invitations: InvitationService = Depends(get_invitation_service),
):
    user = await invitations.accept_invitation(principal, token)
    return ok(user.public(), "Invitation accepted successfully")
