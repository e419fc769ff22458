"""Admin routes - cross-tenant listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from portal.api.deps import get_company_service
from portal.api.responses import ok
from portal.auth.context import Principal
from portal.auth.policies import require_role
from portal.core.models import Role
from portal.services import CompanyService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/companies")
async def list_companies(
    page: int = 1,
    limit: int = 10,
    principal: Principal = Depends(require_role(Role.ADMIN)),
    companies: CompanyService = Depends(get_company_service),
):
    return ok(await companies.list_companies(page, limit))
