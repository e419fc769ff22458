"""
Company routes - the caller's own tenant.

All routes act on `principal.company_id`; there is no way to address
another tenant's company by id here.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from portal.api.deps import get_company_service
from portal.api.responses import ok
from portal.auth.context import Principal
from portal.auth.policies import require_auth, require_company_access
from portal.services import CompanyService

router = APIRouter(prefix="/companies", tags=["companies"])


class CreateCompanyRequest(BaseModel):
    name: str = Field(min_length=1)
    domain: str = Field(min_length=1)
    color_theme: str = ""


class UpdateCompanyRequest(BaseModel):
    """Absent or null fields are left unchanged."""

    name: str | None = None
    domain: str | None = Field(default=None, min_length=1)
    color_theme: str | None = None
    logo_url: str | None = None


@router.post("", status_code=201)
async def create_company(
    data: CreateCompanyRequest,
    principal: Principal = Depends(require_auth()),
    companies: CompanyService = Depends(get_company_service),
):
    company = await companies.create_company(principal, data.name, data.domain, data.color_theme)
    return ok(company, "Company created successfully", status_code=201)


@router.get("/me")
async def get_my_company(
    principal: Principal = Depends(require_company_access()),
    companies: CompanyService = Depends(get_company_service),
):
    return ok(await companies.get_company(principal))


@router.put("/me")
async def update_my_company(
    data: UpdateCompanyRequest,
    principal: Principal = Depends(require_company_access()),
    companies: CompanyService = Depends(get_company_service),
):
    company = await companies.update_company(principal, **data.model_dump())
    return ok(company, "Company updated successfully")


@router.delete("/me")
async def delete_my_company(
    principal: Principal = Depends(require_company_access()),
    companies: CompanyService = Depends(get_company_service),
):
    await companies.delete_company(principal)
    return ok(message="Company deleted successfully")


@router.get("/stats")
async def company_stats(
    principal: Principal = Depends(require_company_access()),
    companies: CompanyService = Depends(get_company_service),
):
    return ok(await companies.company_stats(principal))
