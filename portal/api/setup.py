"""
Setup wizard routes.

`/setup/progress` and `/setup/step` carry the client-reported wizard
position; `/setup/stats` carries the server-derived aggregate. The two are
exposed separately on purpose.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from portal.api.deps import get_onboarding_service
from portal.api.responses import ok
from portal.auth.context import Principal
from portal.auth.policies import require_company_access
from portal.core.models import SetupStep
from portal.services import OnboardingService

router = APIRouter(prefix="/setup", tags=["setup"])


class UpdateStepRequest(BaseModel):
    step: SetupStep
    progress: int = Field(ge=0, le=100)


class UpdateConfigRequest(BaseModel):
    feature: str = Field(min_length=1)
    status: bool


class GenerateShortcutsRequest(BaseModel):
    domain: str | None = None


class NudgeUsersRequest(BaseModel):
    # Accepted for compatibility; every pending invitation is resent
    user_ids: list[str] = Field(default_factory=list)
    message: str = ""


@router.get("/progress")
async def get_progress(
    principal: Principal = Depends(require_company_access()),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    return ok(await onboarding.get_progress(principal))


@router.put("/step")
async def update_step(
    data: UpdateStepRequest,
    principal: Principal = Depends(require_company_access()),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    progress = await onboarding.update_step(principal, data.step, data.progress)
    return ok(progress, "Setup step updated successfully")


@router.get("/stats")
async def get_stats(
    principal: Principal = Depends(require_company_access()),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    return ok(await onboarding.stats(principal))


@router.get("/config")
async def get_config(
    principal: Principal = Depends(require_company_access()),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    return ok(await onboarding.get_configuration(principal))


@router.put("/config")
async def update_config(
    data: UpdateConfigRequest,
    principal: Principal = Depends(require_company_access()),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    result = await onboarding.update_configuration(principal, data.feature, data.status)
    return ok(result, "Configuration status updated successfully")


@router.post("/generate-shortcuts")
async def generate_shortcuts(
    data: GenerateShortcutsRequest | None = None,
    principal: Principal = Depends(require_company_access()),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    domain = data.domain if data else None
    shortcuts = await onboarding.generate_shortcuts(principal, domain)
    return ok([shortcut.public() for shortcut in shortcuts], "Shortcuts generated successfully")


@router.post("/nudge-users")
async def nudge_users(
    data: NudgeUsersRequest | None = None,
    principal: Principal = Depends(require_company_access()),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    resent = await onboarding.nudge_users(principal)
    return ok({"resent": resent}, "User nudges sent successfully")


@router.get("/download-info")
async def download_info(
    principal: Principal = Depends(require_company_access()),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    return ok(await onboarding.download_info(principal))
