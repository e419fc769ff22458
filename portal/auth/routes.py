# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/register        - Create account (caller becomes an admin)
#   POST /auth/login           - Get tokens
#   POST /auth/google          - Sign in with a Google access token
#   POST /auth/reset-password  - Request a password reset email
#   GET  /auth/verify          - Validate session, return the stored user
#   POST /auth/logout          - Client discards tokens
#   POST /auth/refresh         - Exchange a refresh token for a new pair (bearer required)
#   POST /auth/change-password - Change password (old password required)
#
# =============================================================================

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from portal.api.deps import get_account_service
from portal.api.responses import ok
from portal.auth.context import Principal
from portal.auth.policies import require_auth
from portal.services import AccountService

router = APIRouter(prefix="/auth", tags=["auth"])


# =============================================================================
# Request Models
# =============================================================================


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=1)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenSignInRequest(BaseModel):
    access_token: str = Field(min_length=1)


class ResetPasswordRequest(BaseModel):
    email: EmailStr


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(min_length=8)


# =============================================================================
# Public Endpoints
# =============================================================================


@router.post("/register")
async def register(data: RegisterRequest, accounts: AccountService = Depends(get_account_service)):
    """Create an identity and its portal user. Returns the first token pair."""
    user, tokens = await accounts.register(data.email, data.password, data.name)
    return ok(
        {"token": tokens.access_token, "tokens": tokens, "user": user.public()},
        "Registration successful",
    )


@router.post("/login")
async def login(data: LoginRequest, accounts: AccountService = Depends(get_account_service)):
    user, tokens = await accounts.login(data.email, data.password)
    return ok(
        {"token": tokens.access_token, "tokens": tokens, "user": user.public()},
        "Login successful",
    )


@router.post("/google")
async def google_sign_in(data: TokenSignInRequest, accounts: AccountService = Depends(get_account_service)):
    """Exchange a Google access token for a session. Requires AUTH_PROVIDER=google."""
    user, tokens = await accounts.sign_in_with_token(data.access_token)
    return ok(
        {"token": tokens.access_token, "tokens": tokens, "user": user.public()},
        "Login successful",
    )


@router.post("/reset-password")
async def reset_password(data: ResetPasswordRequest, accounts: AccountService = Depends(get_account_service)):
    """
    Request a password reset.

    Always answers the same way so the endpoint cannot reveal
    which emails are registered.
    """
    await accounts.reset_password(data.email)
    return ok(message="Password reset email sent")


# =============================================================================
# Protected Endpoints
# =============================================================================


@router.post("/refresh")
async def refresh(
    data: RefreshRequest,
    principal: Principal = Depends(require_auth()),
    accounts: AccountService = Depends(get_account_service),
):
    tokens = await accounts.refresh(principal, data.refresh_token)
    return ok({"token": tokens.access_token, "tokens": tokens}, "Token refreshed successfully")


@router.get("/verify")
async def verify(
    principal: Principal = Depends(require_auth()),
    accounts: AccountService = Depends(get_account_service),
):
    user = await accounts.current_user(principal)
    return ok(user.public())


@router.post("/logout")
async def logout(principal: Principal = Depends(require_auth())):
    # Stateless sessions: the client drops its tokens
    return ok(message="Logout successful")


@router.post("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    principal: Principal = Depends(require_auth()),
    accounts: AccountService = Depends(get_account_service),
):
    await accounts.change_password(principal, data.old_password, data.new_password)
    return ok(message="Password changed successfully")
