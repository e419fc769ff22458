# =============================================================================
# Session Tokens and Password Hashing
# =============================================================================
#
# Every identity provider issues the same HS256 session tokens:
#   - access token: sub, email, name, iat, exp, type="access", jti
#   - refresh token: sub, iat, exp, type="refresh", jti
#
# A token only proves identity. Role, company and active status are looked
# up from the data store on every request.
#
# =============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import logging
import secrets

import jwt
from pydantic import BaseModel

from portal.config import Settings
from portal.core.errors import TokenExpiredError, TokenInvalidError
from portal.core.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================

class TokenPayload(BaseModel):
    """Validated JWT claims."""
    sub: str  # user id
    email: str = ""
    name: str = ""
    exp: datetime
    iat: datetime
    type: str  # "access" or "refresh"
    jti: str  # unique token ID


class TokenPair(BaseModel):
    """Access and refresh token pair."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until access token expires


# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str) -> str:
    """
    Hash a password using PBKDF2-SHA256.

    Returns: salt:hash format string
    """
    salt = secrets.token_hex(32)
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=100_000
    )
    return f"{salt}:{hash_bytes.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, stored_hash = password_hash.split(':')
    except (ValueError, AttributeError):
        return False
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=100_000
    )
    return secrets.compare_digest(hash_bytes.hex(), stored_hash)


# =============================================================================
# Token Service
# =============================================================================

class TokenService:
    """Issues and validates session tokens with the configured secret."""

    def __init__(self, settings: Settings):
        self.secret = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm
        self.access_ttl = timedelta(minutes=settings.jwt_access_token_expire_minutes)
        self.refresh_ttl = timedelta(days=settings.jwt_refresh_token_expire_days)

    def create_access_token(self, user_id: str, email: str, name: str = "") -> str:
        """Create a JWT access token."""
        now = utc_now()
        payload = {
            "sub": user_id,
            "email": email,
            "name": name,
            "iat": now,
            "exp": now + self.access_ttl,
            "type": "access",
            "jti": generate_id("tok"),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def create_refresh_token(self, user_id: str) -> str:
        """Create a JWT refresh token (longer-lived)."""
        now = utc_now()
        payload = {
            "sub": user_id,
            "iat": now,
            "exp": now + self.refresh_ttl,
            "type": "refresh",
            "jti": generate_id("rtok"),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def create_token_pair(self, user_id: str, email: str, name: str = "") -> TokenPair:
        """Create both access and refresh tokens."""
        return TokenPair(
            access_token=self.create_access_token(user_id, email, name),
            refresh_token=self.create_refresh_token(user_id),
            expires_in=int(self.access_ttl.total_seconds()),
        )

    def decode(self, token: str, expected_type: str = "access") -> TokenPayload:
        """
        Decode and validate a JWT token.

        Args:
            token: The JWT string
            expected_type: "access" or "refresh"

        Returns:
            TokenPayload with validated claims

        Raises:
            TokenExpiredError: Token has expired
            TokenInvalidError: Token is invalid, of the wrong type, or
                missing required claims
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected token: {e}")
            raise TokenInvalidError("Invalid token")

        if payload.get("type") != expected_type:
            raise TokenInvalidError("Invalid token")
        if expected_type == "access" and not payload.get("email"):
            raise TokenInvalidError("Invalid token")

        return TokenPayload(
            sub=payload["sub"],
            email=payload.get("email", ""),
            name=payload.get("name", ""),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            type=payload["type"],
            jti=payload.get("jti", ""),
        )
