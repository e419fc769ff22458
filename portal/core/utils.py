"""
Shared utility functions for the admin portal.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timezone


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.

    Args:
        prefix: Optional prefix (e.g., "comp", "inv", "sc")

    Returns:
        A unique ID like "comp_a1b2c3d4e5f6"
    """
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else str(uuid.uuid4())


def generate_token(nbytes: int = 32) -> str:
    """URL-safe random token. Invitation tokens are bearer credentials."""
    return secrets.token_urlsafe(nbytes)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes coming back from a store as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
