"""
Principal - who is making this request.

Built fresh for every request from a validated session token plus the
stored user record, then passed explicitly into every service call.
"""

from __future__ import annotations

from dataclasses import dataclass

from portal.core.models import Role, User


@dataclass(frozen=True)
class Principal:
    """
    Authenticated caller.

    Usage in routes:
        async def my_route(principal: Principal = Depends(require_company_access())):
            print(f"User {principal.user_id} acting in {principal.company_id}")
    """

    user_id: str
    email: str
    company_id: str | None
    role: str

    @classmethod
    def from_user(cls, user: User) -> Principal:
        return cls(
            user_id=user.id,
            email=user.email,
            company_id=user.company_id or None,
            role=user.role,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def has_company(self) -> bool:
        return bool(self.company_id)

    def owns(self, company_id: str | None) -> bool:
        """Does an entity with this company id belong to the caller's company?"""
        return self.has_company and company_id == self.company_id
