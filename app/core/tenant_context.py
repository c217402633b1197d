# File: app/core/tenant_context.py
from dataclasses import dataclass, field
from typing import Dict, Optional
from app.models.user import User, UserRole


@dataclass(frozen=True)
class TenantContext:
    """
    Identity of the caller for one request.

    Built once from the verified token and passed explicitly to every
    repository and service call; nothing reads the current user from
    global state.
    """
    user_id: str
    external_id: str
    email: str
    role: UserRole
    tenant_id: str

    @classmethod
    def from_user(cls, user: User) -> "TenantContext":
        return cls(
            user_id=user.id,
            external_id=user.external_id,
            email=user.email,
            role=user.role,
            tenant_id=user.tenant_id,
        )

    @property
    def is_owner(self) -> bool:
        return self.role == UserRole.OWNER

    @property
    def is_tester(self) -> bool:
        return self.role == UserRole.TESTER

    @property
    def is_member(self) -> bool:
        return self.role == UserRole.MEMBER


@dataclass
class PaginationOptions:
    skip: int = 0
    take: int = 20
    # column name -> "asc" | "desc"
    order_by: Optional[Dict[str, str]] = field(default=None)
