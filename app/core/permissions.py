# File: app/core/permissions.py
from typing import Dict, FrozenSet, Iterable, Optional
from app.core.exceptions import AuthorizationError
from app.core.tenant_context import TenantContext
from app.models.user import UserRole

# action name -> roles allowed to perform it
PermissionConfig = Dict[str, FrozenSet[UserRole]]

ACTIONS = ("find_all", "find_one", "create", "update", "delete")

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

DEFAULT_PERMISSIONS: PermissionConfig = {
    action: frozenset({UserRole.OWNER, UserRole.TESTER}) for action in ACTIONS
}


def build_permissions(overrides: Optional[Dict[str, Iterable[UserRole]]] = None) -> PermissionConfig:
    """Merge per-entity overrides onto the default table"""
    permissions = dict(DEFAULT_PERMISSIONS)
    for action, roles in (overrides or {}).items():
        if action not in ACTIONS:
            raise ValueError(f"Unknown permission action: {action}")
        permissions[action] = frozenset(roles)
    return permissions


def check_permission(permissions: PermissionConfig, ctx: TenantContext, action: str, entity: str) -> None:
    allowed = permissions.get(action, frozenset())
    if ctx.role not in allowed:
        raise AuthorizationError(f"Role {ctx.role.value} is not authorized to {action} {entity}")


def require_owner(ctx: TenantContext, action: str) -> None:
    """Owner-only operations that sit outside the entity permission tables"""
    if not ctx.is_owner:
        raise AuthorizationError(f"Only owners can {action}")


def enforce_member_write_block(ctx: TenantContext, method: str) -> None:
    """Member role is read-only everywhere, whatever the target route"""
    if ctx.is_member and method.upper() in WRITE_METHODS:
        raise AuthorizationError("Role member is not authorized to perform write operations")
