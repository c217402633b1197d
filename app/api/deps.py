from typing import Callable
from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app import crud
from app.core.exceptions import AuthorizationError, UnauthenticatedError
from app.core.identity_provider import SupabaseAuth, get_identity_provider
from app.core.permissions import enforce_member_write_block
from app.core.tenant_context import PaginationOptions, TenantContext
from app.core.config import settings
from app.db.database import get_db
from app.models.user import User, UserRole

security = HTTPBearer(auto_error=False)


def get_access_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Not authenticated")
    return credentials.credentials


def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(get_access_token),
    identity: SupabaseAuth = Depends(get_identity_provider),
) -> User:
    payload = identity.verify_access_token(token)

    user = crud.user.get_by_external_id(db, external_id=payload["sub"])
    if user is None:
        raise UnauthenticatedError("User not found in database")
    return user


def get_tenant_context(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> TenantContext:
    """
    Build the caller's tenant context.
    Members are read-only: any write verb is refused here, before the route runs.
    """
    ctx = TenantContext.from_user(current_user)
    enforce_member_write_block(ctx, request.method)
    return ctx


def require_roles(*roles: UserRole) -> Callable[..., TenantContext]:
    """Route-level role gate; answers 403 before the service is called"""
    allowed = frozenset(roles)

    def dependency(ctx: TenantContext = Depends(get_tenant_context)) -> TenantContext:
        if ctx.role not in allowed:
            names = ", ".join(sorted(role.value for role in allowed))
            raise AuthorizationError(f"This action requires one of the roles: {names}")
        return ctx

    return dependency


def get_pagination(
    skip: int = Query(0, ge=0),
    take: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
) -> PaginationOptions:
    return PaginationOptions(skip=skip, take=min(take, settings.MAX_PAGE_SIZE))
