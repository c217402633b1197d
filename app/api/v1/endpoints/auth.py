# File: app/api/v1/endpoints/auth.py
from typing import Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app import schemas
from app.api import deps
from app.core.identity_provider import SupabaseAuth, get_identity_provider
from app.core.tenant_context import TenantContext
from app.db.database import get_db
from app.services import auth_service

router = APIRouter()


@router.post("/signup", response_model=schemas.SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    *,
    db: Session = Depends(get_db),
    identity: SupabaseAuth = Depends(get_identity_provider),
    signup_in: schemas.SignupRequest,
) -> Any:
    """Register a user; owners open a new account"""
    return auth_service.signup(db, identity, signup_in)


@router.post("/login", response_model=schemas.LoginResponse)
def login(
    *,
    db: Session = Depends(get_db),
    identity: SupabaseAuth = Depends(get_identity_provider),
    login_in: schemas.LoginRequest,
) -> Any:
    return auth_service.login(db, identity, login_in)


@router.post("/logout", response_model=schemas.Message)
def logout(
    *,
    identity: SupabaseAuth = Depends(get_identity_provider),
    token: str = Depends(deps.get_access_token),
    ctx: TenantContext = Depends(deps.get_tenant_context),
) -> Any:
    return auth_service.logout(identity, token)


@router.get("/me", response_model=schemas.UserProfile)
def read_me(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(deps.get_tenant_context),
) -> Any:
    return auth_service.me(db, ctx)
