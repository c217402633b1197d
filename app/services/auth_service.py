"""
Signup, login, logout and profile, bridging the identity provider and the
local user mirror.
"""
from typing import Any, Dict
from sqlalchemy.orm import Session, joinedload
from app import crud
from app.core.exceptions import (
    BadRequestError, ConflictError, IdentityProviderError, UnauthenticatedError
)
from app.core.identity_provider import SupabaseAuth
from app.core.tenant_context import TenantContext
from app.models.user import User, UserRole
from app.schemas.auth import LoginRequest, SignupRequest
import logging

logger = logging.getLogger(__name__)


class AuthService:

    def signup(self, db: Session, identity: SupabaseAuth, signup_in: SignupRequest) -> Dict[str, Any]:
        if signup_in.role == UserRole.OWNER and not signup_in.account_name:
            raise BadRequestError("Account name is required for owners")

        if crud.user.get_by_email(db, email=signup_in.email):
            raise ConflictError("User with this email already exists")

        account = crud.account.create(db, name=signup_in.account_name or f"{signup_in.email}'s Account")
        account_id = account.id

        try:
            provider_user = identity.create_user(
                signup_in.email,
                signup_in.password,
                {"role": signup_in.role.value, "accountId": account_id},
            )
            user = crud.user.build_mirror(
                db,
                external_id=provider_user["id"],
                email=signup_in.email,
                role=signup_in.role,
                tenant_id=account_id,
            )
            db.commit()
            db.refresh(user)
        except Exception as e:
            logger.error(f"💥 Signup for {signup_in.email} failed, removing account {account_id}: {e}")
            db.rollback()
            crud.account.remove(db, id=account_id)
            raise

        logger.info(f"✅ User {user.email} registered as {user.role.value} in account {account_id}")
        return {"message": "User registered successfully", "user": user}

    def login(self, db: Session, identity: SupabaseAuth, login_in: LoginRequest) -> Dict[str, Any]:
        try:
            session = identity.sign_in(login_in.email, login_in.password)
        except IdentityProviderError as e:
            logger.warning(f"⚠️ Login failed for {login_in.email}: {e.detail}")
            raise UnauthenticatedError("Invalid credentials")

        user = crud.user.get_by_email(db, email=login_in.email)
        if user is None:
            raise UnauthenticatedError("User not found in database")

        logger.info(f"🔐 User {user.email} logged in")
        return {
            "message": "Login successful",
            "user": user,
            "access_token": session.get("access_token"),
            "refresh_token": session.get("refresh_token"),
            "expires_at": session.get("expires_at"),
        }

    def logout(self, identity: SupabaseAuth, access_token: str) -> Dict[str, str]:
        try:
            identity.sign_out(access_token)
        except IdentityProviderError as e:
            # The client drops its token either way
            logger.warning(f"⚠️ Identity provider sign-out failed: {e.detail}")
        return {"message": "Logout successful"}

    def me(self, db: Session, ctx: TenantContext) -> User:
        user = (
            db.query(User)
            .options(joinedload(User.account))
            .filter(User.id == ctx.user_id, User.tenant_id == ctx.tenant_id)
            .first()
        )
        if user is None:
            raise UnauthenticatedError("User not found or access denied")
        return user


auth_service = AuthService()
