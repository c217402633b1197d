"""
Invitation state machine: send, validate, accept, revoke, resend and list.

Pending invitations past their expiry are moved to EXPIRED whenever they are
read, so no background job is needed to keep statuses current.
"""
from datetime import timedelta
from typing import Any, Dict, List, Optional
import secrets
from sqlalchemy.orm import Session
from app import crud
from app.core.config import settings
from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.core.identity_provider import SupabaseAuth
from app.core.permissions import require_owner
from app.core.tenant_context import TenantContext
from app.models.base import utcnow
from app.models.invitation import Invitation, InvitationStatus
from app.schemas.invitation import InvitationAccept, InvitationCreate
import logging

logger = logging.getLogger(__name__)


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def invite_link(token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/register?token={token}"


class InvitationService:

    def _require_owner(self, ctx: TenantContext) -> None:
        require_owner(ctx, "manage invitations")

    def _new_expiry(self):
        return utcnow() + timedelta(minutes=settings.INVITATION_EXPIRE_MINUTES)

    def _log_link(self, email: str, token: str) -> None:
        if settings.is_production:
            logger.info(f"📧 Invitation for {email} ready (token {token[:10]}...)")
        else:
            logger.info(f"📧 Invitation for {email}: {invite_link(token)}")

    def _load_valid(self, db: Session, token: str) -> Invitation:
        """Resolve a token to a usable invitation, expiring it on the way if needed"""
        invitation = crud.invitation.get_by_token(db, token=token)
        if invitation is None:
            raise NotFoundError("Invalid invitation token")

        if invitation.status != InvitationStatus.PENDING:
            raise BadRequestError(f"Invitation has already been {invitation.status.value}")

        if invitation.is_expired():
            invitation.transition_to(InvitationStatus.EXPIRED)
            db.add(invitation)
            db.commit()
            logger.info(f"⌛ Invitation {invitation.id} for {invitation.email} expired")
            raise BadRequestError("Invitation has expired")

        return invitation

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def send(self, db: Session, ctx: TenantContext, invitation_in: InvitationCreate) -> Dict[str, Any]:
        self._require_owner(ctx)
        email = invitation_in.email

        if crud.user.get_by_email(db, email=email, tenant_id=ctx.tenant_id):
            raise ConflictError("User with this email already exists in your organization")

        crud.invitation.expire_stale(db, ctx.tenant_id)
        if crud.invitation.get_pending_for_email(db, ctx, email=email):
            raise ConflictError(
                "An active invitation already exists for this email. Please wait for it to expire or revoke it."
            )

        token = generate_token()
        invitation = crud.invitation.create(
            db,
            ctx,
            obj_in={"email": email, "role": invitation_in.role},
            extra={
                "token": token,
                "invited_by_id": ctx.user_id,
                "status": InvitationStatus.PENDING,
                "expires_at": self._new_expiry(),
            },
        )
        self._log_link(email, token)

        return {
            "message": "Invitation sent successfully",
            "invitation": {
                "id": invitation.id,
                "email": invitation.email,
                "role": invitation.role,
                "expires_at": invitation.expires_at,
                "invite_link": None if settings.is_production else invite_link(token),
            },
        }

    def list(self, db: Session, ctx: TenantContext, status: Optional[InvitationStatus] = None) -> List[Invitation]:
        self._require_owner(ctx)
        crud.invitation.expire_stale(db, ctx.tenant_id)
        return crud.invitation.list_for_tenant(db, ctx, status=status)

    def revoke(self, db: Session, ctx: TenantContext, invitation_id: str) -> Dict[str, str]:
        self._require_owner(ctx)
        invitation = crud.invitation.query(
            db, ctx, [Invitation.id == invitation_id, Invitation.status == InvitationStatus.PENDING]
        ).first()
        if invitation is None:
            raise NotFoundError("Pending invitation not found")

        invitation.transition_to(InvitationStatus.REVOKED)
        db.add(invitation)
        db.commit()
        logger.info(f"🚫 Invitation {invitation.id} for {invitation.email} revoked by {ctx.email}")
        return {"message": "Invitation revoked successfully"}

    def resend(self, db: Session, ctx: TenantContext, invitation_id: str) -> Dict[str, Any]:
        self._require_owner(ctx)
        invitation = crud.invitation.get_scoped(db, ctx, invitation_id)

        if crud.user.get_by_email(db, email=invitation.email, tenant_id=ctx.tenant_id):
            raise ConflictError("User with this email already exists in your organization")

        crud.invitation.expire_stale(db, ctx.tenant_id)
        pending = crud.invitation.get_pending_for_email(db, ctx, email=invitation.email)
        if pending is not None and pending.id != invitation.id:
            raise ConflictError("Another active invitation already exists for this email")

        token = generate_token()
        invitation.token = token
        invitation.expires_at = self._new_expiry()
        invitation.transition_to(InvitationStatus.PENDING)
        db.add(invitation)
        db.commit()
        self._log_link(invitation.email, token)

        return {
            "message": "Invitation resent successfully",
            "invite_link": None if settings.is_production else invite_link(token),
        }

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def validate(self, db: Session, token: str) -> Dict[str, Any]:
        invitation = self._load_valid(db, token)
        return {
            "valid": True,
            "email": invitation.email,
            "role": invitation.role,
            "organization": invitation.account.name,
            "invited_by": invitation.invited_by.email,
            "expires_at": invitation.expires_at,
        }

    def accept(self, db: Session, identity: SupabaseAuth, accept_in: InvitationAccept) -> Dict[str, Any]:
        invitation = self._load_valid(db, accept_in.token)

        if crud.user.get_by_email(db, email=invitation.email):
            raise ConflictError("User with this email already exists")

        # Role and tenant always come from the invitation, never from the request
        provider_user = identity.create_user(
            invitation.email,
            accept_in.password,
            {"role": invitation.role.value, "accountId": invitation.tenant_id},
        )

        try:
            user = crud.user.build_mirror(
                db,
                external_id=provider_user["id"],
                email=invitation.email,
                role=invitation.role,
                tenant_id=invitation.tenant_id,
            )
            invitation.transition_to(InvitationStatus.ACCEPTED)
            db.add(invitation)
            db.flush()
            db.commit()
        except Exception as e:
            logger.error(f"💥 Failed to accept invitation {invitation.id}: {e}")
            db.rollback()
            raise

        db.refresh(user)
        logger.info(f"🎉 Invitation {invitation.id} accepted, user {user.email} joined account {user.tenant_id}")
        return {"message": "Account created successfully", "user": user}


invitation_service = InvitationService()
