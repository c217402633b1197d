# File: app/crud/invitation.py
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from app.crud.base import CRUDBase
from app.core.tenant_context import TenantContext
from app.models.base import utcnow
from app.models.invitation import Invitation, InvitationStatus
from app.models.user import UserRole
from app.schemas.invitation import InvitationCreate


class CRUDInvitation(CRUDBase[Invitation, InvitationCreate, InvitationCreate]):

    def get_by_token(self, db: Session, *, token: str) -> Optional[Invitation]:
        # Public lookup: the token itself is the credential, so no tenant filter
        return (
            db.query(Invitation)
            .options(joinedload(Invitation.account), joinedload(Invitation.invited_by))
            .filter(Invitation.token == token)
            .first()
        )

    def get_pending_for_email(self, db: Session, ctx: TenantContext, *, email: str) -> Optional[Invitation]:
        return (
            self.query(db, ctx, [Invitation.email == email, Invitation.status == InvitationStatus.PENDING])
            .order_by(Invitation.created_at.desc())
            .first()
        )

    def list_for_tenant(
        self, db: Session, ctx: TenantContext, *, status: Optional[InvitationStatus] = None
    ) -> List[Invitation]:
        filters = [] if status is None else [Invitation.status == status]
        return (
            self.query(db, ctx, filters)
            .options(joinedload(Invitation.invited_by))
            .order_by(Invitation.created_at.desc())
            .all()
        )

    def expire_stale(self, db: Session, tenant_id: str) -> int:
        """Move every pending invitation past its expiry to EXPIRED; returns the number moved"""
        stale = (
            db.query(Invitation)
            .filter(
                Invitation.tenant_id == tenant_id,
                Invitation.status == InvitationStatus.PENDING,
                Invitation.expires_at <= utcnow(),
            )
            .all()
        )
        for db_obj in stale:
            db_obj.transition_to(InvitationStatus.EXPIRED)
            db.add(db_obj)
        if stale:
            db.commit()
        return len(stale)


invitation = CRUDInvitation(
    Invitation,
    entity_name="invitation",
    permissions={action: [UserRole.OWNER] for action in ("find_all", "find_one", "create", "update", "delete")},
)
