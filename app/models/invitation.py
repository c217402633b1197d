# File: app/models/invitation.py
from sqlalchemy import Column, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import TenantBaseModel, utcnow
from app.models.user import UserRole
import enum


class InvitationStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REVOKED = "revoked"

    @property
    def is_terminal(self) -> bool:
        return self != InvitationStatus.PENDING

    def can_transition_to(self, target: "InvitationStatus") -> bool:
        # Resend may reopen any invitation; everything else leaves PENDING only
        if target == InvitationStatus.PENDING:
            return True
        return self == InvitationStatus.PENDING and target != InvitationStatus.PENDING


class Invitation(TenantBaseModel):
    __tablename__ = "invitations"

    email = Column(String(255), nullable=False, index=True)
    token = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.MEMBER,
    )
    invited_by_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    status = Column(
        Enum(InvitationStatus, name="invitation_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=InvitationStatus.PENDING,
    )
    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)

    account = relationship("Account")
    invited_by = relationship("User", foreign_keys=[invited_by_id])

    def is_expired(self, now=None) -> bool:
        return self.expires_at <= (now or utcnow())

    def transition_to(self, target: InvitationStatus) -> None:
        current = self.status or InvitationStatus.PENDING
        if not current.can_transition_to(target):
            raise ValueError(f"Invitation cannot move from {current.value} to {target.value}")
        self.status = target
        if target == InvitationStatus.ACCEPTED:
            self.accepted_at = utcnow()
