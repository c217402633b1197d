# File: app/schemas/invitation.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from app.models.invitation import InvitationStatus
from app.models.user import UserRole
from app.schemas.common import UserSummary
from app.schemas.user import User


class InvitationCreate(BaseModel):
    email: EmailStr
    role: UserRole = UserRole.MEMBER

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v == UserRole.OWNER:
            raise ValueError("Invitations can only grant the tester or member role")
        return v


class InvitationAccept(BaseModel):
    token: str
    password: str = Field(..., min_length=6)


class InvitationSummary(BaseModel):
    id: str
    email: str
    role: UserRole
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime
    invited_by: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class SentInvitation(BaseModel):
    id: str
    email: str
    role: UserRole
    expires_at: datetime
    invite_link: Optional[str] = None


class InvitationSendResponse(BaseModel):
    message: str
    invitation: SentInvitation


class InvitationResendResponse(BaseModel):
    message: str
    invite_link: Optional[str] = None


class InvitationValidation(BaseModel):
    valid: bool
    email: str
    role: UserRole
    organization: str
    invited_by: str
    expires_at: datetime


class InvitationAcceptResponse(BaseModel):
    message: str
    user: User
