# File: app/api/v1/endpoints/invitations.py
from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app import schemas
from app.api import deps
from app.core.identity_provider import SupabaseAuth, get_identity_provider
from app.core.tenant_context import TenantContext
from app.db.database import get_db
from app.models.invitation import InvitationStatus
from app.models.user import UserRole
from app.services import invitation_service

router = APIRouter()

owner_only = deps.require_roles(UserRole.OWNER)


@router.post("", response_model=schemas.InvitationSendResponse, status_code=status.HTTP_201_CREATED)
def send_invitation(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    invitation_in: schemas.InvitationCreate,
) -> Any:
    """Invite someone into the caller's account as tester or member"""
    return invitation_service.send(db, ctx, invitation_in)


@router.get("", response_model=List[schemas.InvitationSummary])
def list_invitations(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    status: Optional[InvitationStatus] = Query(None),
) -> Any:
    return invitation_service.list(db, ctx, status=status)


@router.get("/validate/{token}", response_model=schemas.InvitationValidation)
def validate_invitation(
    *,
    db: Session = Depends(get_db),
    token: str,
) -> Any:
    return invitation_service.validate(db, token)


@router.post("/accept", response_model=schemas.InvitationAcceptResponse, status_code=status.HTTP_201_CREATED)
def accept_invitation(
    *,
    db: Session = Depends(get_db),
    identity: SupabaseAuth = Depends(get_identity_provider),
    accept_in: schemas.InvitationAccept,
) -> Any:
    return invitation_service.accept(db, identity, accept_in)


@router.delete("/{invitation_id}", response_model=schemas.Message)
def revoke_invitation(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    invitation_id: UUID,
) -> Any:
    return invitation_service.revoke(db, ctx, str(invitation_id))


@router.post("/{invitation_id}/resend", response_model=schemas.InvitationResendResponse)
def resend_invitation(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    invitation_id: UUID,
) -> Any:
    return invitation_service.resend(db, ctx, str(invitation_id))
