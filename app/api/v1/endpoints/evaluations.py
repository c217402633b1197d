# File: app/api/v1/endpoints/evaluations.py
from typing import Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app import schemas
from app.api import deps
from app.core.tenant_context import PaginationOptions, TenantContext
from app.db.database import get_db
from app.models.evaluation import ParticipantStatus
from app.models.user import UserRole
from app.services import evaluation_service

router = APIRouter()

owner_only = deps.require_roles(UserRole.OWNER)
tester_only = deps.require_roles(UserRole.TESTER)


@router.post("", response_model=schemas.EvaluationWithQuestions, status_code=status.HTTP_201_CREATED)
def create_evaluation(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    evaluation_in: schemas.EvaluationCreate,
) -> Any:
    """Create an evaluation together with its ordered questions"""
    return evaluation_service.create(db, ctx, evaluation_in)


@router.get("/my-evaluations", response_model=schemas.TesterEvaluationPage)
def list_my_evaluations(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(tester_only),
    pagination: PaginationOptions = Depends(deps.get_pagination),
    status: Optional[ParticipantStatus] = Query(None),
) -> Any:
    """Evaluations the tester has joined, with per-status counts"""
    return evaluation_service.tester_evaluations(db, ctx, status=status, options=pagination)


@router.get("/project/{project_id}", response_model=schemas.Page[schemas.EvaluationListItem])
def list_project_evaluations(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(deps.get_tenant_context),
    pagination: PaginationOptions = Depends(deps.get_pagination),
    project_id: UUID,
) -> Any:
    return evaluation_service.list_by_project(db, ctx, str(project_id), pagination)


@router.get("/{evaluation_id}", response_model=schemas.EvaluationDetail)
def read_evaluation(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(deps.get_tenant_context),
    evaluation_id: UUID,
) -> Any:
    return evaluation_service.get_details(db, ctx, str(evaluation_id))


@router.put("/{evaluation_id}", response_model=schemas.Evaluation)
def update_evaluation(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    evaluation_id: UUID,
    evaluation_in: schemas.EvaluationUpdate,
) -> Any:
    return evaluation_service.update(db, ctx, str(evaluation_id), evaluation_in)


@router.delete("/{evaluation_id}", response_model=schemas.Message)
def delete_evaluation(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    evaluation_id: UUID,
) -> Any:
    evaluation_service.delete(db, ctx, str(evaluation_id))
    return {"message": "Evaluation deleted successfully"}


@router.post("/{evaluation_id}/questions", response_model=schemas.Question, status_code=status.HTTP_201_CREATED)
def add_question(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    evaluation_id: UUID,
    question_in: schemas.QuestionCreate,
) -> Any:
    return evaluation_service.add_question(db, ctx, str(evaluation_id), question_in)


@router.post("/{evaluation_id}/join", response_model=schemas.Participation, status_code=status.HTTP_201_CREATED)
def join_evaluation(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(tester_only),
    evaluation_id: UUID,
) -> Any:
    return evaluation_service.join(db, ctx, str(evaluation_id))


@router.post("/{evaluation_id}/feedback", response_model=schemas.FeedbackResult)
def submit_feedback(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(tester_only),
    evaluation_id: UUID,
    feedback_in: schemas.FeedbackSubmit,
) -> Any:
    participation = evaluation_service.submit_feedback(db, ctx, str(evaluation_id), feedback_in)
    return {"message": "Feedback submitted successfully", "participation": participation}
