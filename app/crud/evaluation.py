# File: app/crud/evaluation.py
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.core.tenant_context import TenantContext
from app.models.evaluation import (
    Evaluation, EvaluationQuestion, EvaluationParticipant,
    ParticipantStatus
)
from app.models.project import Project
from app.models.user import UserRole
from app.schemas.evaluation import EvaluationCreate, EvaluationUpdate


class CRUDEvaluation(CRUDBase[Evaluation, EvaluationCreate, EvaluationUpdate]):

    def on_live_project(self):
        """Evaluations of a soft-deleted project are hidden with it"""
        return Evaluation.project.has(Project.deleted_at.is_(None))

    def question_counts(self, db: Session, evaluation_ids: List[str]) -> Dict[str, int]:
        if not evaluation_ids:
            return {}
        rows = (
            db.query(EvaluationQuestion.evaluation_id, func.count(EvaluationQuestion.id))
            .filter(EvaluationQuestion.evaluation_id.in_(evaluation_ids))
            .group_by(EvaluationQuestion.evaluation_id)
            .all()
        )
        return {evaluation_id: count for evaluation_id, count in rows}

    def participant_counts(self, db: Session, evaluation_ids: List[str]) -> Dict[str, int]:
        if not evaluation_ids:
            return {}
        rows = (
            db.query(EvaluationParticipant.evaluation_id, func.count(EvaluationParticipant.user_id))
            .filter(EvaluationParticipant.evaluation_id.in_(evaluation_ids))
            .group_by(EvaluationParticipant.evaluation_id)
            .all()
        )
        return {evaluation_id: count for evaluation_id, count in rows}

    def next_question_order(self, db: Session, *, evaluation_id: str) -> int:
        current = (
            db.query(func.max(EvaluationQuestion.order))
            .filter(EvaluationQuestion.evaluation_id == evaluation_id)
            .scalar()
        )
        return 0 if current is None else current + 1

    # ------------------------------------------------------------------
    # Participation
    # ------------------------------------------------------------------

    def get_participation(self, db: Session, *, evaluation_id: str, user_id: str) -> Optional[EvaluationParticipant]:
        return db.get(EvaluationParticipant, (evaluation_id, user_id))

    def participations_query(self, db: Session, ctx: TenantContext, status: Optional[ParticipantStatus] = None):
        query = (
            db.query(EvaluationParticipant)
            .join(Evaluation, Evaluation.id == EvaluationParticipant.evaluation_id)
            .filter(
                EvaluationParticipant.user_id == ctx.user_id,
                Evaluation.tenant_id == ctx.tenant_id,
                self.on_live_project(),
            )
        )
        if status is not None:
            query = query.filter(EvaluationParticipant.status == status)
        return query

    def participation_status_counts(self, db: Session, ctx: TenantContext) -> Dict[ParticipantStatus, int]:
        rows = (
            db.query(EvaluationParticipant.status, func.count(EvaluationParticipant.user_id))
            .join(Evaluation, Evaluation.id == EvaluationParticipant.evaluation_id)
            .filter(
                EvaluationParticipant.user_id == ctx.user_id,
                Evaluation.tenant_id == ctx.tenant_id,
                self.on_live_project(),
            )
            .group_by(EvaluationParticipant.status)
            .all()
        )
        counts = {status: 0 for status in ParticipantStatus}
        for status, count in rows:
            counts[status] = count
        return counts


evaluation = CRUDEvaluation(
    Evaluation,
    entity_name="evaluation",
    permissions={
        "create": [UserRole.OWNER],
        "update": [UserRole.OWNER],
        "delete": [UserRole.OWNER],
        "find_all": [UserRole.OWNER, UserRole.TESTER, UserRole.MEMBER],
        "find_one": [UserRole.OWNER, UserRole.TESTER, UserRole.MEMBER],
    },
)
