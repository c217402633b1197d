"""
Evaluation lifecycle: authoring (owners), participation and feedback (testers)
and the per-role read views.
"""
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from app import crud
from app.core.exceptions import AuthorizationError, BadRequestError, ConflictError, NotFoundError
from app.core.permissions import require_owner
from app.core.tenant_context import PaginationOptions, TenantContext
from app.crud.base import paginate
from app.models.evaluation import (
    Evaluation, EvaluationQuestion, EvaluationParticipant, EvaluationResponse,
    EvaluationStatus, ParticipantStatus
)
from app.models.user import User, UserRole
from app.schemas.common import ProjectSummary
from app.schemas.evaluation import (
    Evaluation as EvaluationOut, EvaluationCreate, EvaluationUpdate, EvaluationWithQuestions, FeedbackSubmit,
    QuestionCreate, answer_value
)
import logging

logger = logging.getLogger(__name__)


class EvaluationService:

    def _require_tester(self, ctx: TenantContext, message: str) -> None:
        if ctx.role != UserRole.TESTER:
            raise AuthorizationError(message)

    def _get_active(self, db: Session, ctx: TenantContext, evaluation_id: str) -> Evaluation:
        evaluation = (
            crud.evaluation.query(
                db, ctx, [Evaluation.status == EvaluationStatus.ACTIVE, crud.evaluation.on_live_project()]
            )
            .filter(Evaluation.id == evaluation_id)
            .first()
        )
        if evaluation is None:
            raise NotFoundError("Active evaluation not found")
        return evaluation

    # ------------------------------------------------------------------
    # Authoring
    # ------------------------------------------------------------------

    def create(self, db: Session, ctx: TenantContext, evaluation_in: EvaluationCreate) -> Dict[str, Any]:
        require_owner(ctx, "create evaluations")
        crud.evaluation.check_permission(ctx, "create")

        project = crud.project.query(
            db, ctx, [crud.project.not_deleted()]
        ).filter_by(id=evaluation_in.project_id).first()
        if project is None:
            raise NotFoundError("Project not found")

        try:
            evaluation = Evaluation(
                title=evaluation_in.title,
                description=evaluation_in.description,
                instructions=evaluation_in.instructions,
                project_id=project.id,
                created_by_id=ctx.user_id,
                tenant_id=ctx.tenant_id,
            )
            db.add(evaluation)
            db.flush()

            for index, question_in in enumerate(evaluation_in.questions or []):
                db.add(EvaluationQuestion(
                    evaluation_id=evaluation.id,
                    text=question_in.text,
                    type=question_in.type,
                    required=True if question_in.required is None else question_in.required,
                    order=index if question_in.order is None else question_in.order,
                ))
            db.commit()
        except Exception as e:
            logger.error(f"💥 Failed to create evaluation '{evaluation_in.title}': {e}")
            db.rollback()
            raise

        db.refresh(evaluation)
        logger.info(f"✅ Evaluation '{evaluation.title}' ({evaluation.id}) created in project {project.id}")
        return EvaluationWithQuestions.model_validate(evaluation).model_dump()

    def update(self, db: Session, ctx: TenantContext, evaluation_id: str, evaluation_in: EvaluationUpdate) -> Evaluation:
        require_owner(ctx, "update evaluations")
        return crud.evaluation.update(db, ctx, id=evaluation_id, obj_in=evaluation_in)

    def delete(self, db: Session, ctx: TenantContext, evaluation_id: str) -> None:
        require_owner(ctx, "delete evaluations")
        crud.evaluation.remove(db, ctx, id=evaluation_id)
        logger.info(f"🗑️ Evaluation {evaluation_id} deleted by {ctx.email}")

    def add_question(
        self, db: Session, ctx: TenantContext, evaluation_id: str, question_in: QuestionCreate
    ) -> EvaluationQuestion:
        require_owner(ctx, "add questions")
        evaluation = crud.evaluation.get_scoped(db, ctx, evaluation_id)

        order = question_in.order
        if order is None:
            order = crud.evaluation.next_question_order(db, evaluation_id=evaluation.id)

        question = EvaluationQuestion(
            evaluation_id=evaluation.id,
            text=question_in.text,
            type=question_in.type,
            required=True if question_in.required is None else question_in.required,
            order=order,
        )
        db.add(question)
        db.commit()
        db.refresh(question)
        return question

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_by_project(
        self,
        db: Session,
        ctx: TenantContext,
        project_id: str,
        options: Optional[PaginationOptions] = None,
    ) -> Dict[str, Any]:
        project = crud.project.query(db, ctx, crud.project.visible_to(ctx)).filter_by(id=project_id).first()
        if project is None:
            raise NotFoundError("Project not found")

        filters = [Evaluation.project_id == project.id]
        if not ctx.is_owner:
            filters.append(Evaluation.status == EvaluationStatus.ACTIVE)

        page = crud.evaluation.get_multi(db, ctx, options=options, filters=filters)
        ids = [evaluation.id for evaluation in page["data"]]
        question_counts = crud.evaluation.question_counts(db, ids)
        participant_counts = crud.evaluation.participant_counts(db, ids)

        page["data"] = [
            {
                **EvaluationOut.model_validate(evaluation).model_dump(),
                "question_count": question_counts.get(evaluation.id, 0),
                "participant_count": participant_counts.get(evaluation.id, 0),
            }
            for evaluation in page["data"]
        ]
        return page

    def get_details(self, db: Session, ctx: TenantContext, evaluation_id: str) -> Dict[str, Any]:
        evaluation = crud.evaluation.get(db, ctx, evaluation_id, filters=[crud.evaluation.on_live_project()])

        if ctx.is_member and not crud.project.is_member(db, project_id=evaluation.project_id, user_id=ctx.user_id):
            raise NotFoundError(f"Evaluation with ID {evaluation_id} not found")
        if not ctx.is_owner and evaluation.status != EvaluationStatus.ACTIVE:
            raise AuthorizationError("This evaluation is not available for testing")

        detail = EvaluationWithQuestions.model_validate(evaluation).model_dump()
        detail["participant_count"] = crud.evaluation.participant_counts(db, [evaluation.id]).get(evaluation.id, 0)

        if ctx.is_owner:
            detail["response_summary"] = self._response_summary(db, evaluation)
        else:
            participation = crud.evaluation.get_participation(
                db, evaluation_id=evaluation.id, user_id=ctx.user_id
            )
            detail["has_joined"] = participation is not None
            detail["is_completed"] = participation is not None and participation.completed_at is not None
        return detail

    def _response_summary(self, db: Session, evaluation: Evaluation) -> List[Dict[str, Any]]:
        rows = (
            db.query(EvaluationResponse, User.email)
            .join(User, User.id == EvaluationResponse.user_id)
            .join(EvaluationQuestion, EvaluationQuestion.id == EvaluationResponse.question_id)
            .filter(EvaluationQuestion.evaluation_id == evaluation.id)
            .order_by(EvaluationResponse.submitted_at.asc())
            .all()
        )
        by_question: Dict[str, List[Dict[str, Any]]] = {}
        for response, email in rows:
            by_question.setdefault(response.question_id, []).append({
                "user_id": response.user_id,
                "email": email,
                "answer": answer_value(response.answer),
                "submitted_at": response.submitted_at,
            })

        summary = []
        for question in evaluation.questions:
            responses = by_question.get(question.id, [])
            summary.append({
                "question_id": question.id,
                "text": question.text,
                "type": question.type,
                "response_count": len(responses),
                "responses": responses,
            })
        return summary

    def tester_evaluations(
        self,
        db: Session,
        ctx: TenantContext,
        status: Optional[ParticipantStatus] = None,
        options: Optional[PaginationOptions] = None,
    ) -> Dict[str, Any]:
        self._require_tester(ctx, "This endpoint is for testers only")
        options = options or PaginationOptions()

        query = (
            crud.evaluation.participations_query(db, ctx, status)
            .options(joinedload(EvaluationParticipant.evaluation).joinedload(Evaluation.project))
            .order_by(EvaluationParticipant.joined_at.desc())
        )
        page = paginate(query, options)
        question_counts = crud.evaluation.question_counts(
            db, [participation.evaluation_id for participation in page["data"]]
        )

        page["data"] = [
            {
                "id": participation.evaluation.id,
                "title": participation.evaluation.title,
                "description": participation.evaluation.description,
                "status": participation.evaluation.status,
                "project": ProjectSummary.model_validate(participation.evaluation.project).model_dump(),
                "question_count": question_counts.get(participation.evaluation_id, 0),
                "participation_status": participation.status,
                "joined_at": participation.joined_at,
                "completed_at": participation.completed_at,
                "rejected_at": participation.rejected_at,
            }
            for participation in page["data"]
        ]
        counts = crud.evaluation.participation_status_counts(db, ctx)
        page["counts"] = {participant_status.value: count for participant_status, count in counts.items()}
        return page

    # ------------------------------------------------------------------
    # Participation
    # ------------------------------------------------------------------

    def join(self, db: Session, ctx: TenantContext, evaluation_id: str) -> EvaluationParticipant:
        self._require_tester(ctx, "Only testers can join evaluations")
        evaluation = self._get_active(db, ctx, evaluation_id)

        if crud.evaluation.get_participation(db, evaluation_id=evaluation.id, user_id=ctx.user_id):
            raise ConflictError("Already joined this evaluation")

        participation = EvaluationParticipant(
            evaluation_id=evaluation.id,
            user_id=ctx.user_id,
            status=ParticipantStatus.PENDING,
        )
        try:
            db.add(participation)
            db.commit()
        except IntegrityError:
            # A concurrent join won the race on the composite key
            db.rollback()
            raise ConflictError("Already joined this evaluation")

        db.refresh(participation)
        logger.info(f"🙋 Tester {ctx.email} joined evaluation {evaluation.id}")
        return participation

    def submit_feedback(
        self, db: Session, ctx: TenantContext, evaluation_id: str, feedback_in: FeedbackSubmit
    ) -> EvaluationParticipant:
        self._require_tester(ctx, "Only testers can submit feedback")

        participation = crud.evaluation.get_participation(db, evaluation_id=evaluation_id, user_id=ctx.user_id)
        if participation is None:
            raise AuthorizationError("You must join this evaluation first")
        if participation.status == ParticipantStatus.ACCEPTED or participation.completed_at is not None:
            raise ConflictError("You have already submitted feedback for this evaluation")
        if participation.status == ParticipantStatus.REJECTED:
            raise AuthorizationError("Your participation in this evaluation was rejected")

        evaluation = self._get_active(db, ctx, evaluation_id)
        question_ids = {question.id for question in evaluation.questions}
        seen = set()
        for response_in in feedback_in.responses:
            if response_in.question_id not in question_ids:
                raise BadRequestError(f"Question {response_in.question_id} does not belong to this evaluation")
            if response_in.question_id in seen:
                raise BadRequestError(f"Question {response_in.question_id} is answered more than once")
            seen.add(response_in.question_id)

        try:
            for response_in in feedback_in.responses:
                db.add(EvaluationResponse(
                    question_id=response_in.question_id,
                    user_id=ctx.user_id,
                    answer={"value": response_in.answer},
                ))
            participation.transition_to(ParticipantStatus.ACCEPTED)
            db.add(participation)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("You have already submitted feedback for this evaluation")
        except Exception as e:
            logger.error(f"💥 Failed to store feedback for evaluation {evaluation_id}: {e}")
            db.rollback()
            raise

        db.refresh(participation)
        logger.info(f"📝 Tester {ctx.email} submitted {len(feedback_in.responses)} response(s) to evaluation {evaluation_id}")
        return participation


evaluation_service = EvaluationService()
