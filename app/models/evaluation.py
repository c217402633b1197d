# File: app/models/evaluation.py
from sqlalchemy import (
    Column, String, Text, Boolean, Integer, DateTime, Enum, ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship
from app.models.base import Base, BaseModel, TenantBaseModel, utcnow
import enum


class EvaluationStatus(enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"


class QuestionType(enum.Enum):
    BOOLEAN = "boolean"
    TEXT = "text"
    RATING = "rating"


class ParticipantStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    def can_transition_to(self, target: "ParticipantStatus") -> bool:
        return target in _PARTICIPANT_TRANSITIONS[self]


_PARTICIPANT_TRANSITIONS = {
    ParticipantStatus.PENDING: {ParticipantStatus.ACCEPTED, ParticipantStatus.REJECTED},
    ParticipantStatus.ACCEPTED: set(),
    ParticipantStatus.REJECTED: set(),
}


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Evaluation(TenantBaseModel):
    __tablename__ = "evaluations"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    status = Column(
        Enum(EvaluationStatus, name="evaluation_status", values_callable=_values),
        nullable=False,
        default=EvaluationStatus.DRAFT,
    )
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    project = relationship("Project", back_populates="evaluations")
    created_by = relationship("User", foreign_keys=[created_by_id])
    questions = relationship(
        "EvaluationQuestion",
        back_populates="evaluation",
        order_by="EvaluationQuestion.order",
        cascade="all, delete-orphan",
    )
    participants = relationship(
        "EvaluationParticipant",
        back_populates="evaluation",
        cascade="all, delete-orphan",
    )


class EvaluationQuestion(BaseModel):
    __tablename__ = "evaluation_questions"

    evaluation_id = Column(String(36), ForeignKey("evaluations.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    type = Column(Enum(QuestionType, name="question_type", values_callable=_values), nullable=False)
    required = Column(Boolean, nullable=False, default=True)
    order = Column(Integer, nullable=False, default=0)

    evaluation = relationship("Evaluation", back_populates="questions")
    responses = relationship(
        "EvaluationResponse",
        back_populates="question",
        order_by="EvaluationResponse.submitted_at",
        cascade="all, delete-orphan",
    )


class EvaluationParticipant(Base):
    """One row per (evaluation, user); the composite key rejects duplicate joins"""
    __tablename__ = "evaluation_participants"

    evaluation_id = Column(String(36), ForeignKey("evaluations.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    status = Column(
        Enum(ParticipantStatus, name="participant_status", values_callable=_values),
        nullable=False,
        default=ParticipantStatus.PENDING,
    )
    joined_at = Column(DateTime, nullable=False, default=utcnow)
    completed_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)

    evaluation = relationship("Evaluation", back_populates="participants")
    user = relationship("User")

    def transition_to(self, target: ParticipantStatus) -> None:
        current = self.status or ParticipantStatus.PENDING
        if not current.can_transition_to(target):
            raise ValueError(f"Participation cannot move from {current.value} to {target.value}")
        self.status = target
        if target == ParticipantStatus.ACCEPTED:
            self.completed_at = utcnow()
        elif target == ParticipantStatus.REJECTED:
            self.rejected_at = utcnow()


class EvaluationResponse(BaseModel):
    __tablename__ = "evaluation_responses"
    __table_args__ = (
        UniqueConstraint("question_id", "user_id", name="uq_evaluation_response_question_user"),
    )

    question_id = Column(String(36), ForeignKey("evaluation_questions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Stored as {"value": <bool | str | number>}
    answer = Column(JSON, nullable=False)
    submitted_at = Column(DateTime, nullable=False, default=utcnow)

    question = relationship("EvaluationQuestion", back_populates="responses")
    user = relationship("User")
