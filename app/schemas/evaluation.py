# File: app/schemas/evaluation.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from app.models.evaluation import EvaluationStatus, QuestionType, ParticipantStatus
from app.schemas.common import PaginationMeta, ProjectSummary


# ==========================================
# INPUT SCHEMAS
# ==========================================

class QuestionCreate(BaseModel):
    text: str = Field(..., min_length=1)
    type: QuestionType
    required: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)


class EvaluationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    instructions: Optional[str] = None
    project_id: str = Field(..., min_length=1)
    questions: Optional[List[QuestionCreate]] = None


class EvaluationUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    instructions: Optional[str] = None
    status: Optional[EvaluationStatus] = None


class ResponseSubmit(BaseModel):
    question_id: str = Field(..., min_length=1)
    # Boolean, free text or a numeric rating
    answer: Union[bool, int, float, str]


class FeedbackSubmit(BaseModel):
    responses: List[ResponseSubmit] = Field(..., min_length=1)


# ==========================================
# OUTPUT SCHEMAS
# ==========================================

class Question(BaseModel):
    id: str
    evaluation_id: str
    text: str
    type: QuestionType
    required: bool
    order: int

    class Config:
        from_attributes = True


class Evaluation(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    status: EvaluationStatus
    project_id: str
    created_by_id: str
    tenant_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EvaluationWithQuestions(Evaluation):
    questions: List[Question] = []
    project: Optional[ProjectSummary] = None


class EvaluationListItem(Evaluation):
    question_count: int
    participant_count: int


class ResponseEntry(BaseModel):
    user_id: str
    email: str
    answer: Any
    submitted_at: datetime


class QuestionSummary(BaseModel):
    question_id: str
    text: str
    type: QuestionType
    response_count: int
    responses: List[ResponseEntry]


class EvaluationDetail(EvaluationWithQuestions):
    participant_count: int
    # Owner view
    response_summary: Optional[List[QuestionSummary]] = None
    # Tester / member view
    has_joined: Optional[bool] = None
    is_completed: Optional[bool] = None


class TesterEvaluation(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    status: EvaluationStatus
    project: ProjectSummary
    question_count: int
    participation_status: ParticipantStatus
    joined_at: datetime
    completed_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None


class ParticipationCounts(BaseModel):
    pending: int
    accepted: int
    rejected: int


class TesterEvaluationPage(BaseModel):
    data: List[TesterEvaluation]
    meta: PaginationMeta
    counts: ParticipationCounts


class Participation(BaseModel):
    evaluation_id: str
    user_id: str
    status: ParticipantStatus
    joined_at: datetime
    completed_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FeedbackResult(BaseModel):
    message: str
    participation: Participation


def answer_value(stored: Optional[Dict[str, Any]]) -> Any:
    """Unwrap the {"value": ...} envelope answers are stored in"""
    if isinstance(stored, dict) and "value" in stored:
        return stored["value"]
    return stored
