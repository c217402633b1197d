from .base import BaseModel, TenantBaseModel
from .account import Account
from .user import User, UserRole
from .project import Project, ProjectMember, ProjectStatus
from .evaluation import (
    Evaluation, EvaluationQuestion, EvaluationParticipant, EvaluationResponse,
    EvaluationStatus, QuestionType, ParticipantStatus
)
from .invitation import Invitation, InvitationStatus

__all__ = [
    "BaseModel", "TenantBaseModel", "Account", "User", "UserRole",
    "Project", "ProjectMember", "ProjectStatus",
    "Evaluation", "EvaluationQuestion", "EvaluationParticipant", "EvaluationResponse",
    "EvaluationStatus", "QuestionType", "ParticipantStatus",
    "Invitation", "InvitationStatus",
]
