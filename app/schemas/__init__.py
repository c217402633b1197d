# File: app/schemas/__init__.py
from .common import Page, PaginationMeta, Message, UserSummary, ProjectSummary
from .user import User, UserProfile, AccountInfo
from .auth import SignupRequest, LoginRequest, SignupResponse, LoginResponse
from .project import Project, ProjectDetail, ProjectCreate, ProjectUpdate, ProjectMember
from .evaluation import (
    QuestionCreate, EvaluationCreate, EvaluationUpdate, ResponseSubmit, FeedbackSubmit,
    Question, Evaluation, EvaluationWithQuestions, EvaluationListItem, EvaluationDetail,
    QuestionSummary, ResponseEntry, TesterEvaluation, TesterEvaluationPage, ParticipationCounts,
    Participation, FeedbackResult
)
from .invitation import (
    InvitationCreate, InvitationAccept, InvitationSummary, InvitationSendResponse,
    InvitationResendResponse, InvitationValidation, InvitationAcceptResponse, SentInvitation
)
