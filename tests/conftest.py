import os
import uuid

# Settings and the engine are built at import time, so the test database
# has to be chosen before anything from app is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.exceptions import IdentityProviderError
from app.core.identity_provider import get_identity_provider
from app.core.tenant_context import TenantContext
from app.db.database import Base, get_db
from app.main import app
from app.models import (
    Account, User, UserRole, Project, ProjectMember, ProjectStatus,
    Evaluation, EvaluationQuestion, EvaluationStatus, QuestionType
)

API = "/api/v1"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeIdentityProvider:
    """In-memory stand-in for Supabase Auth; the bearer token is the user's external id"""

    def __init__(self):
        self.users = {}
        self.signed_out = []
        self.create_error = None
        self.sign_out_error = None

    def create_user(self, email, password, metadata):
        if self.create_error is not None:
            raise self.create_error
        external_id = str(uuid.uuid4())
        self.users[email] = {"id": external_id, "password": password, "user_metadata": metadata}
        return {"id": external_id, "email": email}

    def sign_in(self, email, password):
        record = self.users.get(email)
        if record is None or record["password"] != password:
            raise IdentityProviderError("Invalid login credentials", upstream_status=400)
        return {
            "access_token": record["id"],
            "refresh_token": f"refresh-{record['id']}",
            "expires_at": 1900000000,
        }

    def sign_out(self, access_token):
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.signed_out.append(access_token)

    def verify_access_token(self, token):
        return {"sub": token, "aud": "authenticated"}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def client(db, identity):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity
    yield TestClient(app)
    app.dependency_overrides.clear()


# ----------------------------------------------------------------------
# Factories
# ----------------------------------------------------------------------

def make_account(db, name="Acme"):
    account = Account(name=name)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


def make_user(db, account, role=UserRole.OWNER, email=None):
    user = User(
        external_id=str(uuid.uuid4()),
        email=email or f"{role.value}-{uuid.uuid4().hex[:8]}@example.com",
        role=role,
        tenant_id=account.id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_project(db, owner, name="Mobile app", status=ProjectStatus.ACTIVE, members=()):
    project = Project(name=name, status=status, owner_id=owner.id, tenant_id=owner.tenant_id)
    db.add(project)
    db.flush()
    for member in members:
        db.add(ProjectMember(project_id=project.id, user_id=member.id))
    db.commit()
    db.refresh(project)
    return project


def make_evaluation(db, project, title="Onboarding Survey", status=EvaluationStatus.ACTIVE, questions=None):
    evaluation = Evaluation(
        title=title,
        status=status,
        project_id=project.id,
        created_by_id=project.owner_id,
        tenant_id=project.tenant_id,
    )
    db.add(evaluation)
    db.flush()
    questions = questions if questions is not None else [
        ("Liked it?", QuestionType.BOOLEAN),
        ("Score 1-5", QuestionType.RATING),
    ]
    for order, (text, question_type) in enumerate(questions):
        db.add(EvaluationQuestion(evaluation_id=evaluation.id, text=text, type=question_type, order=order))
    db.commit()
    db.refresh(evaluation)
    return evaluation


def auth(user):
    return {"Authorization": f"Bearer {user.external_id}"}


def ctx_for(user):
    return TenantContext.from_user(user)


@pytest.fixture
def account(db):
    return make_account(db, "Acme")


@pytest.fixture
def other_account(db):
    return make_account(db, "Globex")


@pytest.fixture
def owner(db, account):
    return make_user(db, account, UserRole.OWNER, "owner@acme.com")


@pytest.fixture
def tester(db, account):
    return make_user(db, account, UserRole.TESTER, "tester@acme.com")


@pytest.fixture
def member(db, account):
    return make_user(db, account, UserRole.MEMBER, "member@acme.com")


@pytest.fixture
def other_owner(db, other_account):
    return make_user(db, other_account, UserRole.OWNER, "owner@globex.com")


@pytest.fixture
def other_tester(db, other_account):
    return make_user(db, other_account, UserRole.TESTER, "tester@globex.com")
