# File: app/schemas/project.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from app.models.project import ProjectStatus
from app.models.user import UserRole
from app.schemas.common import UserSummary


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None


class ProjectMemberUser(UserSummary):
    role: UserRole


class ProjectMember(BaseModel):
    user_id: str
    created_at: datetime
    user: ProjectMemberUser

    class Config:
        from_attributes = True


class Project(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    owner_id: str
    tenant_id: str
    created_at: datetime
    updated_at: datetime
    owner: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class ProjectDetail(Project):
    members: List[ProjectMember] = []
