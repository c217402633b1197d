# File: app/models/project.py
from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import Base, TenantBaseModel, utcnow
import enum


class ProjectStatus(enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    TESTING = "testing"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Project(TenantBaseModel):
    __tablename__ = "projects"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(ProjectStatus, name="project_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ProjectStatus.DRAFT,
    )
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    # Soft delete marker; rows with a value here are invisible to every read
    deleted_at = Column(DateTime, nullable=True)

    owner = relationship("User", foreign_keys=[owner_id])
    members = relationship("ProjectMember", back_populates="project", cascade="all, delete-orphan")
    evaluations = relationship("Evaluation", back_populates="project", cascade="all, delete-orphan")


class ProjectMember(Base):
    """Membership edge; the only way a member-role user can see a project"""
    __tablename__ = "project_members"

    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    project = relationship("Project", back_populates="members")
    user = relationship("User")
