"""
Project operations: role-aware listing, ownership and membership management
"""
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session, joinedload
from app import crud
from app.core.exceptions import ConflictError, NotFoundError
from app.core.permissions import require_owner
from app.core.tenant_context import PaginationOptions, TenantContext
from app.models.project import Project, ProjectMember, ProjectStatus
from app.schemas.project import ProjectCreate, ProjectUpdate
import logging

logger = logging.getLogger(__name__)


class ProjectService:

    def list(
        self,
        db: Session,
        ctx: TenantContext,
        options: Optional[PaginationOptions] = None,
        status: Optional[ProjectStatus] = None,
    ) -> Dict[str, Any]:
        filters = crud.project.visible_to(ctx)
        if status is not None:
            filters.append(Project.status == status)
        return crud.project.get_multi(db, ctx, options=options, filters=filters)

    def get(self, db: Session, ctx: TenantContext, project_id: str) -> Project:
        return crud.project.get_detail(db, ctx, project_id)

    def mine(self, db: Session, ctx: TenantContext) -> List[Project]:
        return crud.project.get_owned_by(db, ctx)

    def create(self, db: Session, ctx: TenantContext, project_in: ProjectCreate) -> Project:
        project = crud.project.create(db, ctx, obj_in=project_in, extra={"owner_id": ctx.user_id})
        logger.info(f"✅ Project '{project.name}' ({project.id}) created by {ctx.email}")
        return project

    def update(self, db: Session, ctx: TenantContext, project_id: str, project_in: ProjectUpdate) -> Project:
        return crud.project.update(
            db, ctx, id=project_id, obj_in=project_in, filters=[crud.project.not_deleted()]
        )

    def delete(self, db: Session, ctx: TenantContext, project_id: str) -> Project:
        project = crud.project.soft_remove(db, ctx, id=project_id, filters=[crud.project.not_deleted()])
        logger.info(f"🗑️ Project {project_id} soft-deleted by {ctx.email}")
        return project

    def add_member(self, db: Session, ctx: TenantContext, project_id: str, user_id: str) -> ProjectMember:
        require_owner(ctx, "add project members")
        project = crud.project.get_scoped(db, ctx, project_id, filters=[crud.project.not_deleted()])

        if crud.user.get_in_tenant(db, id=user_id, tenant_id=ctx.tenant_id) is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        if crud.project.is_member(db, project_id=project.id, user_id=user_id):
            raise ConflictError("User is already a member of this project")

        membership = ProjectMember(project_id=project.id, user_id=user_id)
        db.add(membership)
        db.commit()
        logger.info(f"👥 User {user_id} added to project {project.id}")
        return (
            db.query(ProjectMember)
            .options(joinedload(ProjectMember.user))
            .filter(ProjectMember.project_id == project.id, ProjectMember.user_id == user_id)
            .one()
        )

    def remove_member(self, db: Session, ctx: TenantContext, project_id: str, user_id: str) -> None:
        require_owner(ctx, "remove project members")
        project = crud.project.get_scoped(db, ctx, project_id, filters=[crud.project.not_deleted()])

        membership = crud.project.get_membership(db, project_id=project.id, user_id=user_id)
        if membership is None:
            return
        db.delete(membership)
        db.commit()
        logger.info(f"👥 User {user_id} removed from project {project.id}")


project_service = ProjectService()
