# File: app/crud/project.py
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from app.crud.base import CRUDBase
from app.core.tenant_context import TenantContext
from app.models.project import Project, ProjectMember
from app.models.user import UserRole
from app.schemas.project import ProjectCreate, ProjectUpdate


class CRUDProject(CRUDBase[Project, ProjectCreate, ProjectUpdate]):

    def not_deleted(self):
        return Project.deleted_at.is_(None)

    def visible_to(self, ctx: TenantContext) -> List:
        """Extra predicates on top of the tenant filter for the caller's role"""
        filters = [self.not_deleted()]
        if ctx.role == UserRole.MEMBER:
            filters.append(Project.members.any(ProjectMember.user_id == ctx.user_id))
        return filters

    def get_detail(self, db: Session, ctx: TenantContext, id: str) -> Project:
        self.check_permission(ctx, "find_one")
        return self.get_scoped(db, ctx, id, filters=self.visible_to(ctx))

    def get_owned_by(self, db: Session, ctx: TenantContext) -> List[Project]:
        return (
            self.query(db, ctx, [self.not_deleted(), Project.owner_id == ctx.user_id])
            .options(joinedload(Project.owner))
            .order_by(Project.created_at.desc())
            .all()
        )

    def get_membership(self, db: Session, *, project_id: str, user_id: str) -> Optional[ProjectMember]:
        return (
            db.query(ProjectMember)
            .filter(ProjectMember.project_id == project_id, ProjectMember.user_id == user_id)
            .first()
        )

    def is_member(self, db: Session, *, project_id: str, user_id: str) -> bool:
        return self.get_membership(db, project_id=project_id, user_id=user_id) is not None


project = CRUDProject(
    Project,
    entity_name="project",
    permissions={
        "create": [UserRole.OWNER],
        "update": [UserRole.OWNER],
        "delete": [UserRole.OWNER],
        "find_all": [UserRole.OWNER, UserRole.TESTER, UserRole.MEMBER],
        "find_one": [UserRole.OWNER, UserRole.TESTER, UserRole.MEMBER],
    },
)
