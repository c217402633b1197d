# File: app/api/v1/endpoints/projects.py
from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app import schemas
from app.api import deps
from app.core.tenant_context import PaginationOptions, TenantContext
from app.db.database import get_db
from app.models.project import ProjectStatus
from app.models.user import UserRole
from app.services import project_service

router = APIRouter()

owner_only = deps.require_roles(UserRole.OWNER)


@router.get("", response_model=schemas.Page[schemas.Project])
def list_projects(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(deps.get_tenant_context),
    pagination: PaginationOptions = Depends(deps.get_pagination),
    status: Optional[ProjectStatus] = Query(None),
) -> Any:
    """Projects visible to the caller; members only see projects they belong to"""
    return project_service.list(db, ctx, pagination, status=status)


@router.get("/mine", response_model=List[schemas.Project])
def list_my_projects(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(deps.get_tenant_context),
) -> Any:
    return project_service.mine(db, ctx)


@router.get("/{project_id}", response_model=schemas.ProjectDetail)
def read_project(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(deps.get_tenant_context),
    project_id: UUID,
) -> Any:
    return project_service.get(db, ctx, str(project_id))


@router.post("", response_model=schemas.Project, status_code=status.HTTP_201_CREATED)
def create_project(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    project_in: schemas.ProjectCreate,
) -> Any:
    return project_service.create(db, ctx, project_in)


@router.put("/{project_id}", response_model=schemas.Project)
def update_project(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    project_id: UUID,
    project_in: schemas.ProjectUpdate,
) -> Any:
    return project_service.update(db, ctx, str(project_id), project_in)


@router.delete("/{project_id}", response_model=schemas.Message)
def delete_project(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    project_id: UUID,
) -> Any:
    project_service.delete(db, ctx, str(project_id))
    return {"message": "Project deleted successfully"}


@router.post(
    "/{project_id}/members/{user_id}",
    response_model=schemas.ProjectMember,
    status_code=status.HTTP_201_CREATED,
)
def add_project_member(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    project_id: UUID,
    user_id: UUID,
) -> Any:
    return project_service.add_member(db, ctx, str(project_id), str(user_id))


@router.delete("/{project_id}/members/{user_id}", response_model=schemas.Message)
def remove_project_member(
    *,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(owner_only),
    project_id: UUID,
    user_id: UUID,
) -> Any:
    project_service.remove_member(db, ctx, str(project_id), str(user_id))
    return {"message": "Member removed successfully"}
