# File: app/crud/base.py
from typing import Any, Dict, Generic, Iterable, Optional, Type, TypeVar, Union
from pydantic import BaseModel
from sqlalchemy import asc, desc, func
from sqlalchemy.orm import ColumnProperty, Query, Session
from app.core.exceptions import BadRequestError, NotFoundError
from app.core.permissions import PermissionConfig, build_permissions, check_permission
from app.core.tenant_context import PaginationOptions, TenantContext
from app.db.database import Base
from app.models.base import utcnow

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

DEFAULT_ORDER = {"created_at": "desc"}


def paginate(query: Query, options: PaginationOptions) -> Dict[str, Any]:
    """Apply skip/take to an already ordered query and wrap it with pagination meta"""
    total = query.order_by(None).count()
    data = query.offset(options.skip).limit(options.take).all()
    return {
        "data": data,
        "meta": {
            "total": total,
            "skip": options.skip,
            "take": options.take,
            "has_more": options.skip + options.take < total,
        },
    }


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Tenant-scoped CRUD.

    Every method takes the caller's TenantContext, checks it against the
    permission table and adds a tenant_id equality predicate, so a row of
    another account behaves exactly like a missing row.
    """

    def __init__(
        self,
        model: Type[ModelType],
        *,
        entity_name: Optional[str] = None,
        permissions: Optional[Dict[str, Iterable]] = None,
    ):
        self.model = model
        self.entity_name = entity_name or model.__tablename__.rstrip("s")
        self.permissions: PermissionConfig = build_permissions(permissions)

    # ------------------------------------------------------------------
    # Scoping helpers
    # ------------------------------------------------------------------

    def check_permission(self, ctx: TenantContext, action: str) -> None:
        check_permission(self.permissions, ctx, action, self.entity_name)

    def tenant_filter(self, ctx: TenantContext):
        return self.model.tenant_id == ctx.tenant_id

    def query(self, db: Session, ctx: TenantContext, filters: Iterable = ()) -> Query:
        query = db.query(self.model).filter(self.tenant_filter(ctx))
        for criterion in filters:
            query = query.filter(criterion)
        return query

    def apply_order(self, query: Query, order_by: Optional[Dict[str, str]]) -> Query:
        for field, direction in (order_by or DEFAULT_ORDER).items():
            column = getattr(self.model, field, None)
            if column is None or not isinstance(getattr(column, "property", None), ColumnProperty):
                raise BadRequestError(f"Cannot order {self.entity_name} by '{field}'")
            direction = (direction or "asc").lower()
            if direction not in ("asc", "desc"):
                raise BadRequestError(f"Invalid sort direction '{direction}'")
            query = query.order_by(desc(column) if direction == "desc" else asc(column))
        return query

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_multi(
        self,
        db: Session,
        ctx: TenantContext,
        *,
        options: Optional[PaginationOptions] = None,
        filters: Iterable = (),
    ) -> Dict[str, Any]:
        self.check_permission(ctx, "find_all")
        options = options or PaginationOptions()
        query = self.apply_order(self.query(db, ctx, filters), options.order_by)
        return paginate(query, options)

    def get(self, db: Session, ctx: TenantContext, id: Any, *, filters: Iterable = ()) -> ModelType:
        self.check_permission(ctx, "find_one")
        return self.get_scoped(db, ctx, id, filters=filters)

    def get_scoped(self, db: Session, ctx: TenantContext, id: Any, *, filters: Iterable = ()) -> ModelType:
        """Tenant-filtered lookup without a permission check, for ownership verification"""
        record = self.query(db, ctx, filters).filter(self.model.id == id).first()
        if record is None:
            raise NotFoundError(f"{self.entity_name.capitalize()} with ID {id} not found")
        return record

    def count(self, db: Session, ctx: TenantContext, filters: Iterable = ()) -> int:
        return self.query(db, ctx, filters).with_entities(func.count(self.model.id)).scalar() or 0

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(
        self,
        db: Session,
        ctx: TenantContext,
        *,
        obj_in: Union[CreateSchemaType, Dict[str, Any]],
        extra: Optional[Dict[str, Any]] = None,
    ) -> ModelType:
        self.check_permission(ctx, "create")
        create_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        create_data = {**create_data, **(extra or {}), "tenant_id": ctx.tenant_id}
        db_obj = self.model(**create_data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self,
        db: Session,
        ctx: TenantContext,
        *,
        id: Any,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        filters: Iterable = (),
    ) -> ModelType:
        self.check_permission(ctx, "update")
        db_obj = self.get_scoped(db, ctx, id, filters=filters)
        update_data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        # tenant_id is never writable through an update
        update_data.pop("tenant_id", None)
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, ctx: TenantContext, *, id: Any) -> ModelType:
        self.check_permission(ctx, "delete")
        db_obj = self.get_scoped(db, ctx, id)
        db.delete(db_obj)
        db.commit()
        return db_obj

    def soft_remove(self, db: Session, ctx: TenantContext, *, id: Any, filters: Iterable = ()) -> ModelType:
        """Mark the row deleted instead of removing it; needs a deleted_at column"""
        self.check_permission(ctx, "delete")
        db_obj = self.get_scoped(db, ctx, id, filters=filters)
        db_obj.deleted_at = utcnow()
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj
