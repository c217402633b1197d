# File: app/crud/user.py
from typing import Optional
from sqlalchemy.orm import Session
from app.models.user import User, UserRole


class CRUDUser:

    def get_by_email(self, db: Session, *, email: str, tenant_id: Optional[str] = None) -> Optional[User]:
        query = db.query(User).filter(User.email == email)
        if tenant_id is not None:
            query = query.filter(User.tenant_id == tenant_id)
        return query.first()

    def get_by_external_id(self, db: Session, *, external_id: str) -> Optional[User]:
        return db.query(User).filter(User.external_id == external_id).first()

    def get_in_tenant(self, db: Session, *, id: str, tenant_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == id, User.tenant_id == tenant_id).first()

    def build_mirror(
        self,
        db: Session,
        *,
        external_id: str,
        email: str,
        role: UserRole,
        tenant_id: str,
    ) -> User:
        """
        Stage the local row for an identity-provider user without committing.

        The sync trigger may already have inserted the row for this subject;
        in that case it is re-pointed at the given role and tenant instead of
        inserting a duplicate.
        """
        db_obj = self.get_by_external_id(db, external_id=external_id)
        if db_obj is None:
            db_obj = User(external_id=external_id, email=email, role=role, tenant_id=tenant_id)
        else:
            db_obj.email = email
            db_obj.role = role
            db_obj.tenant_id = tenant_id
        db.add(db_obj)
        return db_obj


user = CRUDUser()
