# File: app/crud/account.py
from typing import Optional
from sqlalchemy.orm import Session
from app.models.account import Account


class CRUDAccount:
    """Accounts are the tenant root, so lookups here are not tenant-filtered"""

    def get(self, db: Session, *, id: str) -> Optional[Account]:
        return db.query(Account).filter(Account.id == id).first()

    def create(self, db: Session, *, name: str) -> Account:
        db_obj = Account(name=name)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, *, id: str) -> None:
        db_obj = self.get(db, id=id)
        if db_obj is not None:
            db.delete(db_obj)
            db.commit()


account = CRUDAccount()
