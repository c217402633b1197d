# File: app/models/user.py
from sqlalchemy import Column, String, Enum
from sqlalchemy.orm import relationship
from app.models.base import TenantBaseModel
import enum


class UserRole(enum.Enum):
    OWNER = "owner"
    TESTER = "tester"
    MEMBER = "member"


class User(TenantBaseModel):
    __tablename__ = "users"

    # Subject id issued by the identity provider
    external_id = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.TESTER,
    )

    account = relationship("Account", back_populates="users")
