# File: app/models/account.py
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class Account(BaseModel):
    """The tenant. Its id is the only isolation boundary between organizations."""
    __tablename__ = "accounts"

    name = Column(String(255), nullable=False)

    users = relationship("User", back_populates="account", cascade="all, delete-orphan")
