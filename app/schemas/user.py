# File: app/schemas/user.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.models.user import UserRole


class User(BaseModel):
    id: str
    email: str
    role: UserRole
    tenant_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AccountInfo(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class UserProfile(User):
    account: AccountInfo
