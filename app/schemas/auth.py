# File: app/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from app.models.user import UserRole
from app.schemas.user import User


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole
    account_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SignupResponse(BaseModel):
    message: str
    user: User


class LoginResponse(BaseModel):
    message: str
    user: User
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    token_type: str = "bearer"
