# File: app/schemas/common.py
from typing import Generic, List, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class PaginationMeta(BaseModel):
    total: int
    skip: int
    take: int
    has_more: bool


class Page(BaseModel, Generic[T]):
    data: List[T]
    meta: PaginationMeta


class Message(BaseModel):
    message: str


class UserSummary(BaseModel):
    id: str
    email: str

    class Config:
        from_attributes = True


class ProjectSummary(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True
