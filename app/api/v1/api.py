# File: app/api/v1/api.py
from fastapi import APIRouter
from app.api.v1.endpoints import auth, projects, evaluations, invitations

# Create main API router
api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    projects.router,
    prefix="/projects",
    tags=["projects"]
)

api_router.include_router(
    evaluations.router,
    prefix="/evaluations",
    tags=["evaluations"]
)

api_router.include_router(
    invitations.router,
    prefix="/invitations",
    tags=["invitations"]
)
