# File: app/core/exceptions.py
from typing import Dict, Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base for domain errors; FastAPI renders them as {"detail": ...}"""

    default_status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.default_status_code, detail=detail, headers=headers)


class AuthorizationError(AppError):
    default_status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    default_status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    default_status_code = status.HTTP_409_CONFLICT


class BadRequestError(AppError):
    default_status_code = status.HTTP_400_BAD_REQUEST


class UnauthenticatedError(AppError):
    default_status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class IdentityProviderError(AppError):
    """The identity provider rejected a request (4xx) or could not be reached (502)"""

    default_status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, detail: str, upstream_status: Optional[int] = None):
        super().__init__(detail)
        self.upstream_status = upstream_status
        if upstream_status is not None and 400 <= upstream_status < 500:
            self.status_code = status.HTTP_400_BAD_REQUEST
