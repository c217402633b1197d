# File: app/core/security.py
from typing import Any, Dict, List, Optional
from jose import ExpiredSignatureError, JWTError, jwt
from app.core.config import settings
from app.core.exceptions import UnauthenticatedError
import logging

logger = logging.getLogger(__name__)


def get_token_kid(token: str) -> Optional[str]:
    """Read the key id from the token header without verifying anything"""
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        logger.warning(f"Malformed access token: {e}")
        raise UnauthenticatedError("Invalid access token")
    return header.get("kid")


def select_signing_key(jwks: Dict[str, Any], kid: Optional[str]) -> Optional[Dict[str, Any]]:
    keys: List[Dict[str, Any]] = jwks.get("keys", [])
    if kid is None:
        # A single-key set is unambiguous even without a kid header
        return keys[0] if len(keys) == 1 else None
    for key in keys:
        if key.get("kid") == kid:
            return key
    return None


def decode_access_token(token: str, key: Dict[str, Any]) -> Dict[str, Any]:
    """Verify signature, expiry and audience; returns the claims"""
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=settings.jwt_algorithms,
            audience=settings.JWT_AUDIENCE,
        )
    except ExpiredSignatureError:
        raise UnauthenticatedError("Access token has expired")
    except JWTError as e:
        logger.warning(f"Access token rejected: {e}")
        raise UnauthenticatedError("Invalid access token")

    if not payload.get("sub"):
        raise UnauthenticatedError("Access token has no subject")
    return payload
