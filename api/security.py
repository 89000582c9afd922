import logging
import os

from dotenv import load_dotenv
from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader
from jose import JWTError, jwt

from profile_store import parse_object_id

logger = logging.getLogger(__name__)

load_dotenv()

AUTH_TOKEN_HEADER = "x-auth-token"
JWT_ALGORITHM = "HS256"
auth_token_header = APIKeyHeader(name=AUTH_TOKEN_HEADER, auto_error=False)


def _jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"msg": "Authentication is not configured. Set JWT_SECRET environment variable."},
        )
    return secret


def get_current_user_id(token: str | None = Security(auth_token_header)) -> str:
    """Resolve the ``x-auth-token`` header to the id of the owning user.

    The token payload is expected as ``{"user": {"id": "<user id>"}}``.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"msg": "No token, authorization denied"},
        )

    try:
        payload = jwt.decode(token, _jwt_secret(), algorithms=[JWT_ALGORITHM])
    except JWTError:
        logger.info("Rejected invalid auth token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"msg": "Token is not valid"},
        ) from None

    user = payload.get("user")
    user_id = user.get("id") if isinstance(user, dict) else None
    if not isinstance(user_id, str) or parse_object_id(user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"msg": "Token is not valid"},
        )
    return user_id
