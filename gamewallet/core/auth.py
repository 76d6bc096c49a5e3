"""
JWT identity extraction.

Login and session management live outside this service; callers present a
bearer token whose ``sub`` claim is the authenticated user id.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from gamewallet.core.config import settings

logger = logging.getLogger(__name__)

security = HTTPBearer()


def create_access_token(
    user_id: str,
    expires_delta: Optional[timedelta] = None,
    role: Optional[str] = None,
) -> str:
    """Create a JWT access token for a user id; operators carry role=admin."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    )
    to_encode: Dict[str, Any] = {"sub": user_id, "exp": expire, "type": "access"}
    if role:
        to_encode["role"] = role
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Dict[str, Any]:
    """Verify and decode a JWT access token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if payload.get("type") != "access" or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """FastAPI dependency returning the authenticated user id."""
    payload = verify_token(credentials.credentials)
    return str(payload["sub"])


async def get_current_admin_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """FastAPI dependency for settlement and maintenance routes."""
    payload = verify_token(credentials.credentials)
    if payload.get("role") != "admin":
        logger.warning(f"Non-admin {payload.get('sub')} tried an admin route")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return str(payload["sub"])
