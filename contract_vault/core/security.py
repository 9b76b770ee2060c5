"""
Bearer token verification and user resolution
Tokens are HS256 JWTs carrying the user id in "sub"; the role is always read
from the users table.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.config import settings
from contract_vault.db.base import get_db
from contract_vault.db.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, role: str = "user", expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": user_id, "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    Verify a token and return its user id.

    Raises:
        JWTError: Bad signature, expired, or no subject
    """
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    user_id = payload.get("sub") or payload.get("user_id") or payload.get("userId")
    if not user_id:
        raise JWTError("Invalid token payload")
    return str(user_id)


async def resolve_user(db: AsyncSession, token: Optional[str]) -> Optional[User]:
    """User for a token, or None when the token is missing, invalid or unknown"""
    if not token:
        return None
    try:
        user_id = decode_access_token(token)
    except JWTError as e:
        logger.debug(f"Rejected bearer token: {str(e)}")
        return None
    return await db.get(User, user_id)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")

    try:
        user_id = decode_access_token(credentials.credentials)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    return await resolve_user(db, credentials.credentials if credentials else None)


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def socket_token(query_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """Token from the ?token= query parameter, else from an Authorization: Bearer header"""
    if query_token:
        return query_token
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return None
