"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bitbridge.auth.jwt import verify_token
from bitbridge.database import get_session
from bitbridge.db.models import UserProfile
from bitbridge.profiles.service import get_profile

_bearer = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> UserProfile:
    """
    Extract and verify JWT, return the caller's profile.

    Raises 401 on an invalid token or unknown profile.
    """
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    try:
        user_id = int(payload["sub"])
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=401, detail="Malformed token subject") from e

    profile = await get_profile(db, user_id)
    if profile is None:
        raise HTTPException(status_code=401, detail="User not found")
    return profile
