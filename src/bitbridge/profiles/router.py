"""Profile endpoints — 2 routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from bitbridge.auth.dependencies import get_current_user
from bitbridge.database import get_session
from bitbridge.db.models import UserProfile
from bitbridge.profiles.schemas import ProfileResponse
from bitbridge.profiles.service import get_profile, profile_summary

router = APIRouter(prefix="/api/v1", tags=["Profiles"])


def _build_profile_response(profile: UserProfile) -> ProfileResponse:
    summary = profile_summary(profile)
    summary["id"] = str(summary["id"])
    return ProfileResponse(**summary)


@router.get("/profiles/me", response_model=ProfileResponse)
async def get_my_profile(user: UserProfile = Depends(get_current_user)):
    """The caller's profile with derived level."""
    return _build_profile_response(user)


@router.get("/profiles/{user_id}", response_model=ProfileResponse)
async def get_profile_endpoint(
    user_id: int,
    db: AsyncSession = Depends(get_session),
):
    """Any profile with derived level (public)."""
    profile = await get_profile(db, user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return _build_profile_response(profile)
