"""Pydantic response models for profile endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from bitbridge.gamification.schemas import LevelProgressResponse


class ProfileResponse(BaseModel):
    id: str
    username: str
    full_name: str | None = None
    avatar_url: str | None = None
    experience_points: int
    bits_currency: int
    bytes_currency: int
    level: LevelProgressResponse
