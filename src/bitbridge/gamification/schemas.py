"""Pydantic response models for level endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class LevelProgressResponse(BaseModel):
    current_level: int
    current_level_xp: int
    next_level_xp: int
    progress_in_level: int
    xp_needed_for_next_level: int
    progress_percentage: float


class LevelEntry(BaseModel):
    level: int
    xp_required: int


class LevelTableResponse(BaseModel):
    levels: list[LevelEntry]
