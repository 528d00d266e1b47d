"""Level curve endpoints — 2 routes, both public."""

from __future__ import annotations

from fastapi import APIRouter, Path, Query

from bitbridge.gamification.level_curve import level_table, progress_to_next_level
from bitbridge.gamification.schemas import LevelEntry, LevelProgressResponse, LevelTableResponse

router = APIRouter(prefix="/api/v1", tags=["Levels"])

# Experience is stored in a 32-bit integer column
MAX_XP = 2**31 - 1


@router.get("/levels", response_model=LevelTableResponse)
async def get_level_table(up_to: int = Query(20, ge=1, le=200)):
    """XP required for each level from 1 to ``up_to``."""
    return LevelTableResponse(levels=[LevelEntry(**row) for row in level_table(up_to)])


@router.get("/levels/{xp}", response_model=LevelProgressResponse)
async def get_level_progress(xp: int = Path(..., ge=0, le=MAX_XP)):
    """Level and progress-bar data for an XP total."""
    return LevelProgressResponse(**progress_to_next_level(xp))
