"""Project difficulty levels and the completion reward schedule.

This is the single source of truth for rewards; projects copy their row of
this table onto themselves when created.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class ProjectStatus(str, Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"


class Reward(NamedTuple):
    xp: int
    bits: int
    bytes: int


REWARD_SCHEDULE: dict[Difficulty, Reward] = {
    Difficulty.BEGINNER: Reward(xp=300, bits=200, bytes=3),
    Difficulty.INTERMEDIATE: Reward(xp=600, bits=400, bytes=6),
    Difficulty.ADVANCED: Reward(xp=1000, bits=700, bytes=12),
    Difficulty.EXPERT: Reward(xp=1500, bits=1200, bytes=20),
}


def reward_for_difficulty(difficulty: Difficulty | str) -> Reward:
    """Look up the completion reward for a difficulty.

    Raises:
        ValueError: If ``difficulty`` is not a known difficulty name.
    """
    return REWARD_SCHEDULE[Difficulty(difficulty)]
