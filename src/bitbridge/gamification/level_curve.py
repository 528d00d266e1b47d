"""Experience curve: XP requirements, level lookup and progress-bar maths.

Level N requires floor(100 * (N - 1) ** 1.5) cumulative XP:

  level 1 -> 0, level 2 -> 100, level 3 -> 282, level 4 -> 519, level 5 -> 800

Level is always derived from XP through these functions and never stored.
All arithmetic is integer-only, so the curve stays exact and strictly
increasing for arbitrarily large levels.
"""

from __future__ import annotations

import math

XP_BASE = 100


def xp_required_for_level(level: int) -> int:
    """Cumulative XP needed to reach ``level``."""
    if level <= 1:
        return 0
    # floor(100 * n^1.5) == isqrt(100^2 * n^3)
    return math.isqrt(XP_BASE * XP_BASE * (level - 1) ** 3)


def level_from_xp(xp: int) -> int:
    """Return the highest level whose XP requirement is <= ``xp``."""
    if xp < 0:
        msg = f"Experience points cannot be negative (got {xp})"
        raise ValueError(msg)

    # Bracket the answer: required(low) <= xp < required(high)
    low, high = 1, 2
    while xp_required_for_level(high) <= xp:
        low, high = high, high * 2

    while high - low > 1:
        mid = (low + high) // 2
        if xp_required_for_level(mid) <= xp:
            low = mid
        else:
            high = mid
    return low


def progress_to_next_level(xp: int) -> dict:
    """Compute progress-bar data for ``xp``.

    ``progress_percentage`` is clamped to [0, 100].
    """
    current_level = level_from_xp(xp)
    current_level_xp = xp_required_for_level(current_level)
    next_level_xp = xp_required_for_level(current_level + 1)
    progress_in_level = xp - current_level_xp
    xp_needed_for_next_level = next_level_xp - current_level_xp

    if xp_needed_for_next_level > 0:
        percentage = progress_in_level / xp_needed_for_next_level * 100
    else:
        percentage = 100.0

    return {
        "current_level": current_level,
        "current_level_xp": current_level_xp,
        "next_level_xp": next_level_xp,
        "progress_in_level": progress_in_level,
        "xp_needed_for_next_level": xp_needed_for_next_level,
        "progress_percentage": min(100.0, max(0.0, percentage)),
    }


def level_table(up_to: int) -> list[dict]:
    """XP requirement for every level from 1 to ``up_to`` inclusive."""
    return [
        {"level": level, "xp_required": xp_required_for_level(level)}
        for level in range(1, up_to + 1)
    ]
