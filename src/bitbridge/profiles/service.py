"""Profile reads and reward crediting."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import select, update

from bitbridge.db.models import UserProfile
from bitbridge.gamification.level_curve import progress_to_next_level

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from bitbridge.projects.rewards import Reward


async def create_profile(
    db: AsyncSession,
    username: str,
    full_name: str | None = None,
) -> UserProfile:
    """Create a fresh profile at zero XP and zero currency.

    Called by the auth service at registration.
    """
    now = datetime.now(timezone.utc)
    profile = UserProfile(
        username=username,
        full_name=full_name,
        experience_points=0,
        bits_currency=0,
        bytes_currency=0,
        created_at=now,
        updated_at=now,
    )
    db.add(profile)
    await db.flush()
    return profile


async def get_profile(db: AsyncSession, user_id: int) -> UserProfile | None:
    """Get a profile by ID."""
    result = await db.execute(
        select(UserProfile)
        .where(UserProfile.id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_profiles(db: AsyncSession, user_ids: Iterable[int]) -> list[UserProfile]:
    """Get several profiles, ordered by ID."""
    ids = list(user_ids)
    if not ids:
        return []
    result = await db.execute(
        select(UserProfile)
        .where(UserProfile.id.in_(ids))
        .order_by(UserProfile.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def credit_profiles(
    db: AsyncSession,
    user_ids: Iterable[int],
    reward: Reward,
) -> None:
    """Add ``reward`` to every listed profile in a single UPDATE.

    The increment is evaluated by the database, so concurrent credits
    to the same profile cannot lose updates.
    """
    ids = list(user_ids)
    if not ids:
        return
    await db.execute(
        update(UserProfile)
        .where(UserProfile.id.in_(ids))
        .values(
            experience_points=UserProfile.experience_points + reward.xp,
            bits_currency=UserProfile.bits_currency + reward.bits,
            bytes_currency=UserProfile.bytes_currency + reward.bytes,
            updated_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )


def profile_summary(profile: UserProfile) -> dict:
    """Profile fields plus level data derived from its XP."""
    return {
        "id": profile.id,
        "username": profile.username,
        "full_name": profile.full_name,
        "avatar_url": profile.avatar_url,
        "experience_points": profile.experience_points,
        "bits_currency": profile.bits_currency,
        "bytes_currency": profile.bytes_currency,
        "level": progress_to_next_level(profile.experience_points),
    }
