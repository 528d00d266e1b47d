"""Project membership state machine and completion rewards.

Per (user, project):  not a member -> member -> not a member (leave)
Per project:          ongoing -> completed | deleted (both terminal)

Rules:
- One membership per (project, user), enforced by a unique constraint
- Joining requires an ongoing project
- Completion credits every current member with the project's reward, once
- Leaving never revokes rewards already credited

Every operation runs as its own transaction: it commits when done and rolls
back on a database error. Expected outcomes (not found, already a member, ...) are
returned as a LedgerResult rather than raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bitbridge.db.models import Project, ProjectMember
from bitbridge.gamification.level_curve import level_from_xp
from bitbridge.profiles.service import credit_profiles, get_profiles
from bitbridge.projects.rewards import ProjectStatus, Reward
from bitbridge.projects.service import get_membership, get_project, list_memberships
from bitbridge.redis_client import LEVEL_UP_CHANNEL, PROJECT_COMPLETED_CHANNEL, publish_event

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LedgerError(str, Enum):
    NOT_FOUND = "not_found"
    NOT_MEMBER = "not_member"
    ALREADY_MEMBER = "already_member"
    ALREADY_COMPLETED = "already_completed"
    PERSISTENCE_FAILURE = "persistence_failure"


ERROR_MESSAGES: dict[LedgerError, str] = {
    LedgerError.NOT_FOUND: "Project not found",
    LedgerError.NOT_MEMBER: "You are not a member of this project",
    LedgerError.ALREADY_MEMBER: "You are already a member of this project",
    LedgerError.ALREADY_COMPLETED: "This project has already been completed",
    LedgerError.PERSISTENCE_FAILURE: "The project store is unavailable, please try again",
}


@dataclass(frozen=True)
class LedgerResult(Generic[T]):
    """Outcome of a ledger operation: a value on success, an error kind otherwise."""

    value: T | None = None
    error: LedgerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        return ERROR_MESSAGES[self.error] if self.error is not None else None

    @classmethod
    def success(cls, value: T | None = None) -> LedgerResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: LedgerError) -> LedgerResult[T]:
        return cls(error=error)


@dataclass(frozen=True)
class MemberReward:
    user_id: int
    experience_points: int
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


@dataclass(frozen=True)
class CompletionSummary:
    project_id: int
    reward: Reward
    completed_at: datetime
    members: list[MemberReward] = field(default_factory=list)


async def join_project(
    db: AsyncSession,
    project_id: int,
    user_id: int,
    role: str,
) -> LedgerResult[ProjectMember]:
    """Add a user to an ongoing project with the given role.

    The insert relies on the (project_id, user_id) unique constraint, so two
    concurrent joins can never both succeed; the loser sees ALREADY_MEMBER.

    Raises:
        ValueError: If ``role`` is blank.
    """
    role = role.strip()
    if not role:
        msg = "Role must not be empty"
        raise ValueError(msg)

    try:
        project = await get_project(db, project_id, lock=True)
        if project is None or project.status != ProjectStatus.ONGOING.value:
            # Nothing written; end the read transaction without expiring the session
            await db.commit()
            if project is None:
                return LedgerResult.failure(LedgerError.NOT_FOUND)
            return LedgerResult.failure(LedgerError.ALREADY_COMPLETED)

        member = ProjectMember(
            project_id=project_id,
            user_id=user_id,
            role=role,
            joined_at=datetime.now(timezone.utc),
        )
        db.add(member)
        await db.flush()
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if await get_membership(db, project_id, user_id) is not None:
            logger.info("User %d is already a member of project %d", user_id, project_id)
            return LedgerResult.failure(LedgerError.ALREADY_MEMBER)
        logger.exception("Membership insert rejected for user %d, project %d", user_id, project_id)
        return LedgerResult.failure(LedgerError.PERSISTENCE_FAILURE)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to join user %d to project %d", user_id, project_id)
        return LedgerResult.failure(LedgerError.PERSISTENCE_FAILURE)

    logger.info("User %d joined project %d as %s", user_id, project_id, role)
    return LedgerResult.success(member)


async def leave_project(db: AsyncSession, project_id: int, user_id: int) -> LedgerResult[None]:
    """Remove a user's membership. Rewards already credited are kept."""
    try:
        membership = await get_membership(db, project_id, user_id)
        if membership is None:
            await db.commit()
            return LedgerResult.failure(LedgerError.NOT_MEMBER)
        await db.delete(membership)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to remove user %d from project %d", user_id, project_id)
        return LedgerResult.failure(LedgerError.PERSISTENCE_FAILURE)

    logger.info("User %d left project %d", user_id, project_id)
    return LedgerResult.success()


async def complete_project(
    db: AsyncSession,
    project_id: int,
    redis: object = None,
) -> LedgerResult[CompletionSummary]:
    """Mark a project completed and credit every current member, atomically.

    The status flip is a compare-and-set on ``status = 'ongoing'``: only one
    caller can win it, so rewards are paid exactly once. The flip and all
    credits commit together or not at all.
    """
    now = datetime.now(timezone.utc)

    try:
        flipped = await db.execute(
            update(Project)
            .where(
                Project.id == project_id,
                Project.status == ProjectStatus.ONGOING.value,
            )
            .values(
                status=ProjectStatus.COMPLETED.value,
                completed_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if flipped.rowcount == 0:
            exists = await get_project(db, project_id) is not None
            await db.commit()
            return LedgerResult.failure(
                LedgerError.ALREADY_COMPLETED if exists else LedgerError.NOT_FOUND
            )

        project = await get_project(db, project_id)
        reward = Reward(xp=project.xp_reward, bits=project.bits_reward, bytes=project.bytes_reward)

        member_ids = [m.user_id for m in await list_memberships(db, project_id)]
        old_xp = {p.id: p.experience_points for p in await get_profiles(db, member_ids)}

        await credit_profiles(db, member_ids, reward)

        credited = [
            MemberReward(
                user_id=p.id,
                experience_points=p.experience_points,
                old_level=level_from_xp(old_xp[p.id]),
                new_level=level_from_xp(p.experience_points),
            )
            for p in await get_profiles(db, member_ids)
        ]
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to complete project %d, nothing was credited", project_id)
        return LedgerResult.failure(LedgerError.PERSISTENCE_FAILURE)

    logger.info(
        "Project %d completed: %d members credited %d XP, %d bits, %d bytes",
        project_id, len(credited), reward.xp, reward.bits, reward.bytes,
    )

    summary = CompletionSummary(
        project_id=project_id,
        reward=reward,
        completed_at=now,
        members=credited,
    )
    await _publish_completion(redis, summary)
    return LedgerResult.success(summary)


async def delete_project(db: AsyncSession, project_id: int) -> LedgerResult[None]:
    """Delete a project together with all of its memberships."""
    try:
        project = await get_project(db, project_id)
        if project is None:
            await db.commit()
            return LedgerResult.failure(LedgerError.NOT_FOUND)

        for membership in await list_memberships(db, project_id):
            await db.delete(membership)
        await db.delete(project)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to delete project %d", project_id)
        return LedgerResult.failure(LedgerError.PERSISTENCE_FAILURE)

    logger.info("Project %d deleted", project_id)
    return LedgerResult.success()


async def _publish_completion(redis: object, summary: CompletionSummary) -> None:
    """Broadcast completion and level-up events. Failures are logged, not raised."""
    if redis is None:
        return
    try:
        await publish_event(redis, PROJECT_COMPLETED_CHANNEL, {
            "project_id": summary.project_id,
            "reward": summary.reward._asdict(),
            "user_ids": [m.user_id for m in summary.members],
        })
        for member in summary.members:
            if member.leveled_up:
                await publish_event(redis, LEVEL_UP_CHANNEL, {
                    "user_id": member.user_id,
                    "old_level": member.old_level,
                    "new_level": member.new_level,
                })
    except Exception:
        logger.warning("Failed to publish completion events", exc_info=True)
