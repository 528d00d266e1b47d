"""Project reads and creation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bitbridge.config import get_settings
from bitbridge.db.models import Project, ProjectMember, UserProfile
from bitbridge.projects.rewards import Difficulty, ProjectStatus, reward_for_difficulty

logger = logging.getLogger(__name__)


async def get_project(db: AsyncSession, project_id: int, *, lock: bool = False) -> Project | None:
    """Get a project by ID.

    With ``lock=True`` the row is read FOR SHARE, so the caller waits for
    any in-flight status change to commit before seeing the row.
    """
    stmt = (
        select(Project)
        .where(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    if lock:
        stmt = stmt.with_for_update(read=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_membership(db: AsyncSession, project_id: int, user_id: int) -> ProjectMember | None:
    """Get a user's membership of a project (if any)."""
    result = await db.execute(
        select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def list_memberships(db: AsyncSession, project_id: int) -> list[ProjectMember]:
    """All membership rows of a project, oldest first."""
    result = await db.execute(
        select(ProjectMember)
        .where(ProjectMember.project_id == project_id)
        .order_by(ProjectMember.joined_at.asc(), ProjectMember.id.asc())
    )
    return list(result.scalars().all())


async def create_project(
    db: AsyncSession,
    owner_id: int,
    title: str,
    difficulty: Difficulty | str,
    description: str = "",
    github_url: str | None = None,
) -> Project:
    """Create a project. The creator becomes its first member as Project Lead."""
    reward = reward_for_difficulty(difficulty)
    now = datetime.now(timezone.utc)

    project = Project(
        title=title,
        description=description,
        difficulty=Difficulty(difficulty).value,
        status=ProjectStatus.ONGOING.value,
        xp_reward=reward.xp,
        bits_reward=reward.bits,
        bytes_reward=reward.bytes,
        owner_user_id=owner_id,
        github_url=github_url,
        created_at=now,
        updated_at=now,
    )
    db.add(project)
    await db.flush()

    lead = ProjectMember(
        project_id=project.id,
        user_id=owner_id,
        role=get_settings().project_lead_role,
        joined_at=now,
    )
    db.add(lead)
    await db.flush()

    logger.info("Project created: %s (id=%d, lead=%d)", title, project.id, owner_id)
    return project


async def list_projects(
    db: AsyncSession,
    status: ProjectStatus | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Project], int]:
    """List projects, newest first (paginated)."""
    offset = (page - 1) * per_page

    count_stmt = select(func.count()).select_from(Project)
    list_stmt = select(Project)
    if status is not None:
        count_stmt = count_stmt.where(Project.status == status.value)
        list_stmt = list_stmt.where(Project.status == status.value)

    total = (await db.execute(count_stmt)).scalar_one()
    result = await db.execute(
        list_stmt.order_by(Project.created_at.desc(), Project.id.desc())
        .offset(offset)
        .limit(per_page)
    )
    return list(result.scalars().all()), total


async def get_project_members(
    db: AsyncSession, project_id: int
) -> list[tuple[ProjectMember, UserProfile]]:
    """Get all members of a project with profile info."""
    result = await db.execute(
        select(ProjectMember, UserProfile)
        .join(UserProfile, ProjectMember.user_id == UserProfile.id)
        .where(ProjectMember.project_id == project_id)
        .order_by(ProjectMember.joined_at.asc(), ProjectMember.id.asc())
    )
    return [(row.ProjectMember, row.UserProfile) for row in result]


async def list_user_projects(
    db: AsyncSession, user_id: int
) -> list[tuple[Project, ProjectMember]]:
    """Projects the user is currently a member of, with their membership row."""
    result = await db.execute(
        select(Project, ProjectMember)
        .join(ProjectMember, ProjectMember.project_id == Project.id)
        .where(ProjectMember.user_id == user_id)
        .order_by(ProjectMember.joined_at.desc(), Project.id.desc())
    )
    return [(row.Project, row.ProjectMember) for row in result]
