"""Project API endpoints — 8 routes.

Browse (2), Create (1), Membership (2), Lifecycle (2), My projects (1).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bitbridge.auth.dependencies import get_current_user
from bitbridge.database import get_session
from bitbridge.db.models import Project, UserProfile
from bitbridge.dependencies import get_redis_dep
from bitbridge.projects.membership_ledger import (
    LedgerError,
    LedgerResult,
    complete_project,
    delete_project,
    join_project,
    leave_project,
)
from bitbridge.projects.rewards import ProjectStatus
from bitbridge.projects.schemas import (
    CompletionResponse,
    CreateProjectRequest,
    JoinProjectRequest,
    MemberRewardResponse,
    MembershipResponse,
    ProjectListResponse,
    ProjectMemberResponse,
    ProjectResponse,
    RewardResponse,
    UserProjectResponse,
    UserProjectsResponse,
)
from bitbridge.projects.service import (
    create_project,
    get_project,
    get_project_members,
    list_projects,
    list_user_projects,
)

router = APIRouter(prefix="/api/v1", tags=["Projects"])

_ERROR_STATUS: dict[LedgerError, int] = {
    LedgerError.NOT_FOUND: 404,
    LedgerError.NOT_MEMBER: 404,
    LedgerError.ALREADY_MEMBER: 409,
    LedgerError.ALREADY_COMPLETED: 409,
    LedgerError.PERSISTENCE_FAILURE: 503,
}


# ── Helpers ──


def _ledger_exception(result: LedgerResult) -> HTTPException:
    """Translate a failed ledger result into an HTTP error the client can tell apart."""
    return HTTPException(
        status_code=_ERROR_STATUS[result.error],
        detail={"code": result.error.value, "message": result.message},
    )


def _build_project_response(
    project: Project,
    members: list | None = None,
) -> ProjectResponse:
    """Build a ProjectResponse from ORM model."""
    member_responses = [
        ProjectMemberResponse(
            user_id=str(pm.user_id),
            username=profile.username,
            role=pm.role,
            joined_at=pm.joined_at,
        )
        for pm, profile in members or []
    ]
    return ProjectResponse(
        id=str(project.id),
        title=project.title,
        description=project.description,
        difficulty=project.difficulty,
        status=project.status,
        reward=RewardResponse(
            xp=project.xp_reward,
            bits=project.bits_reward,
            bytes=project.bytes_reward,
        ),
        owner_user_id=str(project.owner_user_id),
        github_url=project.github_url,
        created_at=project.created_at,
        completed_at=project.completed_at,
        members=member_responses,
    )


async def _get_led_project(db: AsyncSession, project_id: int, user_id: int) -> Project:
    """Load a project the caller leads, or raise 404/403."""
    project = await get_project(db, project_id)
    if project is None:
        raise _ledger_exception(LedgerResult.failure(LedgerError.NOT_FOUND))
    if project.owner_user_id != user_id:
        raise HTTPException(status_code=403, detail="Only the project lead can do this")
    return project


# ── Browse ──


@router.get("/projects", response_model=ProjectListResponse)
async def list_projects_endpoint(
    status: ProjectStatus | None = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
):
    """List projects, optionally filtered by status (paginated, public)."""
    projects, total = await list_projects(db, status, page, per_page)
    return ProjectListResponse(
        projects=[_build_project_response(p) for p in projects],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project_endpoint(
    project_id: int,
    db: AsyncSession = Depends(get_session),
):
    """Project detail with its team (public)."""
    project = await get_project(db, project_id)
    if project is None:
        raise _ledger_exception(LedgerResult.failure(LedgerError.NOT_FOUND))
    members = await get_project_members(db, project_id)
    return _build_project_response(project, members)


# ── Create ──


@router.post("/projects", response_model=ProjectResponse, status_code=201)
async def create_project_endpoint(
    body: CreateProjectRequest,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Create a project. The creator joins it as Project Lead."""
    project = await create_project(
        db,
        owner_id=user.id,
        title=body.title,
        difficulty=body.difficulty,
        description=body.description,
        github_url=body.github_url,
    )
    await db.commit()

    members = await get_project_members(db, project.id)
    return _build_project_response(project, members)


# ── Membership ──


@router.post("/projects/{project_id}/join", response_model=MembershipResponse, status_code=201)
async def join_project_endpoint(
    project_id: int,
    body: JoinProjectRequest | None = None,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Join an ongoing project. Role defaults to Developer."""
    body = body or JoinProjectRequest()
    result = await join_project(db, project_id, user.id, body.role)
    if not result.ok:
        raise _ledger_exception(result)

    member = result.value
    return MembershipResponse(
        project_id=str(member.project_id),
        user_id=str(member.user_id),
        role=member.role,
        joined_at=member.joined_at,
    )


@router.post("/projects/{project_id}/leave", status_code=204)
async def leave_project_endpoint(
    project_id: int,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Leave a project. Rewards already received are kept."""
    result = await leave_project(db, project_id, user.id)
    if not result.ok:
        raise _ledger_exception(result)
    return Response(status_code=204)


# ── Lifecycle ──


@router.post("/projects/{project_id}/complete", response_model=CompletionResponse)
async def complete_project_endpoint(
    project_id: int,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
):
    """Mark a project completed and pay every member (lead only)."""
    await _get_led_project(db, project_id, user.id)

    result = await complete_project(db, project_id, redis)
    if not result.ok:
        raise _ledger_exception(result)

    summary = result.value
    return CompletionResponse(
        project_id=str(summary.project_id),
        reward=RewardResponse(**summary.reward._asdict()),
        completed_at=summary.completed_at,
        members=[
            MemberRewardResponse(
                user_id=str(m.user_id),
                experience_points=m.experience_points,
                old_level=m.old_level,
                new_level=m.new_level,
                leveled_up=m.leveled_up,
            )
            for m in summary.members
        ],
    )


@router.delete("/projects/{project_id}", status_code=204)
async def delete_project_endpoint(
    project_id: int,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Delete a project and its memberships (lead only)."""
    await _get_led_project(db, project_id, user.id)

    result = await delete_project(db, project_id)
    if not result.ok:
        raise _ledger_exception(result)
    return Response(status_code=204)


# ── My projects ──


@router.get("/users/me/projects", response_model=UserProjectsResponse)
async def my_projects_endpoint(
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Projects the caller is currently a member of."""
    rows = await list_user_projects(db, user.id)
    return UserProjectsResponse(
        projects=[
            UserProjectResponse(
                project=_build_project_response(project),
                role=membership.role,
                joined_at=membership.joined_at,
            )
            for project, membership in rows
        ]
    )
