"""Pydantic request/response models for project endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from bitbridge.config import get_settings
from bitbridge.projects.rewards import Difficulty, ProjectStatus


# --- Requests ---


class CreateProjectRequest(BaseModel):
    title: str = Field(..., min_length=2, max_length=128)
    description: str = Field("", max_length=4000)
    difficulty: Difficulty
    github_url: str | None = Field(None, max_length=512)


class JoinProjectRequest(BaseModel):
    role: str = Field(default_factory=lambda: get_settings().default_join_role, max_length=64)

    @field_validator("role")
    @classmethod
    def role_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Role must not be empty"
            raise ValueError(msg)
        return value


# --- Responses ---


class RewardResponse(BaseModel):
    xp: int
    bits: int
    bytes: int


class ProjectMemberResponse(BaseModel):
    user_id: str
    username: str
    role: str
    joined_at: datetime | None = None


class ProjectResponse(BaseModel):
    id: str
    title: str
    description: str
    difficulty: Difficulty
    status: ProjectStatus
    reward: RewardResponse
    owner_user_id: str
    github_url: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None
    members: list[ProjectMemberResponse] = []


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]
    total: int
    page: int
    per_page: int


class MembershipResponse(BaseModel):
    project_id: str
    user_id: str
    role: str
    joined_at: datetime | None = None


class UserProjectResponse(BaseModel):
    project: ProjectResponse
    role: str
    joined_at: datetime | None = None


class UserProjectsResponse(BaseModel):
    projects: list[UserProjectResponse]


class MemberRewardResponse(BaseModel):
    user_id: str
    experience_points: int
    old_level: int
    new_level: int
    leveled_up: bool


class CompletionResponse(BaseModel):
    project_id: str
    status: ProjectStatus = ProjectStatus.COMPLETED
    reward: RewardResponse
    completed_at: datetime
    members: list[MemberRewardResponse]
