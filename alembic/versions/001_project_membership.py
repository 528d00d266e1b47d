"""Profiles, projects and project membership.

Creates user_profiles, projects, project_members. Level is not stored;
the API derives it from experience_points.

Revision ID: 001_project_membership
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_project_membership"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Profiles ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_profiles (
            id SERIAL PRIMARY KEY,
            username VARCHAR(64) UNIQUE NOT NULL,
            full_name VARCHAR(128),
            avatar_url TEXT,
            experience_points INTEGER NOT NULL DEFAULT 0 CHECK (experience_points >= 0),
            bits_currency INTEGER NOT NULL DEFAULT 0 CHECK (bits_currency >= 0),
            bytes_currency INTEGER NOT NULL DEFAULT 0 CHECK (bytes_currency >= 0),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Projects ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS projects (
            id SERIAL PRIMARY KEY,
            title VARCHAR(128) NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            difficulty VARCHAR(16) NOT NULL
                CHECK (difficulty IN ('Beginner', 'Intermediate', 'Advanced', 'Expert')),
            status VARCHAR(16) NOT NULL DEFAULT 'ongoing'
                CHECK (status IN ('ongoing', 'completed')),
            xp_reward INTEGER NOT NULL,
            bits_reward INTEGER NOT NULL,
            bytes_reward INTEGER NOT NULL,
            owner_user_id INTEGER NOT NULL REFERENCES user_profiles(id) ON DELETE CASCADE,
            github_url TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            completed_at TIMESTAMPTZ
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_projects_status
        ON projects(status, created_at DESC)
    """)

    # --- Project Members ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS project_members (
            id SERIAL PRIMARY KEY,
            project_id INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
            user_id INTEGER NOT NULL REFERENCES user_profiles(id) ON DELETE CASCADE,
            role VARCHAR(64) NOT NULL,
            joined_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT project_members_project_user_key UNIQUE (project_id, user_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_project_members_project_id
        ON project_members(project_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_project_members_user_id
        ON project_members(user_id)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS project_members CASCADE")
    op.execute("DROP TABLE IF EXISTS projects CASCADE")
    op.execute("DROP TABLE IF EXISTS user_profiles CASCADE")
