"""Shared test fixtures."""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

TEST_DATABASE_URL = "sqlite+aiosqlite://"


def _ensure_test_keys() -> tuple[str, str]:
    """Generate an RSA key pair for signing test tokens."""
    tmpdir = Path(tempfile.mkdtemp(prefix="bb_test_keys_"))
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_path = tmpdir / "jwt_private.pem"
    public_path = tmpdir / "jwt_public.pem"
    private_path.write_bytes(key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ))
    public_path.write_bytes(key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ))
    return str(private_path), str(public_path)


_private_key_path, _public_key_path = _ensure_test_keys()
os.environ["BB_JWT_PRIVATE_KEY_PATH"] = _private_key_path
os.environ["BB_JWT_PUBLIC_KEY_PATH"] = _public_key_path
os.environ["BB_DATABASE_URL"] = TEST_DATABASE_URL
os.environ["BB_LOG_FORMAT"] = "console"
os.environ["BB_LOG_LEVEL"] = "WARNING"

from bitbridge.auth.jwt import create_access_token, reset_keys  # noqa: E402
from bitbridge.config import get_settings  # noqa: E402
from bitbridge.database import close_db, get_engine, get_session, init_db  # noqa: E402
from bitbridge.db.base import Base  # noqa: E402
from bitbridge.db import models  # noqa: E402, F401
from bitbridge.dependencies import get_redis_dep  # noqa: E402
from bitbridge.main import create_app  # noqa: E402
from bitbridge.profiles.service import create_profile  # noqa: E402

get_settings.cache_clear()
reset_keys()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database with all tables, and a session on it."""
    await init_db(TEST_DATABASE_URL)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    sessions = get_session()
    session = await anext(sessions)
    yield session
    await sessions.aclose()
    await close_db()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app, sharing the test database."""
    app = create_app()
    app.dependency_overrides[get_redis_dep] = lambda: None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[[str], Awaitable[tuple[int, dict[str, str]]]]:
    """Factory: create a committed profile, return its id and bearer auth headers."""

    async def _make_user(username: str) -> tuple[int, dict[str, str]]:
        profile = await create_profile(db_session, username)
        await db_session.commit()
        token = create_access_token(profile.id, username)
        return profile.id, {"Authorization": f"Bearer {token}"}

    return _make_user
