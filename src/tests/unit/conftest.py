"""Shared fixtures: SQLite database, app client with overridden externals."""

import os
import tempfile

# Settings are read at import time by several modules
os.environ.setdefault("CAV_REDIS__ENABLED", "false")
os.environ.setdefault("CAV_DATABASE__URL", "sqlite+aiosqlite://")
os.environ.setdefault("CAV_RECAPTCHA__SECRET_KEY", "test-secret")
os.environ.setdefault(
    "PROMETHEUS_MULTIPROC_DIR", tempfile.mkdtemp(prefix="cav-metrics-")
)

from collections.abc import AsyncIterator, Awaitable, Callable  # noqa: E402
from contextlib import AsyncExitStack  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel  # noqa: E402

from ctrlaltvibe.app.api.v1.dependencies import (  # noqa: E402
    get_notification_publisher,
    get_recaptcha_verifier,
    get_vibe_evaluator,
)
from ctrlaltvibe.app.config import get_settings  # noqa: E402
from ctrlaltvibe.app.main import app  # noqa: E402
from ctrlaltvibe.core.domain import UserRole  # noqa: E402
from ctrlaltvibe.core.models import User  # noqa: E402
from ctrlaltvibe.core.security import hash_password  # noqa: E402
from ctrlaltvibe.infra import ChannelPublisher, clear_all_caches, get_session  # noqa: E402
from ctrlaltvibe.services.session_service import SessionService  # noqa: E402

TEST_PASSWORD = "secret123"

SAMPLE_EVALUATION = {
    "fitScore": 82,
    "valueProposition": "Instant feedback for indie hackers",
    "marketFitAnalysis": {"strengths": ["fast"], "weaknesses": [], "demandPotential": "high"},
}


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear settings and TTL caches before and after each test."""
    get_settings.cache_clear()
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def publisher() -> AsyncMock:
    """ChannelPublisher mock."""
    mock = AsyncMock(spec=ChannelPublisher)
    mock.publish = AsyncMock(return_value=1)
    return mock


@pytest.fixture
def verifier() -> AsyncMock:
    """RecaptchaVerifier mock that accepts every token."""
    mock = AsyncMock()
    mock.verify = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def evaluator() -> AsyncMock:
    """VibeEvaluator mock returning SAMPLE_EVALUATION."""
    mock = AsyncMock()
    mock.evaluate = AsyncMock(return_value=dict(SAMPLE_EVALUATION))
    return mock


@pytest.fixture
async def make_user(session_factory) -> Callable[..., Awaitable[User]]:
    """Factory: create a user with TEST_PASSWORD."""
    counter = 0

    async def _make(username: str | None = None, role: UserRole = UserRole.USER) -> User:
        nonlocal counter
        counter += 1
        username = username or f"user{counter}"
        async with session_factory() as session:
            user = User(
                username=username,
                email=f"{username}@example.com",
                password_hash=hash_password(TEST_PASSWORD),
                role=role,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest.fixture
async def user(make_user) -> User:
    return await make_user("alice")


@pytest.fixture
async def other_user(make_user) -> User:
    return await make_user("bob")


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user("root", role=UserRole.ADMIN)


@pytest.fixture
async def client_factory(
    session_factory, publisher, verifier, evaluator
) -> AsyncIterator[Callable[..., Awaitable[AsyncClient]]]:
    """Factory: ASGI client, optionally logged in as `user`."""

    async def override_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_notification_publisher] = lambda: publisher
    app.dependency_overrides[get_recaptcha_verifier] = lambda: verifier
    app.dependency_overrides[get_vibe_evaluator] = lambda: evaluator

    # One login per user: a new session revokes the previous one
    logins: dict[str, str] = {}

    async with AsyncExitStack() as stack:

        async def _make(user: User | None = None) -> AsyncClient:
            cookies = {}
            if user is not None:
                if user.id not in logins:
                    async with session_factory() as session:
                        login = await SessionService.create(session, user.id)
                    logins[user.id] = login.id
                cookies["session"] = logins[user.id]
            return await stack.enter_async_context(
                AsyncClient(
                    transport=ASGITransport(app=app),
                    base_url="http://test",
                    cookies=cookies,
                )
            )

        yield _make

    app.dependency_overrides.clear()


@pytest.fixture
async def client(client_factory) -> AsyncClient:
    """Anonymous client."""
    return await client_factory()


@pytest.fixture
async def user_client(client_factory, user) -> AsyncClient:
    return await client_factory(user)


@pytest.fixture
async def other_client(client_factory, other_user) -> AsyncClient:
    return await client_factory(other_user)


@pytest.fixture
async def admin_client(client_factory, admin) -> AsyncClient:
    return await client_factory(admin)


def _project_payload(**overrides) -> dict:
    payload = {
        "title": "Vibe Board",
        "description": "A kanban board generated end to end with an AI pair.",
        "project_url": "https://vibe-board.example.com",
        "vibe_coding_tool": "Cursor",
        "tags": ["ai tools", "Productivity"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def project_payload():
    """Factory: a valid create-project body."""
    return _project_payload


@pytest.fixture
def password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def create_project(client_factory):
    """Factory: create a project through the API as `owner`."""

    async def _create(owner: User, **overrides) -> dict:
        owner_client = await client_factory(owner)
        resp = await owner_client.post("/api/projects", json=_project_payload(**overrides))
        assert resp.status_code == 201, resp.text
        return resp.json()["project"]

    return _create
