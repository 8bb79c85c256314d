"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from uuid import UUID, uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, ProfileModel
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database per test.

    StaticPool keeps the single connection alive so every session sees the
    same in-memory database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like the application's."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="Test User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def make_user(
    auth_provider: JWTAuthProvider,
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[str], Awaitable[tuple[UUID, dict[str, str]]]]:
    """Return an async helper creating a profiled user and their auth headers."""

    async def _make(email: str) -> tuple[UUID, dict[str, str]]:
        user = TokenUser(id=uuid4(), email=email, display_name=email.split("@")[0])
        async with session_factory() as session:
            session.add(
                ProfileModel(id=user.id, email=user.email, display_name=user.display_name)
            )
            await session.commit()
        token = auth_provider.create_token(user)
        return user.id, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
) -> FastAPI:
    """Application wired to the test database and the test auth provider.

    Tokens are validated for real, so tests can act as several users.
    """
    from api.dependencies.auth import get_auth_provider, get_profile_service
    from api.v1.dependencies import (
        get_invitation_service,
        get_project_service,
        get_workspace_service,
    )
    from domain.services.invitation_service import InvitationService
    from domain.services.permission_resolver import PermissionResolver
    from domain.services.profile_service import ProfileService
    from domain.services.project_service import ProjectService
    from domain.services.workspace_service import WorkspaceService
    from infrastructure.database.session import get_async_session
    from main import create_app

    application = create_app()

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_auth_provider] = lambda: auth_provider
    application.dependency_overrides[get_async_session] = override_get_async_session
    application.dependency_overrides[get_profile_service] = lambda: ProfileService(uow_factory)
    application.dependency_overrides[get_workspace_service] = lambda: WorkspaceService(
        uow_factory
    )
    application.dependency_overrides[get_invitation_service] = lambda: InvitationService(
        uow_factory
    )
    application.dependency_overrides[get_project_service] = lambda: ProjectService(
        uow_factory, permissions=PermissionResolver()
    )
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async test client. Pass auth headers per request."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(
    client: AsyncClient,
    session_factory: async_sessionmaker[AsyncSession],
    test_user: TokenUser,
    auth_headers: dict[str, str],
) -> AsyncClient:
    """Client carrying the fixed test user's token, with their profile stored."""
    async with session_factory() as session:
        session.add(
            ProfileModel(
                id=test_user.id,
                email=test_user.email,
                display_name=test_user.display_name,
            )
        )
        await session.commit()

    client.headers.update(auth_headers)
    return client
