"""
Pytest configuration and fixtures for FestivalHub tests.

Provides shared fixtures for:
- A temporary SQLite database per test (aiosqlite)
- Services bound to that database
- User, festival and performance factories
- An HTTP client over the ASGI app
"""

import os

# Set test environment variables before importing app modules
os.environ.setdefault("JWT_SECRET_KEY", "festivalhub-test-secret")
os.environ.setdefault("MAX_FAILED_PASSWORD_ATTEMPTS", "3")

from collections.abc import AsyncIterator, Awaitable, Callable
from uuid import UUID

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import festivalhub.models  # noqa: F401
from festivalhub.core.locking import FestivalLockRegistry
from festivalhub.core.permissions import AccountStatus, UserRole
from festivalhub.core.security import get_password_hash
from festivalhub.database import Base
from festivalhub.domain.festival_state import FESTIVAL_TRANSITIONS, FestivalState
from festivalhub.models.festival import Festival
from festivalhub.models.performance import Performance
from festivalhub.models.user import User
from festivalhub.services.festival_service import FestivalService
from festivalhub.services.performance_service import PerformanceService
from festivalhub.services.user_service import UserService

TEST_PASSWORD = "Test@1234"
_TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def test_db_engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    """Create a file-backed SQLite engine; every session gets its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'festivalhub.db'}",
        poolclass=NullPool,
    )

    # Enable foreign key constraints for SQLite
    def _fk_pragma_on_connect(dbapi_con, con_record):
        cursor = dbapi_con.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    event.listen(engine.sync_engine, "connect", _fk_pragma_on_connect)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def locks() -> FestivalLockRegistry:
    return FestivalLockRegistry()


@pytest.fixture
def user_service(session_factory, locks) -> UserService:
    return UserService(session_factory, locks)


@pytest.fixture
def festival_service(session_factory, locks, user_service) -> FestivalService:
    return FestivalService(session_factory, locks, users=user_service)


@pytest.fixture
def performance_service(session_factory, locks, user_service) -> PerformanceService:
    return PerformanceService(session_factory, locks, users=user_service)


# ============================================================================
# Sample Data Factories
# ============================================================================


@pytest.fixture
def create_user(session_factory) -> Callable[..., Awaitable[User]]:
    """Factory inserting a user directly (any role, including ADMIN)."""
    counter = {"n": 0}

    async def _create(
        role: UserRole = UserRole.USER,
        username: str | None = None,
        status: AccountStatus = AccountStatus.ACTIVE,
    ) -> User:
        counter["n"] += 1
        user = User(
            username=username or f"{role.value.lower()}_{counter['n']:03d}",
            password_hash=_TEST_PASSWORD_HASH,
            role=role.value,
            account_status=status.value,
            failed_password_attempts=0,
        )
        async with session_factory() as db:
            db.add(user)
            await db.commit()
        return user

    return _create


@pytest.fixture
async def admin(create_user) -> User:
    return await create_user(UserRole.ADMIN, "admin_user")


@pytest.fixture
async def organizer(create_user) -> User:
    return await create_user(UserRole.ORGANIZER, "organizer_one")


@pytest.fixture
async def other_organizer(create_user) -> User:
    return await create_user(UserRole.ORGANIZER, "organizer_two")


@pytest.fixture
async def artist(create_user) -> User:
    return await create_user(UserRole.ARTIST, "artist_one")


@pytest.fixture
async def other_artist(create_user) -> User:
    return await create_user(UserRole.ARTIST, "artist_two")


@pytest.fixture
async def staff(create_user) -> User:
    return await create_user(UserRole.STAFF, "staff_one")


@pytest.fixture
async def festival(festival_service, organizer) -> Festival:
    return await festival_service.create_festival(
        organizer.id, name="Summer Sounds", description="Live music", venue="Riverside"
    )


@pytest.fixture
def advance_festival(festival_service) -> Callable[..., Awaitable[Festival]]:
    """Walk a festival forward through the phase table until ``target``."""

    async def _advance(actor_id: UUID, festival_id: UUID, target: FestivalState) -> Festival:
        current = await festival_service.get_festival(festival_id)
        for action, (required, _) in FESTIVAL_TRANSITIONS.items():
            if current.festival_state == target:
                break
            if required == current.festival_state:
                current = await festival_service.transition(actor_id, festival_id, action)
        assert current.festival_state == target
        return current

    return _advance


@pytest.fixture
async def performance(performance_service, festival, artist) -> Performance:
    return await performance_service.create_performance(
        artist.id, festival.id, name="The Headliners", genre="Rock", duration=90
    )


@pytest.fixture
def review_performances(
    performance_service, advance_festival, festival, organizer, artist, staff
) -> Callable[..., Awaitable[list[Performance]]]:
    """Factory creating performances and walking them to REVIEWED.

    Takes ``{name: score}``; the festival is left in REVIEW.
    """

    async def _review(scores: dict[str, int], genre: str = "Rock") -> list[Performance]:
        await advance_festival(organizer.id, festival.id, FestivalState.SUBMISSION)
        created = []
        for name in scores:
            performance = await performance_service.create_performance(
                artist.id, festival.id, name=name, genre=genre
            )
            await performance_service.submit(artist.id, performance.id)
            created.append(performance)

        await advance_festival(organizer.id, festival.id, FestivalState.REVIEW)
        reviewed = []
        for performance, score in zip(created, scores.values()):
            await performance_service.assign_staff(organizer.id, performance.id, staff.id)
            reviewed.append(
                await performance_service.review(staff.id, performance.id, score, "Solid set")
            )
        return reviewed

    return _review


# ============================================================================
# HTTP Fixtures
# ============================================================================


@pytest.fixture
def test_app(session_factory, user_service, festival_service, performance_service):
    """FastAPI app wired to the test database and services."""
    from festivalhub.api import deps
    from festivalhub.database import get_db
    from festivalhub.main import create_application

    app = create_application()

    async def _get_test_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[deps.get_user_service] = lambda: user_service
    app.dependency_overrides[deps.get_festival_service] = lambda: festival_service
    app.dependency_overrides[deps.get_performance_service] = lambda: performance_service
    return app


@pytest.fixture
async def test_client(test_app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def auth_headers(test_client) -> Callable[[User], Awaitable[dict[str, str]]]:
    """Log a user in through the API and return its bearer header."""

    async def _headers(user: User) -> dict[str, str]:
        response = await test_client.post(
            "/api/v1/auth/login", json={"username": user.username, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _headers
