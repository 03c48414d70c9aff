"""Shared test configuration and fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite) with all tables
created, so tests never see each other's rows. The app's ``get_db``
dependency is overridden to hand out the test session.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")

import uuid  # noqa: E402
from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from weekstay.auth.security import create_token_pair, hash_password  # noqa: E402
from weekstay.booking.window import StayPolicy  # noqa: E402
from weekstay.database import Base, get_db  # noqa: E402
from weekstay.main import app  # noqa: E402
from weekstay.models.house import House  # noqa: E402
from weekstay.models.user import User, UserRole  # noqa: E402
from weekstay.services.booking_service import BookingService  # noqa: E402


def _make_engine() -> AsyncEngine:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # SQLite leaves foreign keys (and ON DELETE CASCADE) off unless asked.
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(bind=test_engine, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users, houses, services
# ---------------------------------------------------------------------------


async def _create_user(
    db_session: AsyncSession,
    role: UserRole = UserRole.USER,
    credits: int = 0,
    password: str = "testpass123",
    is_active: bool = True,
) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        username=f"{role.value}-{unique}",
        email=f"{role.value}-{unique}@test.com",
        hashed_password=hash_password(password),
        role=role.value,
        credits=credits,
        is_active=is_active,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


async def _create_house(db_session: AsyncSession, name: str = "Lake House") -> House:
    house = House(name=name, description="A house for automated tests.")
    db_session.add(house)
    await db_session.flush()
    await db_session.refresh(house)
    return house


def _headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), role=user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def renter(db_session: AsyncSession) -> User:
    """A regular user holding two credits."""
    return await _create_user(db_session, credits=2)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return _headers_for(admin_user)


@pytest_asyncio.fixture
async def renter_headers(renter: User) -> dict[str, str]:
    return _headers_for(renter)


@pytest_asyncio.fixture
async def house(db_session: AsyncSession) -> House:
    return await _create_house(db_session)


@pytest_asyncio.fixture
async def booking_service(db_session: AsyncSession) -> BookingService:
    return BookingService(db_session, policy=StayPolicy())


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession):
    """Factory fixture: ``await make_user(role=..., credits=...)``."""

    async def _make(**kwargs) -> User:
        return await _create_user(db_session, **kwargs)

    return _make


@pytest_asyncio.fixture
async def make_house(db_session: AsyncSession):
    async def _make(name: str = "Lake House") -> House:
        return await _create_house(db_session, name=name)

    return _make


@pytest.fixture
def headers_for():
    return _headers_for
