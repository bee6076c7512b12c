"""
Pytest configuration and fixtures for testing.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

# Test database URL - defaults to a local SQLite file, set TEST_DATABASE_URL for PostgreSQL
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_eventhub.db")
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from eventhub.main import app
from eventhub.db.session import Base, get_session
from eventhub.core.security import hash_password, create_access_token
from eventhub.db.models import User, Event, EventStatus


test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,  # Disable connection pooling for tests
    echo=False,
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def days_from_now(days: float) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh schema and session for each test.
    Tables are dropped again afterwards for complete isolation.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client bound to the app, sharing the test session.
    """
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(session: AsyncSession, name: str, email: str, password: str = "password123") -> User:
    user = User(name=name, email=email, hashed_password=hash_password(password))
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def make_event(session: AsyncSession, organizer: User, **overrides) -> Event:
    fields = {
        "title": "Test Event",
        "description": "A test event description",
        "location": "Test Location",
        "date": days_from_now(7),
        "capacity": 50,
        "status": EventStatus.published,
    }
    fields.update(overrides)
    event = Event(organizer_id=organizer.id, **fields)
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return event


def auth_header(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id), 'email': user.email})}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "John Doe", "john@example.com")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "Jane Roe", "jane@example.com")


@pytest.fixture
def user_headers(test_user: User) -> dict:
    return auth_header(test_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return auth_header(other_user)


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, test_user: User) -> Event:
    return await make_event(db_session, test_user)


@pytest_asyncio.fixture
async def test_events(db_session: AsyncSession, test_user: User) -> list:
    """Five published events, inserted latest-first."""
    events = []
    for i in reversed(range(5)):
        events.append(await make_event(
            db_session,
            test_user,
            title=f"Event {i+1}",
            description=f"Description for event {i+1}",
            location=f"Location {i+1}",
            date=days_from_now(i + 1),
            capacity=10 * (i + 1),
        ))
    return events


@pytest.fixture(autouse=True)
def mock_password_hashing(monkeypatch):
    """
    Mock bcrypt password hashing so tests do not depend on the bcrypt backend.
    """
    class MockPasswordContext:
        def hash(self, password: str) -> str:
            return f"$2b$12$mockedhash{password}"

        def verify(self, plain: str, hashed: str) -> bool:
            return hashed == f"$2b$12$mockedhash{plain}"

    from eventhub.core import security
    monkeypatch.setattr(security, "pwd_context", MockPasswordContext())


@pytest.fixture(autouse=True)
def disable_rate_limiting(monkeypatch):
    """Disable rate limiting for all tests."""
    import eventhub.api.routes.auth as auth_routes
    monkeypatch.setattr(auth_routes.limiter, "enabled", False)
