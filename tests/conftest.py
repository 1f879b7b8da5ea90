import os
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from campus_connect.database import Base, get_db
from campus_connect.main import app
from campus_connect.models.api.messages import MessageResponse
from campus_connect.realtime.broker import RealtimeBroker
from campus_connect.realtime.channel import RealtimeChannel, get_realtime_channel

USER_A = "user-a"
USER_B = "user-b"
USER_C = "user-c"


def make_message(
    id: int = 1,
    conversation_id: int = 10,
    sender_id: str = USER_A,
    content: str = "hello",
    status: str = "sent",
) -> MessageResponse:
    return MessageResponse(
        id=id,
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content,
        created_at=datetime(2026, 10, 1, 12, 0, id % 60, tzinfo=timezone.utc),
        status=status,  # type: ignore[arg-type]
    )


@pytest.fixture(scope="function")
def mock_db() -> Generator[AsyncMock, None, None]:
    """Create a mock database session for unit tests."""
    mock_session = AsyncMock()
    mock_session.commit = AsyncMock()
    mock_session.rollback = AsyncMock()
    mock_session.close = AsyncMock()
    mock_session.refresh = AsyncMock()
    mock_session.flush = AsyncMock()
    mock_session.execute = AsyncMock()
    mock_session.add = MagicMock()  # add is sync, not async
    mock_session.add_all = MagicMock()

    yield mock_session


@pytest.fixture
def realtime_channel() -> RealtimeChannel:
    """A channel with its own broker and no external push mirror."""
    return RealtimeChannel(RealtimeBroker(max_queue_size=10))


@pytest.fixture
def client(
    mock_db: AsyncMock, realtime_channel: RealtimeChannel
) -> Generator[TestClient, Any, None]:
    """Test client with the database and realtime channel replaced."""

    async def override_get_db() -> AsyncGenerator[AsyncMock, None]:
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_realtime_channel] = lambda: realtime_channel
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-User-Id": USER_A}


@pytest.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine for integration tests."""
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL is required for integration tests")

    engine = create_async_engine(database_url, future=True)

    # Create all tables, including the identity service's users and profiles
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
async def session_factory(
    test_engine: AsyncEngine,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory bound to the integration engine."""
    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
