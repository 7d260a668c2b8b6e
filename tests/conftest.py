"""Pytest fixtures and configuration"""

import os

# Settings are read once at import time of the app modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["CACHE_ENABLED"] = "false"

from typing import AsyncGenerator, List
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models.participant import Participant
from app.repositories.participant_repository import ParticipantRepository

# Single shared in-memory database
TEST_DATABASE_URL = "sqlite+aiosqlite://"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
    echo=False,
)


@event.listens_for(test_engine.sync_engine, "connect")
def _on_connect(dbapi_connection, connection_record):
    # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs behave
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@event.listens_for(test_engine.sync_engine, "begin")
def _on_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestSessionLocal = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Drops all tables after the test completes.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database session override"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def trip_id() -> UUID:
    """ID of the trip under test"""
    return uuid4()


@pytest_asyncio.fixture
async def participants(db_session: AsyncSession, trip_id: UUID) -> List[Participant]:
    """Create Alice (owner), Bob and Carol in the trip, in that order"""
    people = [
        Participant(id=uuid4(), trip_id=trip_id, name="Alice", is_owner=True),
        Participant(id=uuid4(), trip_id=trip_id, name="Bob"),
        Participant(id=uuid4(), trip_id=trip_id, name="Carol"),
    ]
    await ParticipantRepository.create_batch(db_session, people)
    await db_session.commit()
    return people


@pytest_asyncio.fixture
async def outsider(db_session: AsyncSession) -> Participant:
    """Participant of a different trip"""
    person = Participant(id=uuid4(), trip_id=uuid4(), name="Mallory")
    await ParticipantRepository.create_batch(db_session, [person])
    await db_session.commit()
    return person

