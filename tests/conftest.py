import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("WEBAUTHN_ORIGIN", "https://attendance.test")

import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import attendance_api.models  # noqa: F401
from attendance_api.db.seeds.employees import create_initial_employees
from attendance_api.models.shared.enums import Base
from attendance_api.services.biometric.challenge_registry import ChallengeRegistry
from tests.support import FakeVerifier, relying_party

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
async def employees(session_maker):
    async with session_maker() as session:
        await create_initial_employees(session)


@pytest.fixture
def rp():
    return relying_party()


@pytest.fixture
def verifier(rp):
    return FakeVerifier(rp)


@pytest.fixture
def challenges():
    return ChallengeRegistry(ttl_seconds=60)
