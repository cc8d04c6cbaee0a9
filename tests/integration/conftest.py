import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_api.main import app
from attendance_api.api.dependencies import get_challenge_registry, get_webauthn_verifier
from attendance_api.core.database import get_async_session
from tests.support import ANDROID_UA


@pytest.fixture
async def client(session_maker, employees, verifier, challenges) -> AsyncGenerator[AsyncClient, None]:
    """Mobile client against a seeded in-memory database"""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_db
    app.dependency_overrides[get_webauthn_verifier] = lambda: verifier
    app.dependency_overrides[get_challenge_registry] = lambda: challenges

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers={"User-Agent": ANDROID_UA}) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def logged_in(client: AsyncClient) -> AsyncClient:
    """Client whose session holds AFG-A001"""
    response = await client.post("/api/v1/auth/employee", json={"employee_id": "AFG-A001"})
    assert response.status_code == 200
    return client
