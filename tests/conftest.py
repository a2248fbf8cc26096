"""Shared test fixtures."""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.mb_common.database import get_db_session


def fake_db() -> MagicMock:
    """AsyncSession stand-in: commit/rollback are awaitable and recorded."""
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def db() -> MagicMock:
    return fake_db()


@pytest.fixture
async def client(db: MagicMock) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the app, with the DB session replaced."""

    async def _db_override() -> AsyncIterator[MagicMock]:
        yield db

    app.dependency_overrides[get_db_session] = _db_override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
