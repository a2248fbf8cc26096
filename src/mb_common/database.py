"""Async PostgreSQL access: engine, per-request session, startup probe.

Repositories issue raw `text()` SQL against tables owned by the Alembic
migrations; there are no ORM models. Services own the transaction:
they commit or roll back explicitly, the session only closes.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings

logger = logging.getLogger(__name__)

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=10,
    max_overflow=5,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one AsyncSession per request."""
    async with async_session_factory() as session:
        yield session


async def check_database() -> None:
    """Startup probe; raises when PostgreSQL is unreachable or the schema is missing."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
        revision = (
            await conn.execute(text("SELECT version_num FROM mb_alembic_version"))
        ).scalar_one_or_none()
    logger.info("PostgreSQL up, schema revision %s", revision)
