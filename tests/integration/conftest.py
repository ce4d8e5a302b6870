"""Shared fixtures for integration tests requiring live infrastructure."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from keygate.config import get_settings
from keygate.storage.orm import Base, User, UserApiKey

# ── Engine ─────────────────────────────────────────────────────────


@pytest.fixture()
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an async engine from settings and ensure tables exist."""
    engine = create_async_engine(
        get_settings().database_url,
        pool_size=5,
        max_overflow=0,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


# ── Session factory ────────────────────────────────────────────────


@pytest.fixture()
def session_factory(
    async_engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the test engine."""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Committed seeds (real commit + DELETE cleanup) ─────────────────


@pytest.fixture()
async def committed_user(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[str]:
    """Create a User with a real commit; returns its id.

    Cleans up the user and its keys after the test.
    """
    user_id = f"test-user-{uuid.uuid4().hex[:8]}"
    async with session_factory() as session:
        session.add(
            User(
                id=user_id,
                email=f"{user_id}@example.com",
                first_name="Integration",
                last_name="Test",
            )
        )
        await session.commit()

    yield user_id

    async with session_factory() as session:
        await session.execute(
            UserApiKey.__table__.delete().where(UserApiKey.user_id == user_id)
        )
        await session.execute(User.__table__.delete().where(User.id == user_id))
        await session.commit()
