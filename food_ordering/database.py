"""
Database Connection Module
Builds the SQLAlchemy async engine and session factory from settings.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from food_ordering.core.config import Settings


# Base class for all our models
class Base(DeclarativeBase):
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for settings.database_url.

    In-memory SQLite (used by tests) needs a single shared connection,
    otherwise every session would see an empty database.
    """
    url = settings.database_url
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.endswith("://"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(url, echo=settings.database_echo, **kwargs)

    return create_async_engine(
        url,
        echo=settings.database_echo,
        pool_size=5,  # Connection pool size
        max_overflow=10,  # Extra connections when pool is full
        pool_pre_ping=True,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; objects stay usable after commit."""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """
    Create all tables in database.
    Called once at application startup.
    """
    # models must be imported so their tables are registered on Base.metadata
    from food_ordering import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with request.app.state.session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
