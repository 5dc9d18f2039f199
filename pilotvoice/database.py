"""Database engine construction and session management."""
import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from pilotvoice.config import Settings

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""
    connect_args = {}
    is_sqlite = settings.database_url.startswith("sqlite")
    needs_ssl = not is_sqlite and settings.environment == "production"

    if needs_ssl:
        connect_args["ssl"] = "require"
        logger.debug("SSL connection enabled (ssl=require)")

    engine_kwargs = {
        "echo": settings.environment == "development",
        "future": True,
        "connect_args": connect_args,
        "pool_pre_ping": True,  # Verify connections before use
    }
    if not is_sqlite:
        # Keep production connection usage conservative to stay within hosted-tier limits
        pool_size = max(1, settings.db_pool_size)
        max_overflow = max(0, settings.db_max_overflow)
        if settings.environment == "production":
            pool_size = min(pool_size, 2)
            max_overflow = min(max_overflow, 2)
        engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600)

    try:
        engine = create_async_engine(settings.database_url, **engine_kwargs)
    except Exception as e:
        logger.error(f"Failed to create database engine: {e}")
        raise
    logger.debug("Database engine created successfully")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the given engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Dependency for FastAPI
async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a session from the application's session factory."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
