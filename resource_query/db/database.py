"""Database connection and session management."""
import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from resource_query.config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def create_primary_engine(url: str | None = None) -> AsyncEngine:
    """Create the primary database engine."""
    url = url or settings.database_url
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.debug)
    return create_async_engine(
        url,
        echo=settings.debug,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=30,
        pool_recycle=300,
        pool_pre_ping=True,
    )


# Create primary engine
engine = create_primary_engine()

# Primary session maker
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """
    Dependency that provides the session factory.

    List queries open one session per statement so the page and the
    count can run on separate connections at the same time.
    """
    return async_session_maker


async def close_engine():
    """Dispose of the primary engine and its pool."""
    await engine.dispose()
    logger.info("Database engine disposed")
