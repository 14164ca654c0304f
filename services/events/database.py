"""
Database lifecycle for the Events Service.

``EventsDatabase`` owns the async engine and the session factory. It is
created in the application lifespan and disposed at shutdown; store and
lookup objects receive its session factory.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

from services.common.database_config import create_strict_async_engine
from services.common.logging_config import get_logger

# Import all models so they are registered with metadata
from services.events.models import (  # noqa: F401
    Assignment,
    Event,
    Grade,
    Subject,
    User,
)

logger = get_logger(__name__)

# Export metadata for Alembic
metadata = SQLModel.metadata


class EventsDatabase:
    """Async engine plus session factory for one database URL."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        self.engine: AsyncEngine = create_strict_async_engine(database_url, echo=echo)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self) -> None:
        """Create all tables. Deployed environments use Alembic instead."""
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        logger.info("Database tables created")

    async def drop_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.drop_all)

    async def ping(self) -> None:
        """Run a trivial query; raises if the database is unreachable."""
        async with self.session_factory() as session:
            await session.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")
