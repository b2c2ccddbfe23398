import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.sql import text

from socialhub.core.config import settings
from socialhub.db.base import Base

logger = logging.getLogger(__name__)

# PostgreSQL setup
engine = create_async_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO, pool_pre_ping=True)
async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def init_db() -> None:
    """Create tables and supporting indexes if they don't exist."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

            # Composite indexes backing the aggregate queries
            await conn.execute(text("CREATE INDEX IF NOT EXISTS idx_posts_author_created ON posts (author_id, created_at)"))
            await conn.execute(text("CREATE INDEX IF NOT EXISTS idx_users_username_lower ON users (lower(username))"))

        logger.info("Database tables and indexes created successfully")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


async def close_db() -> None:
    """Release pooled connections on shutdown."""
    await engine.dispose()
    logger.info("Database engine disposed")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
