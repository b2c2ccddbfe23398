import asyncio
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import create_async_engine

from socialhub.core.config import settings
from socialhub.db.base import Base

logger = logging.getLogger(__name__)


async def recreate_tables(database_url: Optional[str] = None) -> None:
    """Drop and recreate all tables in the database."""
    engine = create_async_engine(database_url or settings.DATABASE_URL, echo=settings.SQL_ECHO)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            logger.info("All tables dropped successfully")

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("All tables created successfully")
    except Exception as e:
        logger.error(f"Error recreating tables: {e}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(recreate_tables())
