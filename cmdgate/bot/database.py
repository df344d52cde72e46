"""
Database connection management using asyncpg.
"""

from typing import Optional

import asyncpg

from cmdgate.bot.config import config
from cmdgate.utils.logger import get_logger

logger = get_logger("Database")

_pool: Optional[asyncpg.Pool] = None


async def init_database(database_url: Optional[str] = None) -> Optional[asyncpg.Pool]:
    """
    Initialize database connection pool.

    Args:
        database_url: Overrides config.DATABASE_URL

    Returns:
        The pool, or None when no database is configured
    """
    global _pool

    url = database_url if database_url is not None else config.DATABASE_URL
    if not url:
        logger.warning("DATABASE_URL not set - cooldowns will not survive restarts")
        return None

    try:
        _pool = await asyncpg.create_pool(
            url,
            min_size=1,
            max_size=10,
            command_timeout=60,
        )
        logger.info("[SUCCESS] Database connected successfully")
        await _init_tables()
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        raise

    return _pool


async def _init_tables() -> None:
    """Initialize database tables if they don't exist."""
    if not _pool:
        return

    async with _pool.acquire() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS cooldowns (
                id VARCHAR(255) PRIMARY KEY,
                expires TIMESTAMPTZ NOT NULL
            )
        """)

        logger.info("Database tables initialized")


async def close_database() -> None:
    """Close database connection pool."""
    global _pool

    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database connection closed")

