"""
PostgreSQL connection pool management
"""

import asyncio
from typing import Optional

import asyncpg

from app.core.config import config
from app.core.logger import logger


class Database:
    """Database connection manager"""

    pool: Optional[asyncpg.Pool] = None


db = Database()


async def connect_to_postgres() -> asyncpg.Pool:
    """
    Create the connection pool and verify connectivity.

    Raises:
        asyncpg.PostgresError, OSError: If the store is unreachable. Callers at
        startup let this propagate so the process aborts.
    """
    logger.info("Connecting to PostgreSQL...")

    try:
        db.pool = await asyncpg.create_pool(
            dsn=config.database_url,
            min_size=config.db_pool_min_size,
            max_size=config.db_pool_max_size,
            command_timeout=config.db_command_timeout,
        )
        await db.pool.fetchval("SELECT 1")
    except (asyncpg.PostgresError, OSError) as e:
        logger.critical(
            f"Could not connect to PostgreSQL: {e}",
            metadata={"event": "postgres_connection_error", "error": str(e)}
        )
        raise

    logger.info(
        "Successfully connected to PostgreSQL",
        metadata={
            "event": "postgres_connected",
            "min_size": config.db_pool_min_size,
            "max_size": config.db_pool_max_size,
        }
    )
    return db.pool


async def close_postgres_connection():
    """Close the connection pool"""
    logger.info("Closing connection to PostgreSQL...")
    if db.pool is not None:
        await db.pool.close()
        db.pool = None


def get_pool() -> asyncpg.Pool:
    """Get the pool opened during startup"""
    if db.pool is None:
        raise RuntimeError("Database pool is not initialized")
    return db.pool


async def ping() -> bool:
    """Return True if the store answers a trivial query"""
    if db.pool is None:
        return False
    try:
        await db.pool.fetchval("SELECT 1", timeout=config.db_command_timeout)
        return True
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
        logger.warning(
            f"PostgreSQL ping failed: {e}",
            metadata={"event": "postgres_ping_failed", "error": str(e)}
        )
        return False
