"""MongoDB connection using Motor (async driver)."""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from modules.config import ConfigEnv

logger = logging.getLogger(__name__)

DB_NAME = ConfigEnv.MONGODB_DB_NAME

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None


def get_client() -> AsyncIOMotorClient:
    """Return the Motor client for MONGODB_URL. Creates it on first use."""
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(
            ConfigEnv.MONGODB_URL,
            tz_aware=True,
            serverSelectionTimeoutMS=ConfigEnv.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        )
        logger.info("MongoDB client created")
    return _client


def get_db() -> AsyncIOMotorDatabase:
    """
    Return the Foster Toys database.

    Only the app lifespan calls this; request handlers receive the database
    through ``app.state`` (see ``api.dependencies``).
    """
    global _db
    if _db is None:
        _db = get_client()[DB_NAME]
    return _db


async def ping(db: AsyncIOMotorDatabase) -> None:
    """Round-trip to the server so a bad MONGODB_URL fails startup instead of the first request."""
    await db.command("ping")


def close_client() -> None:
    """Drop the cached client and database handle. Called on app shutdown."""
    global _client, _db
    if _client is not None:
        _client.close()
        _client = None
        _db = None
        logger.info("MongoDB client closed")
