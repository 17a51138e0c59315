"""MongoDB access for the doctor directory and consultation history.

The doctors collection belongs to the wider application and is only read
here. The consultations collection is owned by this service.
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Optional
from telecare.config.settings import settings
import logging

logger = logging.getLogger(__name__)

SERVER_SELECTION_TIMEOUT_MS = 5000


class Database:
    """Process-wide motor client, opened in the application lifespan."""

    client: Optional[AsyncIOMotorClient] = None
    database: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect_db(cls):
        """Open the client, verify it answers and prepare the history index."""
        cls.client = AsyncIOMotorClient(
            settings.mongodb_uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS
        )
        cls.database = cls.client[settings.mongodb_database]

        try:
            await cls.client.admin.command("ping")
            await cls.database[settings.mongodb_collection_consultations].create_index(
                [("user_id", 1), ("created_at", -1)]
            )
        except Exception as e:
            logger.error(f"MongoDB unavailable at startup: {e}")
            raise

        logger.info(f"Connected to MongoDB: {settings.mongodb_database}")

    @classmethod
    async def close_db(cls):
        if cls.client is not None:
            cls.client.close()
            logger.info("Closed MongoDB connection")
        cls.client = None
        cls.database = None

    @classmethod
    def get_database(cls) -> AsyncIOMotorDatabase:
        if cls.database is None:
            raise RuntimeError("Database not initialized. Call connect_db() first.")
        return cls.database

    @classmethod
    async def ping(cls) -> str:
        """Connection status for the health endpoint; never raises."""
        try:
            await cls.get_database().command("ping")
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return f"error: {e}"
        return "connected"


def get_doctors_collection():
    """Read-only doctors directory collection."""
    return Database.get_database()[settings.mongodb_collection_doctors]


async def get_consultations_collection():
    return Database.get_database()[settings.mongodb_collection_consultations]
