"""
MongoDB Database Connection.

Uses Motor (async MongoDB driver) for non-blocking operations.
Provides connection management and database access.
"""
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure

from poolrent.config import settings

logger = logging.getLogger(__name__)


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create the indexes the queries rely on (email uniqueness included)."""
    # Users collection indexes
    await db.users.create_index("email", unique=True)
    await db.users.create_index("created_at")
    await db.users.create_index("reset_password_token", sparse=True)

    # Pools collection indexes
    await db.pools.create_index("user_id")
    await db.pools.create_index("city")
    await db.pools.create_index("is_visible")
    await db.pools.create_index("visible_until")

    # Public listing query
    await db.pools.create_index(
        [("is_visible", ASCENDING), ("visible_until", ASCENDING), ("created_at", DESCENDING)]
    )


class MongoDB:
    """
    MongoDB connection manager.

    Usage:
        # In lifespan
        await mongodb.connect()
        yield
        await mongodb.close()

        # In endpoints
        db = mongodb.get_database()
        await db.users.find_one({"email": email})
    """

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """
        Connect to MongoDB.

        Initializes the Motor client and database reference.
        """
        logger.info(f"Connecting to MongoDB database: {settings.MONGODB_DB_NAME}")

        try:
            self.client = AsyncIOMotorClient(
                settings.MONGODB_URL,
                minPoolSize=settings.MONGODB_MIN_POOL_SIZE,
                maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
                maxIdleTimeMS=settings.MONGODB_MAX_IDLE_TIME_MS,
            )

            # Verify connection
            await self.client.admin.command("ping")

            self.db = self.client[settings.MONGODB_DB_NAME]

            await create_indexes(self.db)
            logger.info("Database indexes created")

            logger.info(f"Connected to MongoDB database: {settings.MONGODB_DB_NAME}")

        except ConnectionFailure as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def close(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    def get_database(self) -> AsyncIOMotorDatabase:
        """
        Get the database instance.

        Raises:
            RuntimeError: If database is not connected
        """
        if self.db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.db


# Global MongoDB instance
mongodb = MongoDB()


async def get_database() -> AsyncIOMotorDatabase:
    """
    Dependency for getting database in endpoints.

    Usage:
        @router.get("/pools")
        async def list_pools(db: AsyncIOMotorDatabase = Depends(get_database)):
            return await db.pools.find().to_list(100)
    """
    return mongodb.get_database()
