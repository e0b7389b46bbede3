"""MongoDB client for recall_kit.

This module provides an async MongoDB client wrapper using Motor.
"""

from typing import TYPE_CHECKING, Any

from recall_kit.config import MongoSettings
from recall_kit.logging import get_logger
from recall_kit.utils.lazy_import import lazy_import

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

__all__ = [
    "MongoClient",
]

logger = get_logger(__name__)

get_async_motor = lazy_import("motor.motor_asyncio", "AsyncIOMotorClient")


class MongoClient:
    """Async MongoDB client wrapper.

    Example:
        async with MongoClient(settings) as client:
            await client.items.find_one({"id": item_id})
    """

    def __init__(self, settings: MongoSettings) -> None:
        self._settings = settings
        self._client = None
        self._db = None

    async def connect(self) -> None:
        """Initialize connection to MongoDB."""
        if self._client is not None:
            return
        AsyncIOMotorClient = get_async_motor()  # noqa: N806

        uri = self._settings.uri.get_secret_value()
        self._client = AsyncIOMotorClient(uri)
        self._db = self._client[self._settings.database]

        await self._client.admin.command("ping")
        logger.info(
            "connected_to_mongodb",
            database=self._settings.database,
        )

    async def disconnect(self) -> None:
        if self._client:
            self._client.close()
            self._client = None
            self._db = None
            logger.info("disconnected_from_mongodb")

    @property
    def db(self) -> "AsyncIOMotorDatabase[dict[str, Any]]":
        """Get database instance.

        Raises:
            RuntimeError: If not connected
        """
        if self._db is None:
            raise RuntimeError("MongoClient not connected. Call connect() first.")
        return self._db

    def _collection(self, name: str) -> "AsyncIOMotorCollection[dict[str, Any]]":
        full_name = f"{self._settings.collection_prefix}{name}"
        return self.db[full_name]

    @property
    def items(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        return self._collection("items")

    @property
    def reviews(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        return self._collection("reviews")

    @property
    def progress(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        return self._collection("progress")

    async def create_indexes(self) -> None:
        """Create indexes for all collections."""
        await self.items.create_index("id", unique=True)
        await self.items.create_index("deck_id")
        await self.items.create_index([("due", 1), ("state_rank", 1)])
        await self.items.create_index("state")

        await self.reviews.create_index("review_id", unique=True)
        await self.reviews.create_index([("item_id", 1), ("reviewed_at", -1)])

        await self.progress.create_index("key", unique=True)

        logger.info("created_mongodb_indexes")

    async def __aenter__(self) -> "MongoClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
