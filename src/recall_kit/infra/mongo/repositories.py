"""MongoDB repositories for recall_kit.

This module provides repository implementations for MongoDB storage.
"""

from typing import Any, Self

from recall_kit.config import MongoSettings
from recall_kit.infra.mongo.client import MongoClient
from recall_kit.interfaces.storage import StorageInterface
from recall_kit.logging import get_logger
from recall_kit.models.memory import Grade, ItemMemoryState, ItemState
from recall_kit.models.progress import ProgressDTO
from recall_kit.models.review import ReviewRecordDTO

__all__ = [
    "MongoStorageRepository",
]

logger = get_logger(__name__)

_PROGRESS_KEY = "progress"


class MongoStorageRepository(StorageInterface):
    """MongoDB implementation of StorageInterface.

    Items carry a ``state_rank`` field (session precedence) so due
    queries can be ordered server-side. Also implements
    ProgressStoreInterface with a single progress document.
    """

    config_class = MongoSettings

    def __init__(self, client: MongoClient) -> None:
        """Initialize repository with MongoDB client.

        Args:
            client: Connected MongoClient instance
        """
        self._client = client
        self._owns_client = False

    @classmethod
    async def from_config(cls, config: MongoSettings) -> Self:
        """Factory method for RecallKit instantiation.

        Creates a MongoClient, connects, creates indexes, and returns repository.

        Args:
            config: MongoDB settings

        Returns:
            Connected MongoStorageRepository instance
        """
        client = MongoClient(config)
        await client.connect()
        await client.create_indexes()

        instance = cls(client)
        instance._owns_client = True
        return instance

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict.

        Args:
            config: Dictionary with MongoDB settings

        Returns:
            Connected MongoStorageRepository instance
        """
        settings = MongoSettings(**config)
        return await cls.from_config(settings)

    async def close(self) -> None:
        """Close owned resources."""
        if self._owns_client and self._client:
            await self._client.disconnect()

    # Item operations
    async def save_item(self, item: ItemMemoryState) -> str:
        """Create or replace an item's memory state."""
        doc = self._item_to_doc(item)
        await self._client.items.replace_one(
            {"id": item.id},
            doc,
            upsert=True,
        )
        return item.id

    async def get_item(self, item_id: str) -> ItemMemoryState | None:
        doc = await self._client.items.find_one({"id": item_id})
        return self._doc_to_item(doc) if doc else None

    async def get_due_items(
        self,
        deck_id: str | None,
        now: int,
        limit: int | None = None,
    ) -> list[ItemMemoryState]:
        """Get due items ordered by state precedence, then due."""
        if limit == 0:
            return []
        query: dict[str, Any] = {"due": {"$lte": now}}
        if deck_id is not None:
            query["deck_id"] = deck_id

        cursor = self._client.items.find(query).sort([("state_rank", 1), ("due", 1)])
        if limit is not None:
            cursor = cursor.limit(limit)
        return [self._doc_to_item(doc) async for doc in cursor]

    # Review log operations
    async def append_review(self, review: ReviewRecordDTO) -> str:
        await self._client.reviews.insert_one(self._review_to_doc(review))
        return review.review_id

    async def get_last_review(self, item_id: str) -> ReviewRecordDTO | None:
        cursor = (
            self._client.reviews.find({"item_id": item_id})
            .sort([("reviewed_at", -1)])
            .limit(1)
        )
        async for doc in cursor:
            return self._doc_to_review(doc)
        return None

    async def delete_review(self, review_id: str) -> bool:
        result = await self._client.reviews.delete_one({"review_id": review_id})
        return result.deleted_count > 0

    async def get_reviews_for_item(self, item_id: str) -> list[ReviewRecordDTO]:
        cursor = self._client.reviews.find({"item_id": item_id}).sort("reviewed_at", 1)
        return [self._doc_to_review(doc) async for doc in cursor]

    # Progress operations
    async def get_progress(self) -> ProgressDTO | None:
        doc = await self._client.progress.find_one({"key": _PROGRESS_KEY})
        return self._doc_to_progress(doc) if doc else None

    async def save_progress(self, progress: ProgressDTO) -> None:
        doc = {"key": _PROGRESS_KEY, **progress.model_dump()}
        await self._client.progress.replace_one(
            {"key": _PROGRESS_KEY},
            doc,
            upsert=True,
        )

    # Conversion helpers
    @staticmethod
    def _item_to_doc(item: ItemMemoryState) -> dict[str, Any]:
        return {
            "id": item.id,
            "deck_id": item.deck_id,
            "difficulty": item.difficulty,
            "stability": item.stability,
            "elapsed_days": item.elapsed_days,
            "scheduled_days": item.scheduled_days,
            "reps": item.reps,
            "lapses": item.lapses,
            "state": item.state.value,
            "state_rank": item.state.precedence,
            "due": item.due,
            "last_review": item.last_review,
            "schema_version": item.schema_version,
        }

    @staticmethod
    def _doc_to_item(doc: dict[str, Any]) -> ItemMemoryState:
        return ItemMemoryState(
            id=doc["id"],
            deck_id=doc.get("deck_id", ""),
            difficulty=doc["difficulty"],
            stability=doc["stability"],
            elapsed_days=doc.get("elapsed_days", 0.0),
            scheduled_days=doc.get("scheduled_days", 0.0),
            reps=doc.get("reps", 0),
            lapses=doc.get("lapses", 0),
            state=ItemState(doc["state"]),
            due=doc["due"],
            last_review=doc.get("last_review"),
            schema_version=doc.get("schema_version", 1),
        )

    @staticmethod
    def _review_to_doc(review: ReviewRecordDTO) -> dict[str, Any]:
        return {
            "review_id": review.review_id,
            "item_id": review.item_id,
            "deck_id": review.deck_id,
            "grade": int(review.grade),
            "time_spent_ms": review.time_spent_ms,
            "reviewed_at": review.reviewed_at,
            "schema_version": review.schema_version,
        }

    @staticmethod
    def _doc_to_review(doc: dict[str, Any]) -> ReviewRecordDTO:
        return ReviewRecordDTO(
            review_id=doc["review_id"],
            item_id=doc["item_id"],
            deck_id=doc.get("deck_id", ""),
            grade=Grade(doc["grade"]),
            time_spent_ms=doc.get("time_spent_ms", 0),
            reviewed_at=doc["reviewed_at"],
            schema_version=doc.get("schema_version", 1),
        )

    @staticmethod
    def _doc_to_progress(doc: dict[str, Any]) -> ProgressDTO:
        return ProgressDTO(
            total_reviewed=doc.get("total_reviewed", 0),
            current_streak=doc.get("current_streak", 0),
            longest_streak=doc.get("longest_streak", 0),
            last_study_day=doc.get("last_study_day"),
            reviewed_today=doc.get("reviewed_today", 0),
            daily_goal=doc.get("daily_goal", 20),
            schema_version=doc.get("schema_version", 1),
        )
