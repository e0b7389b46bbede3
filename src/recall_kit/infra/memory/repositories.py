"""In-memory repositories for recall_kit.

Process-local storage for offline single-user study and tests. State
is lost when the process exits.
"""

from typing import Any, Self

from recall_kit.interfaces.storage import StorageInterface
from recall_kit.logging import get_logger
from recall_kit.models.memory import ItemMemoryState
from recall_kit.models.progress import ProgressDTO
from recall_kit.models.review import ReviewRecordDTO

__all__ = [
    "InMemoryStorageRepository",
]

logger = get_logger(__name__)


class InMemoryStorageRepository(StorageInterface):
    """Dict-backed implementation of StorageInterface.

    Also implements ProgressStoreInterface so a single instance can back
    a whole RecallKit.
    """

    config_class = None

    def __init__(self) -> None:
        self._items: dict[str, ItemMemoryState] = {}
        self._reviews: list[ReviewRecordDTO] = []
        self._progress: ProgressDTO | None = None

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for RecallKit instantiation. No options are read."""
        return cls()

    async def close(self) -> None:
        logger.debug(
            "memory_storage_closed",
            items=len(self._items),
            reviews=len(self._reviews),
        )

    # Item operations
    async def save_item(self, item: ItemMemoryState) -> str:
        self._items[item.id] = item
        return item.id

    async def get_item(self, item_id: str) -> ItemMemoryState | None:
        return self._items.get(item_id)

    async def get_due_items(
        self,
        deck_id: str | None,
        now: int,
        limit: int | None = None,
    ) -> list[ItemMemoryState]:
        due = [
            item
            for item in self._items.values()
            if item.due <= now and (deck_id is None or item.deck_id == deck_id)
        ]
        due.sort(key=lambda item: (item.state.precedence, item.due))
        return due if limit is None else due[:limit]

    # Review log operations
    async def append_review(self, review: ReviewRecordDTO) -> str:
        self._reviews.append(review)
        return review.review_id

    async def get_last_review(self, item_id: str) -> ReviewRecordDTO | None:
        last = None
        for review in self._reviews:
            if review.item_id == item_id and (last is None or review.reviewed_at >= last.reviewed_at):
                last = review
        return last

    async def delete_review(self, review_id: str) -> bool:
        for index, review in enumerate(self._reviews):
            if review.review_id == review_id:
                del self._reviews[index]
                return True
        return False

    async def get_reviews_for_item(self, item_id: str) -> list[ReviewRecordDTO]:
        reviews = [r for r in self._reviews if r.item_id == item_id]
        return sorted(reviews, key=lambda r: r.reviewed_at)

    async def count_reviews(self) -> int:
        return len(self._reviews)

    # Progress operations
    async def get_progress(self) -> ProgressDTO | None:
        return self._progress

    async def save_progress(self, progress: ProgressDTO) -> None:
        self._progress = progress
