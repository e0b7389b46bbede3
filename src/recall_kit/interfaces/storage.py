"""Storage interface for recall_kit.

This module defines the Protocols for the item store and the review log.
"""

from typing import ClassVar, Protocol, runtime_checkable

from recall_kit.models.memory import ItemMemoryState
from recall_kit.models.review import ReviewRecordDTO

__all__ = [
    "ItemStoreInterface",
    "ReviewLogInterface",
    "StorageInterface",
]


@runtime_checkable
class ItemStoreInterface(Protocol):
    """Contract for per-item memory state persistence."""

    async def save_item(self, item: ItemMemoryState) -> str:
        """Create or replace an item's memory state.

        Args:
            item: Memory state to save

        Returns:
            Item ID
        """
        ...

    async def get_item(self, item_id: str) -> ItemMemoryState | None:
        """Get an item by ID.

        Args:
            item_id: Item ID to retrieve

        Returns:
            ItemMemoryState if found, None otherwise
        """
        ...

    async def get_due_items(
        self,
        deck_id: str | None,
        now: int,
        limit: int | None = None,
    ) -> list[ItemMemoryState]:
        """Get items with ``due <= now``.

        Args:
            deck_id: Restrict to one deck, or None for all decks
            now: Cutoff in epoch milliseconds
            limit: Maximum number of items, None for no limit

        Returns:
            Due items ordered by state precedence
            (New, Learning, Relearning, Review), then due ascending
        """
        ...


@runtime_checkable
class ReviewLogInterface(Protocol):
    """Contract for the append-only review log."""

    async def append_review(self, review: ReviewRecordDTO) -> str:
        """Append a review record.

        Returns:
            Review ID
        """
        ...

    async def get_last_review(self, item_id: str) -> ReviewRecordDTO | None:
        """Get the most recent review (max reviewed_at) for an item."""
        ...

    async def delete_review(self, review_id: str) -> bool:
        """Delete a review record.

        Returns:
            True if a record was deleted, False if none matched
        """
        ...

    async def get_reviews_for_item(self, item_id: str) -> list[ReviewRecordDTO]:
        """Get all reviews for an item ordered by reviewed_at ascending."""
        ...


@runtime_checkable
class StorageInterface(ItemStoreInterface, ReviewLogInterface, Protocol):
    """Combined item store and review log.

    Implementations are constructed by the orchestrator through
    ``config_class`` / ``from_config`` / ``from_dict``.
    """

    config_class: ClassVar[type | None] = None
