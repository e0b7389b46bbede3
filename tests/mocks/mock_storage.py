"""Storage doubles for testing."""

from recall_kit.infra.memory.repositories import InMemoryStorageRepository
from recall_kit.models.memory import ItemMemoryState
from recall_kit.models.review import ReviewRecordDTO

# 2023-11-14T22:13:20Z
NOW = 1_700_000_000_000


class FlakyStorage(InMemoryStorageRepository):
    """In-memory storage whose writes can be made to fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_save = False
        self.fail_append = False
        self.fail_delete = False

    async def save_item(self, item: ItemMemoryState) -> str:
        if self.fail_save:
            raise ConnectionError("item store unavailable")
        return await super().save_item(item)

    async def append_review(self, review: ReviewRecordDTO) -> str:
        if self.fail_append:
            raise ConnectionError("review log unavailable")
        return await super().append_review(review)

    async def delete_review(self, review_id: str) -> bool:
        if self.fail_delete:
            raise ConnectionError("review log unavailable")
        return await super().delete_review(review_id)
