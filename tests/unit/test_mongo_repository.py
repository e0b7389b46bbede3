"""Unit tests for the MongoDB repository against a mocked client."""

from typing import Any

import pytest

from recall_kit.config import MongoSettings
from recall_kit.infra.mongo import repositories as mongo_repositories
from recall_kit.infra.mongo.repositories import MongoStorageRepository
from recall_kit.interfaces.progress import ProgressStoreInterface
from recall_kit.interfaces.storage import StorageInterface
from recall_kit.models.memory import Grade, ItemMemoryState, ItemState
from recall_kit.models.progress import ProgressDTO
from recall_kit.models.review import ReviewRecordDTO
from recall_kit.utils.clock import MS_PER_DAY
from tests.mocks.mock_mongo import MockMongoClient
from tests.mocks.mock_storage import NOW


@pytest.fixture
def mongo_client() -> MockMongoClient:
    return MockMongoClient()


@pytest.fixture
def repository(mongo_client: MockMongoClient) -> MongoStorageRepository:
    return MongoStorageRepository(mongo_client)  # type: ignore[arg-type]


def review(review_id: str, item_id: str, reviewed_at: int, grade: Grade = Grade.GOOD) -> ReviewRecordDTO:
    return ReviewRecordDTO(
        review_id=review_id,
        item_id=item_id,
        grade=grade,
        time_spent_ms=1200,
        reviewed_at=reviewed_at,
    )


class TestMongoItems:
    """Tests for item persistence."""

    @pytest.mark.asyncio
    async def test_item_round_trip(
        self,
        repository: MongoStorageRepository,
        review_item: ItemMemoryState,
    ) -> None:
        await repository.save_item(review_item)

        assert await repository.get_item(review_item.id) == review_item
        assert await repository.get_item("missing") is None

    @pytest.mark.asyncio
    async def test_document_shape(
        self,
        repository: MongoStorageRepository,
        mongo_client: MockMongoClient,
        relearning_item: ItemMemoryState,
    ) -> None:
        await repository.save_item(relearning_item)

        doc = await mongo_client.items.find_one({"id": relearning_item.id})

        assert doc is not None
        assert doc["state"] == "relearning"
        assert doc["state_rank"] == ItemState.RELEARNING.precedence

    @pytest.mark.asyncio
    async def test_save_replaces(
        self,
        repository: MongoStorageRepository,
        review_item: ItemMemoryState,
    ) -> None:
        await repository.save_item(review_item)
        await repository.save_item(review_item.model_copy(update={"reps": 7}))

        stored = await repository.get_item(review_item.id)
        assert stored is not None
        assert stored.reps == 7

    @pytest.mark.asyncio
    async def test_due_items_ordering_and_scope(
        self,
        repository: MongoStorageRepository,
        new_item: ItemMemoryState,
        learning_item: ItemMemoryState,
        review_item: ItemMemoryState,
        relearning_item: ItemMemoryState,
    ) -> None:
        future = review_item.model_copy(update={"id": "future", "due": NOW + MS_PER_DAY})
        for item in (review_item, future, relearning_item, new_item, learning_item):
            await repository.save_item(item)

        all_due = await repository.get_due_items(None, NOW)
        spanish = await repository.get_due_items("spanish", NOW)
        limited = await repository.get_due_items(None, NOW, limit=2)

        assert [i.id for i in all_due] == [
            new_item.id,
            learning_item.id,
            relearning_item.id,
            review_item.id,
        ]
        assert [i.id for i in spanish] == [new_item.id, learning_item.id, review_item.id]
        assert [i.id for i in limited] == [new_item.id, learning_item.id]
        assert await repository.get_due_items(None, NOW, limit=0) == []


class TestMongoReviews:
    """Tests for the review log."""

    @pytest.mark.asyncio
    async def test_last_review_is_latest(self, repository: MongoStorageRepository) -> None:
        await repository.append_review(review("r1", "card", NOW - 2000))
        await repository.append_review(review("r3", "card", NOW))
        await repository.append_review(review("r2", "card", NOW - 1000))
        await repository.append_review(review("other", "card-2", NOW + 5000))

        last = await repository.get_last_review("card")

        assert last is not None
        assert last.review_id == "r3"
        assert [r.review_id for r in await repository.get_reviews_for_item("card")] == [
            "r1",
            "r2",
            "r3",
        ]

    @pytest.mark.asyncio
    async def test_delete_review(self, repository: MongoStorageRepository) -> None:
        await repository.append_review(review("r1", "card", NOW, Grade.AGAIN))

        assert await repository.delete_review("r1") is True
        assert await repository.delete_review("r1") is False
        assert await repository.get_last_review("card") is None

    @pytest.mark.asyncio
    async def test_grade_round_trip(self, repository: MongoStorageRepository) -> None:
        await repository.append_review(review("r1", "card", NOW, Grade.HARD))

        last = await repository.get_last_review("card")

        assert last is not None
        assert last.grade is Grade.HARD
        assert last.time_spent_ms == 1200


class TestMongoProgress:
    """Tests for the progress document."""

    @pytest.mark.asyncio
    async def test_progress_round_trip(self, repository: MongoStorageRepository) -> None:
        assert await repository.get_progress() is None

        progress = ProgressDTO().with_review(NOW)
        await repository.save_progress(progress)
        await repository.save_progress(progress.with_review(NOW + 1000))

        stored = await repository.get_progress()
        assert stored is not None
        assert stored.total_reviewed == 2


class TestMongoFactory:
    """Tests for construction and protocol conformance."""

    def test_protocols(self, repository: MongoStorageRepository) -> None:
        assert isinstance(repository, StorageInterface)
        assert isinstance(repository, ProgressStoreInterface)
        assert MongoStorageRepository.config_class is MongoSettings

    @pytest.mark.asyncio
    async def test_from_dict_connects_and_owns_client(
        self,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        created: list[MockMongoClient] = []

        def fake_client(settings: Any) -> MockMongoClient:
            client = MockMongoClient()
            created.append(client)
            return client

        monkeypatch.setattr(mongo_repositories, "MongoClient", fake_client)

        repo = await MongoStorageRepository.from_dict(
            {"uri": "mongodb://db:27017", "database": "study"}
        )

        assert created[0].connected
        await repo.close()
        assert not created[0].connected
