"""Unit tests for progress tracking and the event bus."""

from unittest.mock import AsyncMock

import pytest

from recall_kit.infra.memory.repositories import InMemoryStorageRepository
from recall_kit.models.memory import Grade
from recall_kit.models.progress import AchievementUnlockedEvent, ItemGradedEvent, ProgressDTO
from recall_kit.services.events import ReviewEventBus
from recall_kit.services.progress_service import ProgressService
from recall_kit.utils.clock import MS_PER_DAY
from tests.mocks.mock_storage import NOW


def graded(reviewed_at: int = NOW) -> ItemGradedEvent:
    return ItemGradedEvent(item_id="card-1", grade=Grade.GOOD, reviewed_at=reviewed_at)


class TestReviewEventBus:
    """Tests for ReviewEventBus."""

    @pytest.mark.asyncio
    async def test_handlers_called_in_order(self) -> None:
        bus = ReviewEventBus()
        calls: list[str] = []

        async def first(event: ItemGradedEvent) -> None:
            calls.append("first")

        async def second(event: ItemGradedEvent) -> None:
            calls.append("second")

        bus.subscribe(ItemGradedEvent, first)
        bus.subscribe(ItemGradedEvent, second)

        delivered = await bus.publish(graded())

        assert calls == ["first", "second"]
        assert delivered == 2

    @pytest.mark.asyncio
    async def test_dispatch_by_type(self) -> None:
        bus = ReviewEventBus()
        handler = AsyncMock()
        bus.subscribe(AchievementUnlockedEvent, handler)

        assert await bus.publish(graded()) == 0
        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_handler_isolated(self) -> None:
        bus = ReviewEventBus()
        after = AsyncMock()
        bus.subscribe(ItemGradedEvent, AsyncMock(side_effect=ValueError("bad")))
        bus.subscribe(ItemGradedEvent, after)

        delivered = await bus.publish(graded())

        assert delivered == 1
        after.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unsubscribe(self) -> None:
        bus = ReviewEventBus()
        handler = AsyncMock()
        bus.subscribe(ItemGradedEvent, handler)
        bus.unsubscribe(ItemGradedEvent, handler)

        await bus.publish(graded())

        handler.assert_not_called()
        assert bus.handlers_for(ItemGradedEvent) == []


class TestProgressService:
    """Tests for ProgressService."""

    @pytest.mark.asyncio
    async def test_defaults_before_any_review(
        self,
        memory_storage: InMemoryStorageRepository,
    ) -> None:
        service = ProgressService(memory_storage, ReviewEventBus(), daily_goal=15)

        progress = await service.get_progress()

        assert progress == ProgressDTO(daily_goal=15)

    @pytest.mark.asyncio
    async def test_graded_event_updates_progress(
        self,
        memory_storage: InMemoryStorageRepository,
    ) -> None:
        bus = ReviewEventBus()
        service = ProgressService(memory_storage, bus)
        service.attach()

        await bus.publish(graded(NOW))
        await bus.publish(graded(NOW + MS_PER_DAY))

        progress = await memory_storage.get_progress()
        assert progress is not None
        assert progress.total_reviewed == 2
        assert progress.current_streak == 2

    @pytest.mark.asyncio
    async def test_achievements_forwarded_and_published(
        self,
        memory_storage: InMemoryStorageRepository,
    ) -> None:
        bus = ReviewEventBus()
        sink = AsyncMock()
        sink.check.return_value = ["first_review"]
        unlocked = AsyncMock()
        bus.subscribe(AchievementUnlockedEvent, unlocked)
        ProgressService(memory_storage, bus, achievements=sink).attach()

        await bus.publish(graded(NOW))

        sink.check.assert_awaited_once_with(1, 1)
        event = unlocked.call_args.args[0]
        assert event.achievement_id == "first_review"
        assert event.total_reviewed == 1

    @pytest.mark.asyncio
    async def test_detach(self, memory_storage: InMemoryStorageRepository) -> None:
        bus = ReviewEventBus()
        service = ProgressService(memory_storage, bus)
        service.attach()
        service.detach()

        await bus.publish(graded())

        assert await memory_storage.get_progress() is None

    @pytest.mark.asyncio
    async def test_store_failure_stays_in_bus(self, mock_storage: AsyncMock) -> None:
        mock_storage.get_progress.side_effect = ConnectionError("down")
        bus = ReviewEventBus()
        ProgressService(mock_storage, bus).attach()

        assert await bus.publish(graded()) == 0
