"""Progress tracking service for recall_kit.

This module keeps the aggregate progress record (totals, streaks,
daily goal) and forwards it to the achievement sink after each grade.
Undo does not roll any of this back.
"""

from recall_kit.interfaces.progress import AchievementSinkInterface, ProgressStoreInterface
from recall_kit.logging import get_logger
from recall_kit.models.progress import AchievementUnlockedEvent, ItemGradedEvent, ProgressDTO
from recall_kit.services.events import ReviewEventBus

__all__ = [
    "ProgressService",
]

logger = get_logger(__name__)


class ProgressService:
    """Aggregate progress bookkeeping driven by grade events.

    Example:
        service = ProgressService(store, event_bus, achievements=sink)
        service.attach()  # subscribe to ItemGradedEvent
    """

    def __init__(
        self,
        store: ProgressStoreInterface,
        event_bus: ReviewEventBus,
        achievements: AchievementSinkInterface | None = None,
        daily_goal: int = 20,
    ) -> None:
        """Initialize service.

        Args:
            store: Progress persistence
            event_bus: Bus to subscribe on and publish unlocks to
            achievements: Optional achievement sink
            daily_goal: Goal used when no progress has been stored yet
        """
        self._store = store
        self._bus = event_bus
        self._achievements = achievements
        self._daily_goal = daily_goal

    def attach(self) -> None:
        self._bus.subscribe(ItemGradedEvent, self.on_item_graded)

    def detach(self) -> None:
        self._bus.unsubscribe(ItemGradedEvent, self.on_item_graded)

    async def get_progress(self) -> ProgressDTO:
        progress = await self._store.get_progress()
        if progress is None:
            return ProgressDTO(daily_goal=self._daily_goal)
        return progress

    async def record_review(self, reviewed_at: int) -> ProgressDTO:
        """Count one review: read, update streak and totals, write back."""
        progress = (await self.get_progress()).with_review(reviewed_at)
        await self._store.save_progress(progress)
        logger.debug(
            "progress_updated",
            total_reviewed=progress.total_reviewed,
            current_streak=progress.current_streak,
            reviewed_today=progress.reviewed_today,
        )
        return progress

    async def on_item_graded(self, event: ItemGradedEvent) -> None:
        progress = await self.record_review(event.reviewed_at)
        if self._achievements is None:
            return

        unlocked = await self._achievements.check(
            progress.total_reviewed, progress.current_streak
        )
        for achievement_id in unlocked:
            logger.info("achievement_unlocked", achievement_id=achievement_id)
            await self._bus.publish(
                AchievementUnlockedEvent(
                    achievement_id=achievement_id,
                    total_reviewed=progress.total_reviewed,
                    current_streak=progress.current_streak,
                )
            )
