"""Grading and undo controller for recall_kit.

This module drives one study session: it grades the current item
through the scheduler, persists the new state together with its review
record, and can roll back the most recent grade exactly.
"""

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

from recall_kit.errors import NotFoundError, PersistenceError, ValidationError
from recall_kit.interfaces.storage import StorageInterface
from recall_kit.logging import get_logger
from recall_kit.models.memory import Grade, ItemMemoryState
from recall_kit.models.progress import ItemGradedEvent
from recall_kit.models.review import ReviewRecordDTO
from recall_kit.models.session import SchedulingOption, SessionStats, SessionStatus
from recall_kit.services.events import ReviewEventBus
from recall_kit.services.scheduler import Scheduler, parse_grade
from recall_kit.services.session_queue import SessionQueue
from recall_kit.utils.clock import now_ms
from recall_kit.utils.hashing import generate_review_id

__all__ = [
    "ReviewController",
    "UndoEntry",
]

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class UndoEntry:
    """Pre-grade snapshot of one grading step."""

    snapshot: ItemMemoryState
    review: ReviewRecordDTO

    @property
    def grade(self) -> Grade:
        return self.review.grade


class ReviewController:
    """Session state machine: READY accepts grades, COMPLETE does not.

    Operations must not overlap; the caller awaits each grade or undo
    before issuing the next. The queue only moves after storage has
    accepted both halves of a write, so a failed call leaves the session
    on the same item and the same grade can be retried.

    Example:
        queue = await SessionQueueManager(storage).start("all", now)
        controller = ReviewController(queue, storage, scheduler)

        await controller.grade(Grade.GOOD, time_spent_ms=4200, now=now)
        await controller.undo()
        stats = controller.stats()
    """

    def __init__(
        self,
        queue: SessionQueue,
        storage: StorageInterface,
        scheduler: Scheduler | None = None,
        event_bus: ReviewEventBus | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize controller.

        Args:
            queue: Session queue to work through
            storage: Item store and review log
            scheduler: Scheduler (default weights and params when None)
            event_bus: Bus that receives ItemGradedEvent after each grade
            session_id: Optional ID attached to published events
        """
        self._queue = queue
        self._storage = storage
        self._scheduler = scheduler or Scheduler()
        self._bus = event_bus
        self._session_id = session_id
        self._history: list[UndoEntry] = []
        self._stats = SessionStats(total=len(queue))
        self._status = SessionStatus.COMPLETE if queue.is_complete() else SessionStatus.READY

    @property
    def queue(self) -> SessionQueue:
        return self._queue

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def can_undo(self) -> bool:
        return self._queue.cursor > 0 and bool(self._history)

    def current(self) -> ItemMemoryState | None:
        return self._queue.current()

    def is_complete(self) -> bool:
        return self._status is SessionStatus.COMPLETE

    def stats(self) -> SessionStats:
        return self._stats

    def progress(self) -> int:
        """Percentage of the queue already graded."""
        if len(self._queue) == 0:
            return 0
        return round(self._queue.cursor / len(self._queue) * 100)

    async def preview(self, now: int | None = None) -> list[SchedulingOption]:
        """Scheduling options for the current item, empty once complete."""
        queued = self._queue.current()
        if queued is None:
            return []
        now = now if now is not None else now_ms()
        state = await self._load_item(queued.id)
        return self._scheduler.preview(state, now)

    async def grade(
        self,
        grade: Grade | int,
        time_spent_ms: int = 0,
        now: int | None = None,
    ) -> ItemMemoryState:
        """Grade the current item and advance the session.

        Args:
            grade: Grade 1-4
            time_spent_ms: Time the learner spent on the item
            now: Grading time in epoch milliseconds (current time when None)

        Returns:
            The item's new memory state

        Raises:
            ValidationError: Invalid grade or time, or session complete
            NotFoundError: Current item no longer exists in storage
            PersistenceError: Storage rejected the write; nothing advanced
        """
        g = parse_grade(grade)
        if time_spent_ms < 0:
            raise ValidationError(f"time_spent_ms must be >= 0, got {time_spent_ms}")
        queued = self._queue.current()
        if self._status is SessionStatus.COMPLETE or queued is None:
            raise ValidationError("Session is complete")
        now = now if now is not None else now_ms()

        previous = await self._load_item(queued.id)
        updated = self._scheduler.schedule(previous, g, now)
        review = ReviewRecordDTO(
            review_id=generate_review_id(updated.id, now, updated.reps),
            item_id=updated.id,
            deck_id=updated.deck_id,
            grade=g,
            time_spent_ms=time_spent_ms,
            reviewed_at=now,
        )

        await self._commit_grade(previous, updated, review)

        self._history.append(UndoEntry(previous, review))
        self._stats = self._stats.with_grade(g)
        self._queue.advance()

        logger.info(
            "item_graded",
            item_id=updated.id,
            grade=int(g),
            state=updated.state.value,
            due=updated.due,
            cursor=self._queue.cursor,
        )

        if self._queue.is_complete():
            self._status = SessionStatus.COMPLETE
            logger.info(
                "session_completed",
                reviewed=self._stats.reviewed,
                accuracy=self._stats.accuracy,
            )

        if self._bus is not None:
            await self._bus.publish(
                ItemGradedEvent(
                    item_id=updated.id,
                    deck_id=updated.deck_id,
                    grade=g,
                    reviewed_at=now,
                    session_id=self._session_id,
                )
            )
        return updated

    async def undo(self) -> ItemMemoryState:
        """Roll back the most recent grade of this session.

        Deletes the review record this session wrote and restores the
        item to its pre-grade snapshot. The record must still be the
        item's latest; otherwise nothing is touched. Aggregate progress
        published for that grade is left as is.

        Returns:
            The restored memory state

        Raises:
            ValidationError: Nothing to undo
            NotFoundError: The recorded review is missing or no longer the latest
            PersistenceError: Storage rejected the rollback; nothing changed
        """
        if not self.can_undo:
            raise ValidationError("Nothing to undo")

        entry = self._history[-1]
        item_id = entry.snapshot.id

        last = await self._storage_call(self._storage.get_last_review(item_id), "get_last_review")
        if last is None:
            raise NotFoundError(f"No review record found for item {item_id}")
        if last.review_id != entry.review.review_id:
            # A later review of the item was recorded elsewhere
            raise NotFoundError(
                f"Latest review of item {item_id} is {last.review_id}, "
                f"expected {entry.review.review_id}"
            )

        await self._commit_undo(entry.snapshot, last)

        self._history.pop()
        self._stats = self._stats.with_grade(entry.grade, step=-1)
        self._queue.step_back()
        self._status = SessionStatus.READY

        logger.info(
            "grade_undone",
            item_id=item_id,
            grade=int(entry.grade),
            review_id=last.review_id,
            cursor=self._queue.cursor,
        )
        return entry.snapshot

    def restart(self) -> None:
        """Replay the same queue from the start with fresh counters."""
        self._queue.reset()
        self._history.clear()
        self._stats = SessionStats(total=len(self._queue))
        self._status = (
            SessionStatus.COMPLETE if self._queue.is_complete() else SessionStatus.READY
        )
        logger.info("session_restarted", total=len(self._queue))

    async def _load_item(self, item_id: str) -> ItemMemoryState:
        item = await self._storage_call(self._storage.get_item(item_id), "get_item")
        if item is None:
            raise NotFoundError(f"Item not found: {item_id}")
        return item

    async def _commit_grade(
        self,
        previous: ItemMemoryState,
        updated: ItemMemoryState,
        review: ReviewRecordDTO,
    ) -> None:
        await self._storage_call(self._storage.save_item(updated), "save_item")
        try:
            await self._storage.append_review(review)
        except Exception as e:
            logger.error(
                "grade_persist_failed",
                item_id=updated.id,
                stage="append_review",
                error=str(e),
            )
            await self._storage_call(self._storage.save_item(previous), "rollback_save_item")
            raise PersistenceError(f"Failed to record review for item {updated.id}") from e

    async def _commit_undo(
        self,
        snapshot: ItemMemoryState,
        review: ReviewRecordDTO,
    ) -> None:
        deleted = await self._storage_call(
            self._storage.delete_review(review.review_id), "delete_review"
        )
        if not deleted:
            raise NotFoundError(f"Review record vanished: {review.review_id}")
        try:
            await self._storage.save_item(snapshot)
        except Exception as e:
            logger.error(
                "undo_persist_failed",
                item_id=snapshot.id,
                stage="save_item",
                error=str(e),
            )
            await self._storage_call(self._storage.append_review(review), "rollback_append_review")
            raise PersistenceError(f"Failed to restore item {snapshot.id}") from e

    async def _storage_call(self, call: Awaitable[T], stage: str) -> T:
        try:
            return await call
        except Exception as e:
            logger.error("storage_call_failed", stage=stage, error=str(e))
            raise PersistenceError(f"Storage operation failed: {stage}") from e
