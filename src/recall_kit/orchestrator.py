"""RecallKit orchestrator for study sessions.

This module provides the main entry point for the recall_kit package,
wiring storage, the scheduler, the event bus and progress tracking.
"""

import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from recall_kit.config import RecallKitConfig
from recall_kit.errors import NotFoundError
from recall_kit.interfaces.progress import AchievementSinkInterface, ProgressStoreInterface
from recall_kit.interfaces.storage import StorageInterface
from recall_kit.logging import get_logger
from recall_kit.models.memory import ItemMemoryState
from recall_kit.models.progress import ProgressDTO
from recall_kit.models.review import ReviewRecordDTO
from recall_kit.models.session import SchedulingOption
from recall_kit.services.events import ReviewEventBus
from recall_kit.services.progress_service import ProgressService
from recall_kit.services.review_controller import ReviewController
from recall_kit.services.scheduler import Scheduler
from recall_kit.services.session_queue import ALL_SCOPE, SessionQueueManager
from recall_kit.utils.clock import now_ms
from recall_kit.utils.hashing import hash_text

__all__ = ["AddItemsResult", "RecallKit"]

logger = get_logger(__name__)


@dataclass
class AddItemsResult:
    """Statistics from item registration."""

    items_created: int = 0
    items_existing: int = 0
    errors: list[str] = field(default_factory=list)


class RecallKit:
    """Main orchestrator for spaced-repetition study.

    Accepts a storage implementation class (config loaded from .env) or a
    ready storage instance. For custom implementations, set
    config_class = None and pass storage_custom_config.

    Example:
        async with RecallKit(storage=InMemoryStorageRepository()) as kit:
            await kit.add_items(["card-1", "card-2"], deck_id="spanish")
            session = await kit.start_session("spanish")
            await session.grade(Grade.GOOD, time_spent_ms=3000)
    """

    def __init__(
        self,
        storage_class: type[StorageInterface] | None = None,
        *,
        storage: StorageInterface | None = None,
        storage_custom_config: dict[str, Any] | None = None,
        achievement_sink: AchievementSinkInterface | None = None,
        config: RecallKitConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize RecallKit.

        Args:
            storage_class: Storage implementation class
            storage: Ready storage instance, used instead of storage_class
            storage_custom_config: Custom config dict if storage_class.config_class is None
            achievement_sink: Optional achievement checks run after each grade
            config: Configuration (loaded from .env when None)
            rng: Random source for interval fuzz (seeded from config when None)
        """
        if storage_class is None and storage is None:
            raise ValueError("RecallKit needs either storage_class or storage")

        self._config = config or RecallKitConfig()
        self._storage_class = storage_class
        self._storage_custom_config = storage_custom_config
        self._storage = storage
        self._owns_storage = storage is None
        self._achievement_sink = achievement_sink

        self._scheduler = Scheduler.from_settings(self._config.scheduler, rng=rng)
        self._event_bus = ReviewEventBus()

        # Wired on connect
        self._queue_manager: SessionQueueManager | None = None
        self._progress_service: ProgressService | None = None

        self._connected = False

    async def _instantiate_class(
        self,
        cls: type,
        custom_config: dict[str, Any] | None,
    ) -> Any:
        """Instantiate an implementation class.

        If cls.config_class is set, instantiate config (loads from .env).
        If cls.config_class is None, use custom_config dict.
        """
        config_class = getattr(cls, "config_class", None)

        if config_class is None:
            if custom_config is None:
                raise ValueError(
                    f"{cls.__name__} has config_class=None but no custom_config provided"
                )
            return await cls.from_dict(custom_config)
        config = config_class()
        return await cls.from_config(config)

    async def _connect(self) -> None:
        if self._connected:
            return

        if self._storage is None:
            assert self._storage_class is not None
            self._storage = await self._instantiate_class(
                self._storage_class, self._storage_custom_config
            )

        self._queue_manager = SessionQueueManager(self._storage, self._config.session)

        if isinstance(self._storage, ProgressStoreInterface):
            self._progress_service = ProgressService(
                self._storage,
                self._event_bus,
                achievements=self._achievement_sink,
                daily_goal=self._config.progress.daily_goal,
            )
            self._progress_service.attach()

        self._connected = True
        logger.info(
            "recall_kit_connected",
            storage=type(self._storage).__name__,
            progress_tracking=self._progress_service is not None,
        )

    async def _disconnect(self) -> None:
        if self._progress_service is not None:
            self._progress_service.detach()
            self._progress_service = None
        if self._owns_storage and self._storage and hasattr(self._storage, "close"):
            await self._storage.close()
            self._storage = None

        self._connected = False
        logger.info("recall_kit_disconnected")

    async def __aenter__(self) -> "RecallKit":
        """Async context manager entry - connects automatically."""
        await self._connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit - disconnects automatically."""
        await self._disconnect()

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise RuntimeError("RecallKit not connected. Use 'async with RecallKit(...) as kit:'")

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def event_bus(self) -> ReviewEventBus:
        return self._event_bus

    # === ITEMS ===

    async def add_item(
        self,
        item_id: str,
        deck_id: str = "",
        now: int | None = None,
    ) -> ItemMemoryState:
        """Register a new item, due immediately.

        An item that already exists is returned unchanged.
        """
        self._ensure_connected()
        assert self._storage is not None

        existing = await self._storage.get_item(item_id)
        if existing is not None:
            return existing

        item = ItemMemoryState.new(item_id, now if now is not None else now_ms(), deck_id)
        await self._storage.save_item(item)
        logger.debug("item_added", item_id=item_id, deck_id=deck_id)
        return item

    async def add_items(
        self,
        item_ids: Iterable[str],
        deck_id: str = "",
        now: int | None = None,
    ) -> AddItemsResult:
        self._ensure_connected()
        assert self._storage is not None

        now = now if now is not None else now_ms()
        result = AddItemsResult()
        for item_id in item_ids:
            try:
                if await self._storage.get_item(item_id) is not None:
                    result.items_existing += 1
                    continue
                await self._storage.save_item(ItemMemoryState.new(item_id, now, deck_id))
                result.items_created += 1
            except Exception as e:
                logger.error("item_add_failed", item_id=item_id, error=str(e))
                result.errors.append(f"Item '{item_id}': {e}")

        logger.info(
            "add_items_completed",
            deck_id=deck_id,
            items_created=result.items_created,
            items_existing=result.items_existing,
        )
        return result

    async def get_item(self, item_id: str) -> ItemMemoryState:
        """Get an item's memory state.

        Raises:
            NotFoundError: If the item does not exist
        """
        self._ensure_connected()
        assert self._storage is not None
        item = await self._storage.get_item(item_id)
        if item is None:
            raise NotFoundError(f"Item not found: {item_id}")
        return item

    async def get_reviews(self, item_id: str) -> list[ReviewRecordDTO]:
        self._ensure_connected()
        assert self._storage is not None
        return await self._storage.get_reviews_for_item(item_id)

    async def preview(self, item_id: str, now: int | None = None) -> list[SchedulingOption]:
        """Scheduling options for every grade of one item. Nothing is stored."""
        item = await self.get_item(item_id)
        return self._scheduler.preview(item, now if now is not None else now_ms())

    async def retrievability(self, item_id: str, now: int | None = None) -> float:
        item = await self.get_item(item_id)
        return self._scheduler.retrievability(item, now if now is not None else now_ms())

    # === SESSIONS ===

    async def start_session(
        self,
        scope: str = ALL_SCOPE,
        now: int | None = None,
        limit: int | None = None,
    ) -> ReviewController:
        """Open a study session over the items due now.

        Args:
            scope: Deck ID, or ``"all"`` for every deck
            now: Session start in epoch milliseconds (current time when None)
            limit: Maximum session size (configured default when None)

        Returns:
            ReviewController for the new session
        """
        self._ensure_connected()
        assert self._storage is not None
        assert self._queue_manager is not None

        now = now if now is not None else now_ms()
        queue = await self._queue_manager.start(scope, now, limit)
        session_id = hash_text(f"session|{scope}|{now}")[:16]
        return ReviewController(
            queue,
            self._storage,
            scheduler=self._scheduler,
            event_bus=self._event_bus,
            session_id=session_id,
        )

    # === PROGRESS ===

    async def get_progress(self) -> ProgressDTO:
        """Aggregate progress; defaults when the storage keeps none."""
        self._ensure_connected()
        if self._progress_service is None:
            return ProgressDTO(daily_goal=self._config.progress.daily_goal)
        return await self._progress_service.get_progress()
