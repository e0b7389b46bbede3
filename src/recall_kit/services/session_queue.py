"""Study session queue for recall_kit.

A session works through a fixed snapshot of due items taken at start;
the store is not re-queried until a new session is started.
"""

from collections.abc import Iterable, Sequence

from recall_kit.config import SessionSettings
from recall_kit.errors import ValidationError
from recall_kit.interfaces.storage import ItemStoreInterface
from recall_kit.logging import get_logger
from recall_kit.models.memory import ItemMemoryState

__all__ = [
    "ALL_SCOPE",
    "SessionQueue",
    "SessionQueueManager",
    "order_due_items",
]

logger = get_logger(__name__)

ALL_SCOPE = "all"


def order_due_items(
    items: Iterable[ItemMemoryState],
    now: int,
) -> list[ItemMemoryState]:
    """Keep items due at now, ordered New, Learning, Relearning, Review, then by due.

    The sort is stable, so items equal on both keys keep their input order.
    """
    due = [item for item in items if item.due <= now]
    return sorted(due, key=lambda item: (item.state.precedence, item.due))


class SessionQueue:
    """Ordered, immutable snapshot of items plus a cursor."""

    def __init__(
        self,
        items: Sequence[ItemMemoryState],
        scope: str = ALL_SCOPE,
        started_at: int = 0,
    ) -> None:
        self._items = tuple(items)
        self._scope = scope
        self._started_at = started_at
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> tuple[ItemMemoryState, ...]:
        return self._items

    @property
    def scope(self) -> str:
        return self._scope

    @property
    def started_at(self) -> int:
        return self._started_at

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def remaining(self) -> int:
        return len(self._items) - self._cursor

    def current(self) -> ItemMemoryState | None:
        """Item at the cursor, or None once the session is exhausted."""
        if self.is_complete():
            return None
        return self._items[self._cursor]

    def advance(self) -> None:
        """Move to the next item. Stays put at the end."""
        if self._cursor < len(self._items):
            self._cursor += 1

    def step_back(self) -> None:
        """Move back one item.

        Raises:
            ValidationError: If the cursor is already at the start
        """
        if self._cursor == 0:
            raise ValidationError("Queue is already at the first item")
        self._cursor -= 1

    def is_complete(self) -> bool:
        return self._cursor >= len(self._items)

    def reset(self) -> None:
        self._cursor = 0


class SessionQueueManager:
    """Builds session queues from the item store.

    Example:
        manager = SessionQueueManager(storage)
        queue = await manager.start("deck-1", now)
        while (item := queue.current()) is not None:
            ...
    """

    def __init__(
        self,
        storage: ItemStoreInterface,
        settings: SessionSettings | None = None,
    ) -> None:
        """Initialize manager.

        Args:
            storage: Item store to query due items from
            settings: Session sizing (deck and all-decks limits)
        """
        self._storage = storage
        self._settings = settings or SessionSettings()

    def default_limit(self, scope: str) -> int:
        if scope == ALL_SCOPE:
            return self._settings.all_limit
        return self._settings.deck_limit

    async def start(
        self,
        scope: str,
        now: int,
        limit: int | None = None,
    ) -> SessionQueue:
        """Select due items and freeze them into a session queue.

        Args:
            scope: Deck ID, or ``"all"`` for every deck
            now: Session start in epoch milliseconds
            limit: Maximum session size (configured default when None)

        Returns:
            SessionQueue positioned at the first item

        Raises:
            ValidationError: If limit is negative
        """
        if limit is None:
            limit = self.default_limit(scope)
        if limit < 0:
            raise ValidationError(f"Session limit must be >= 0, got {limit}")

        deck_id = None if scope == ALL_SCOPE else scope
        candidates = await self._storage.get_due_items(deck_id, now, limit)
        items = order_due_items(candidates, now)[:limit]

        logger.info(
            "session_started",
            scope=scope,
            size=len(items),
            limit=limit,
        )
        return SessionQueue(items, scope=scope, started_at=now)
