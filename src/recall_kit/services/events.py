"""Review event bus for recall_kit.

Side effects of a grade (progress aggregates, achievements) subscribe
here instead of being called inline by the controller.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel

from recall_kit.logging import get_logger

__all__ = [
    "EventHandler",
    "ReviewEventBus",
]

logger = get_logger(__name__)

EventHandler = Callable[[Any], Awaitable[None]]


class ReviewEventBus:
    """In-process publish/subscribe keyed by event type.

    Handlers run sequentially in subscription order. A failing handler is
    logged and does not stop the remaining handlers or reach the publisher.

    Example:
        bus = ReviewEventBus()
        bus.subscribe(ItemGradedEvent, progress_service.on_item_graded)
        await bus.publish(ItemGradedEvent(item_id="a", grade=Grade.GOOD, reviewed_at=now))
    """

    def __init__(self) -> None:
        self._handlers: dict[type[BaseModel], list[EventHandler]] = {}

    def subscribe(self, event_type: type[BaseModel], handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: type[BaseModel], handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: type[BaseModel]) -> list[EventHandler]:
        return list(self._handlers.get(event_type, []))

    async def publish(self, event: BaseModel) -> int:
        """Deliver an event to every handler subscribed to its type.

        Args:
            event: Event model instance

        Returns:
            Number of handlers that completed without error
        """
        delivered = 0
        for handler in self.handlers_for(type(event)):
            try:
                await handler(event)
            except Exception as e:
                logger.warning(
                    "event_handler_failed",
                    event_type=type(event).__name__,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e),
                )
                continue
            delivered += 1
        return delivered
