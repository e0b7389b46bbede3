"""Service layer for recall_kit.

This module exports the main service entry points.
"""

from recall_kit.services.events import ReviewEventBus
from recall_kit.services.progress_service import ProgressService
from recall_kit.services.review_controller import ReviewController, UndoEntry
from recall_kit.services.scheduler import (
    STATE_TRANSITIONS,
    Scheduler,
    format_interval,
    parse_grade,
    schedule_review,
)
from recall_kit.services.session_queue import (
    ALL_SCOPE,
    SessionQueue,
    SessionQueueManager,
    order_due_items,
)

__all__ = [
    "ALL_SCOPE",
    "STATE_TRANSITIONS",
    "ProgressService",
    "ReviewController",
    "ReviewEventBus",
    "Scheduler",
    "SessionQueue",
    "SessionQueueManager",
    "UndoEntry",
    "format_interval",
    "order_due_items",
    "parse_grade",
    "schedule_review",
]
