"""recall_kit - Spaced-repetition scheduling and study sessions.

This package provides tools for:
- Scheduling reviews with a difficulty/stability memory model
- Ordered study sessions over due items, per deck or across all decks
- Grading with exact single-step undo
- Streak and daily-goal progress driven by grade events

Example usage:
    from recall_kit import Grade, InMemoryStorageRepository, RecallKit

    async with RecallKit(storage=InMemoryStorageRepository()) as kit:
        await kit.add_items(["card-1", "card-2"], deck_id="spanish")
        session = await kit.start_session("spanish")
        while not session.is_complete():
            await session.grade(Grade.GOOD, time_spent_ms=3000)
        print(session.stats().accuracy)
"""

__version__ = "0.1.0"

from recall_kit.config import RecallKitConfig
from recall_kit.domain.weights import MemoryWeights, SchedulingParams
from recall_kit.errors import NotFoundError, PersistenceError, RecallKitError, ValidationError

# Implementations
from recall_kit.infra.memory.repositories import InMemoryStorageRepository
from recall_kit.infra.mongo.repositories import MongoStorageRepository

# Interfaces
from recall_kit.interfaces.progress import AchievementSinkInterface, ProgressStoreInterface
from recall_kit.interfaces.storage import StorageInterface
from recall_kit.models.memory import Grade, ItemMemoryState, ItemState
from recall_kit.orchestrator import AddItemsResult, RecallKit
from recall_kit.services.review_controller import ReviewController
from recall_kit.services.scheduler import Scheduler, schedule_review

__all__ = [  # noqa: RUF022
    # Orchestrator
    "RecallKit",
    "AddItemsResult",
    "RecallKitConfig",
    # Scheduling
    "Scheduler",
    "schedule_review",
    "ReviewController",
    "MemoryWeights",
    "SchedulingParams",
    # Models
    "Grade",
    "ItemMemoryState",
    "ItemState",
    # Implementations
    "InMemoryStorageRepository",
    "MongoStorageRepository",
    # Interfaces
    "AchievementSinkInterface",
    "ProgressStoreInterface",
    "StorageInterface",
    # Errors
    "RecallKitError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
]
