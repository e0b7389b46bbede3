"""Interface contracts for recall_kit.

This module exports all Protocol-based interfaces for dependency injection.
"""

from recall_kit.interfaces.progress import (
    AchievementSinkInterface,
    ProgressStoreInterface,
)
from recall_kit.interfaces.storage import (
    ItemStoreInterface,
    ReviewLogInterface,
    StorageInterface,
)

__all__ = [
    "AchievementSinkInterface",
    "ItemStoreInterface",
    "ProgressStoreInterface",
    "ReviewLogInterface",
    "StorageInterface",
]
