"""Public DTO models for recall_kit.

This module exports all public data transfer objects.
"""

from recall_kit.models.memory import (
    GRADE_DESCRIPTIONS,
    GRADE_LABELS,
    STATE_PRECEDENCE,
    Grade,
    ItemMemoryState,
    ItemState,
)
from recall_kit.models.progress import (
    AchievementUnlockedEvent,
    ItemGradedEvent,
    ProgressDTO,
)
from recall_kit.models.review import ReviewRecordDTO
from recall_kit.models.session import SchedulingOption, SessionStats, SessionStatus

__all__ = [
    "GRADE_DESCRIPTIONS",
    "GRADE_LABELS",
    "STATE_PRECEDENCE",
    "AchievementUnlockedEvent",
    "Grade",
    "ItemGradedEvent",
    "ItemMemoryState",
    "ItemState",
    "ProgressDTO",
    "ReviewRecordDTO",
    "SchedulingOption",
    "SessionStats",
    "SessionStatus",
]
