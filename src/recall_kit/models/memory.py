"""Memory-state models for recall_kit.

These models represent the per-item recall state that the scheduler
reads and produces. Grade numbering and state encodings are persisted
and must never be renumbered.
"""

from enum import Enum, IntEnum
from typing import Self

from pydantic import BaseModel, Field, model_validator

__all__ = [
    "GRADE_DESCRIPTIONS",
    "GRADE_LABELS",
    "Grade",
    "ItemMemoryState",
    "ItemState",
    "STATE_PRECEDENCE",
]


class Grade(IntEnum):
    """Learner's self-assessed recall quality."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @property
    def label(self) -> str:
        return GRADE_LABELS[self]


GRADE_LABELS: dict[Grade, str] = {
    Grade.AGAIN: "Again",
    Grade.HARD: "Hard",
    Grade.GOOD: "Good",
    Grade.EASY: "Easy",
}

GRADE_DESCRIPTIONS: dict[Grade, str] = {
    Grade.AGAIN: "Complete blackout, wrong answer",
    Grade.HARD: "Correct but with difficulty",
    Grade.GOOD: "Correct with some hesitation",
    Grade.EASY: "Instant and confident recall",
}


class ItemState(str, Enum):
    """Discrete learning state of an item."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"

    @property
    def code(self) -> int:
        """Integer encoding used by persisted logs."""
        return _STATE_CODES[self]

    @property
    def precedence(self) -> int:
        """Study order within a session: New, Learning, Relearning, Review."""
        return STATE_PRECEDENCE[self]

    @classmethod
    def from_code(cls, code: int) -> "ItemState":
        for state, value in _STATE_CODES.items():
            if value == code:
                return state
        raise ValueError(f"Unknown state code: {code}")


_STATE_CODES: dict[ItemState, int] = {
    ItemState.NEW: 0,
    ItemState.LEARNING: 1,
    ItemState.REVIEW: 2,
    ItemState.RELEARNING: 3,
}

STATE_PRECEDENCE: dict[ItemState, int] = {
    ItemState.NEW: 0,
    ItemState.LEARNING: 1,
    ItemState.RELEARNING: 2,
    ItemState.REVIEW: 3,
}


class ItemMemoryState(BaseModel, frozen=True):
    """Recall state of one learnable item.

    All timestamps are integer milliseconds since the epoch.

    Attributes:
        id: Externally owned item identifier
        deck_id: Collection the item belongs to
        difficulty: Intrinsic hardness (1.0 - 10.0)
        stability: Days until retrievability decays to the target retention
        elapsed_days: Gap observed at the most recent grading
        scheduled_days: Interval assigned at the most recent grading
        reps: Grading events applied
        lapses: Again grades applied while in Review or Relearning
        state: Discrete learning state
        due: Time at or after which the item is eligible for study
        last_review: Time of the most recent grading, None if never graded
        schema_version: Schema version for forward compatibility
    """

    id: str = Field(description="Item ID")
    deck_id: str = Field(default="", description="Owning deck ID")
    difficulty: float = Field(default=5.0, ge=1.0, le=10.0)
    stability: float = Field(default=0.0, ge=0.0)
    elapsed_days: float = Field(default=0.0, ge=0.0)
    scheduled_days: float = Field(default=0.0, ge=0.0)
    reps: int = Field(default=0, ge=0)
    lapses: int = Field(default=0, ge=0)
    state: ItemState = ItemState.NEW
    due: int = Field(description="Epoch milliseconds")
    last_review: int | None = Field(default=None, description="Epoch milliseconds")
    schema_version: int = Field(default=1)

    @model_validator(mode="after")
    def _check_unreviewed(self) -> Self:
        unreviewed = self.state is ItemState.NEW and self.last_review is None
        if (self.reps == 0) != unreviewed:
            raise ValueError(
                "reps must be 0 exactly when the item is New and has no last_review"
            )
        return self

    @classmethod
    def new(cls, item_id: str, now: int, deck_id: str = "") -> "ItemMemoryState":
        """Create the state of a never-graded item, due immediately."""
        return cls(id=item_id, deck_id=deck_id, due=now)

    @property
    def is_new(self) -> bool:
        return self.state is ItemState.NEW

    def is_due(self, now: int) -> bool:
        return self.due <= now
