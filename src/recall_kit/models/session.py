"""Study session models for recall_kit."""

from enum import Enum

from pydantic import BaseModel, Field

from recall_kit.models.memory import Grade

__all__ = [
    "SchedulingOption",
    "SessionStats",
    "SessionStatus",
]


class SessionStatus(str, Enum):
    """Controller state: grading is accepted only while READY."""

    READY = "ready"
    COMPLETE = "complete"


class SessionStats(BaseModel, frozen=True):
    """Per-session grading counters.

    Attributes:
        reviewed: Items graded in this session
        again: Again grades
        hard: Hard grades
        good: Good grades
        easy: Easy grades
        total: Items in the session queue
    """

    reviewed: int = Field(default=0, ge=0)
    again: int = Field(default=0, ge=0)
    hard: int = Field(default=0, ge=0)
    good: int = Field(default=0, ge=0)
    easy: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)

    @property
    def accuracy(self) -> float:
        """Share of Good and Easy grades among reviewed items."""
        if self.reviewed == 0:
            return 0.0
        return (self.good + self.easy) / self.reviewed

    def count_for(self, grade: Grade) -> int:
        return getattr(self, _COUNTER_FIELDS[grade])

    def with_grade(self, grade: Grade, step: int = 1) -> "SessionStats":
        """Return stats with the reviewed and per-grade counters moved by step."""
        field_name = _COUNTER_FIELDS[grade]
        return self.model_copy(
            update={
                "reviewed": max(0, self.reviewed + step),
                field_name: max(0, getattr(self, field_name) + step),
            }
        )


_COUNTER_FIELDS: dict[Grade, str] = {
    Grade.AGAIN: "again",
    Grade.HARD: "hard",
    Grade.GOOD: "good",
    Grade.EASY: "easy",
}


class SchedulingOption(BaseModel, frozen=True):
    """What grading the current item with one grade would schedule.

    Attributes:
        grade: Grade previewed
        label: Display label of the grade
        next_due: Resulting due time in epoch milliseconds
        interval: Human-readable interval, e.g. ``10m`` or ``4d``
    """

    grade: Grade
    label: str
    next_due: int
    interval: str
