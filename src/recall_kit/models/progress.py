"""Progress and event models for recall_kit.

These models represent the aggregate study progress kept outside the
undo boundary, and the events published after a successful grade.
"""

from pydantic import BaseModel, Field

from recall_kit.models.memory import Grade
from recall_kit.utils.clock import day_key, previous_day_key

__all__ = [
    "AchievementUnlockedEvent",
    "ItemGradedEvent",
    "ProgressDTO",
]


class ProgressDTO(BaseModel, frozen=True):
    """Aggregate study progress across sessions.

    Attributes:
        total_reviewed: Grading events ever recorded
        current_streak: Consecutive study days ending at last_study_day
        longest_streak: Longest streak ever reached
        last_study_day: UTC day (YYYY-MM-DD) of the most recent review
        reviewed_today: Reviews recorded on last_study_day
        daily_goal: Reviews per day counted as meeting the goal
        schema_version: Schema version for forward compatibility
    """

    total_reviewed: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_study_day: str | None = None
    reviewed_today: int = Field(default=0, ge=0)
    daily_goal: int = Field(default=20, ge=1)
    schema_version: int = Field(default=1)

    @property
    def goal_met(self) -> bool:
        return self.reviewed_today >= self.daily_goal

    def with_review(self, reviewed_at: int) -> "ProgressDTO":
        """Create a new ProgressDTO counting one more review.

        The streak grows when the previous study day was yesterday,
        holds on the same day, and restarts at 1 after a gap.

        Args:
            reviewed_at: Review time in epoch milliseconds

        Returns:
            New ProgressDTO with updated counters
        """
        today = day_key(reviewed_at)
        if self.last_study_day == today:
            streak = max(self.current_streak, 1)
            reviewed_today = self.reviewed_today + 1
        elif self.last_study_day == previous_day_key(reviewed_at):
            streak = self.current_streak + 1
            reviewed_today = 1
        else:
            streak = 1
            reviewed_today = 1

        return ProgressDTO(
            total_reviewed=self.total_reviewed + 1,
            current_streak=streak,
            longest_streak=max(self.longest_streak, streak),
            last_study_day=today,
            reviewed_today=reviewed_today,
            daily_goal=self.daily_goal,
            schema_version=self.schema_version,
        )


class ItemGradedEvent(BaseModel, frozen=True):
    """Published after a grade has been fully persisted."""

    item_id: str
    deck_id: str = ""
    grade: Grade
    reviewed_at: int = Field(description="Epoch milliseconds")
    session_id: str | None = None


class AchievementUnlockedEvent(BaseModel, frozen=True):
    """Published for each achievement the sink reports as newly unlocked."""

    achievement_id: str
    total_reviewed: int
    current_streak: int
