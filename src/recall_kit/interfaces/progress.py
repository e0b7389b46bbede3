"""Progress interfaces for recall_kit.

Aggregate progress and achievements live outside the undo boundary:
they are updated after each successful grade and never rolled back.
"""

from typing import Protocol, runtime_checkable

from recall_kit.models.progress import ProgressDTO

__all__ = [
    "AchievementSinkInterface",
    "ProgressStoreInterface",
]


@runtime_checkable
class ProgressStoreInterface(Protocol):
    """Contract for the aggregate progress record."""

    async def get_progress(self) -> ProgressDTO | None:
        """Get the stored progress, None if nothing was recorded yet."""
        ...

    async def save_progress(self, progress: ProgressDTO) -> None:
        """Replace the stored progress."""
        ...


@runtime_checkable
class AchievementSinkInterface(Protocol):
    """Contract for achievement unlock checks."""

    async def check(self, total_reviewed: int, current_streak: int) -> list[str]:
        """Evaluate achievements after a grade.

        Args:
            total_reviewed: Grading events ever recorded
            current_streak: Current daily streak

        Returns:
            IDs of achievements unlocked by this call
        """
        ...
