"""Review log models for recall_kit.

One record is appended per grading event; undo removes only the most
recent record for the affected item.
"""

from pydantic import BaseModel, Field

from recall_kit.models.memory import Grade

__all__ = [
    "ReviewRecordDTO",
]


class ReviewRecordDTO(BaseModel, frozen=True):
    """Append-only record of a single grading event.

    Attributes:
        review_id: Hash-based review ID
        item_id: Graded item ID
        deck_id: Deck of the graded item
        grade: Grade applied (1-4)
        time_spent_ms: Time the learner spent on the item
        reviewed_at: Grading time in epoch milliseconds
        schema_version: Schema version for forward compatibility
    """

    review_id: str = Field(description="Hash-based review ID")
    item_id: str = Field(description="Graded item ID")
    deck_id: str = Field(default="", description="Deck of the graded item")
    grade: Grade
    time_spent_ms: int = Field(default=0, ge=0)
    reviewed_at: int = Field(description="Epoch milliseconds")
    schema_version: int = Field(default=1)
