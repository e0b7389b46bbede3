"""Hashing utilities for recall_kit.

Review records get deterministic IDs so that re-applying the same
grading event yields the same record.
"""

import hashlib

__all__ = [
    "generate_review_id",
    "hash_text",
]


def hash_text(text: str) -> str:
    """Generate SHA256 hash of text.

    Args:
        text: Input text to hash

    Returns:
        Hexadecimal SHA256 hash string
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def generate_review_id(item_id: str, reviewed_at: int, reps: int) -> str:
    """Generate deterministic review ID.

    The rep count disambiguates two gradings of one item within the
    same millisecond.

    Args:
        item_id: Graded item ID
        reviewed_at: Grading time (epoch milliseconds)
        reps: Item rep count after the grading

    Returns:
        Hexadecimal SHA256 hash string
    """
    return hash_text(f"review|{item_id}|{reviewed_at}|{reps}")
