"""Utility functions for recall_kit.

This module contains internal utility functions.
"""

from recall_kit.utils.clock import (
    MS_PER_DAY,
    MS_PER_MINUTE,
    day_key,
    now_ms,
    previous_day_key,
)
from recall_kit.utils.hashing import generate_review_id, hash_text

__all__ = [
    "MS_PER_DAY",
    "MS_PER_MINUTE",
    "day_key",
    "generate_review_id",
    "hash_text",
    "now_ms",
    "previous_day_key",
]
