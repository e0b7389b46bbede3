"""Error taxonomy for recall_kit.

Every failure the core reports to its caller derives from RecallKitError.
A failed grade or undo never leaves the session advanced past the item
whose write did not complete.
"""

__all__ = [
    "NotFoundError",
    "PersistenceError",
    "RecallKitError",
    "ValidationError",
]


class RecallKitError(Exception):
    pass


class ValidationError(RecallKitError, ValueError):
    """Input rejected before any state was touched (bad grade, nothing to undo)."""


class NotFoundError(RecallKitError, LookupError):
    """An expected item or review record is missing from storage."""


class PersistenceError(RecallKitError, RuntimeError):
    """The storage collaborator failed during a write or delete."""
