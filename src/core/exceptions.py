"""
Learning core errors.

Every failure raised by the scheduling core is one of these, so callers can
tell a bad request (InvalidArgument) from a stale reference (NotFound).
"""

from __future__ import annotations

from typing import Any

# Valid SM-2 rating range (inclusive)
MIN_PERFORMANCE = 0
MAX_PERFORMANCE = 5


class LearningCoreError(Exception):
    """Base class for learning core errors."""
    pass


class InvalidArgument(LearningCoreError, ValueError):
    """Raised when a rating, path length, or item record is malformed."""
    pass


class NotFound(LearningCoreError, KeyError):
    """Raised when a referenced item id is absent from the pool."""

    def __init__(self, item_id: str):
        super().__init__(item_id)
        self.item_id = item_id

    def __str__(self) -> str:
        return f"Item not found: {self.item_id}"


def validate_performance(performance: Any) -> int:
    """
    Check that a rating is an integer in [0, 5].

    Args:
        performance: Rating reported by the presentation layer

    Returns:
        The rating as an int

    Raises:
        InvalidArgument: If the rating is not an integer or out of range
    """
    # bool is an int subclass; True/False are not ratings
    if isinstance(performance, bool) or not isinstance(performance, int):
        raise InvalidArgument(f"Performance must be an integer 0-5, got {performance!r}")
    if not MIN_PERFORMANCE <= performance <= MAX_PERFORMANCE:
        raise InvalidArgument(f"Performance must be between 0 and 5, got {performance}")
    return performance


def validate_path_length(path_length: Any) -> int:
    """Check that a requested path length is a positive integer."""
    if isinstance(path_length, bool) or not isinstance(path_length, int):
        raise InvalidArgument(f"Path length must be an integer, got {path_length!r}")
    if path_length < 1:
        raise InvalidArgument(f"Path length must be at least 1, got {path_length}")
    return path_length
