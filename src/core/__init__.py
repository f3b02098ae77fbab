"""
Core Module - Shared domain models and errors.

Components:
- models: LearnableItem, Session, LearningStats, UserProgressSnapshot
- exceptions: InvalidArgument, NotFound and rating/path validation

All scheduling and adaptive modules import their shared types from here.
"""

from src.core.exceptions import (
    InvalidArgument,
    LearningCoreError,
    NotFound,
    validate_path_length,
    validate_performance,
)
from src.core.models import (
    DIFFICULTY_LEVELS,
    CompletedItem,
    LearnableItem,
    LearningStats,
    MasteryLevel,
    Session,
    UserProgressSnapshot,
)

__all__ = [
    # Models
    "LearnableItem",
    "CompletedItem",
    "Session",
    "LearningStats",
    "UserProgressSnapshot",
    "MasteryLevel",
    "DIFFICULTY_LEVELS",
    # Errors
    "LearningCoreError",
    "InvalidArgument",
    "NotFound",
    "validate_performance",
    "validate_path_length",
]
