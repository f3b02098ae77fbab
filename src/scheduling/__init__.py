"""
Scheduling: when to review and how hard.

Components:
- ReviewScheduler: SM-2 spaced repetition over learnable items
- DifficultyAdvisor: Difficulty recommendation and weighted sampling
"""

from src.scheduling.difficulty_advisor import (
    DIFFICULTY_DISTRIBUTIONS,
    DifficultyAdvisor,
    DifficultyThresholds,
)
from src.scheduling.review_scheduler import ReviewScheduler, SchedulerConfig

__all__ = [
    "ReviewScheduler",
    "SchedulerConfig",
    "DifficultyAdvisor",
    "DifficultyThresholds",
    "DIFFICULTY_DISTRIBUTIONS",
]
