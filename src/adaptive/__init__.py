"""
Adaptive Learning Engine.

Components:
- MasteryTracker: Mastery labels, streaks and progress reports
- PathGenerator: Personalized practice paths from due reviews and new items
- SessionTracker: Practice session lifecycle and streak bookkeeping
"""

from src.adaptive.mastery_tracker import (
    MasteryConfig,
    MasteryTracker,
    ProgressReport,
    SessionStatistics,
    SessionSummary,
    StreakInfo,
)
from src.adaptive.path_generator import LearningMetrics, PathConfig, PathGenerator
from src.adaptive.session_tracker import SessionTracker

__all__ = [
    # Path generation
    "PathGenerator",
    "PathConfig",
    "LearningMetrics",
    # Mastery
    "MasteryTracker",
    "MasteryConfig",
    "ProgressReport",
    "SessionSummary",
    "SessionStatistics",
    "StreakInfo",
    # Sessions
    "SessionTracker",
]
