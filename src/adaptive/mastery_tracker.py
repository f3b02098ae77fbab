"""
Mastery Tracker.

Turns practice attempts into a three-stage mastery label and produces
progress reports:
- Per-item practice/correct counters and introduced/practicing/mastered label
- Mastery distribution across a collection
- Daily practice streaks from session history
- Aggregate progress report (time, categories, recent sessions)
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any

from loguru import logger

from src.core.exceptions import validate_performance
from src.core.models import (
    DEFAULT_CATEGORY,
    LearnableItem,
    LearningStats,
    MasteryLevel,
    Session,
    utc_date,
    utc_now,
)
from src.core.utils import percentage

RECENT_SESSION_LIMIT = 10


@dataclass
class MasteryConfig:
    """Thresholds for the mastery label."""

    correct_rating: int = 4  # Ratings at or above count as correct
    mastered_min_practice: int = 10
    mastered_success_rate: float = 80.0
    practicing_min_practice: int = 3
    practicing_success_rate: float = 60.0
    review_stale_days: int = 3

    @classmethod
    def from_settings(cls) -> MasteryConfig:
        """Build from application settings."""
        from config import get_settings

        return cls(**get_settings().get_mastery_config())


@dataclass
class StreakInfo:
    """Consecutive-day practice streak."""

    current_streak: int = 0
    longest_streak: int = 0
    last_active_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "lastActiveDate": self.last_active_date.isoformat() if self.last_active_date else None,
        }


@dataclass
class SessionSummary:
    """One row of the recent-performance table."""

    date: datetime
    score: float
    items_studied: int
    duration: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "score": self.score,
            "itemsStudied": self.items_studied,
            "duration": self.duration,
        }


@dataclass
class ProgressReport:
    """Aggregate learning progress for one learner."""

    mastery_distribution: dict[str, int] = field(default_factory=dict)
    streak: StreakInfo = field(default_factory=StreakInfo)
    total_learning_time: float = 0.0
    average_session_time: float = 0.0
    items_per_category: dict[str, int] = field(default_factory=dict)
    mastery_per_category: dict[str, int] = field(default_factory=dict)
    recent_performance: list[SessionSummary] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "masteryDistribution": dict(self.mastery_distribution),
            "streak": self.streak.to_dict(),
            "totalLearningTime": self.total_learning_time,
            "averageSessionTime": self.average_session_time,
            "itemsPerCategory": dict(self.items_per_category),
            "masteryPerCategory": dict(self.mastery_per_category),
            "recentPerformance": [s.to_dict() for s in self.recent_performance],
        }


@dataclass
class SessionStatistics:
    """Session-history aggregates for the stats screen."""

    total_sessions: int = 0
    average_session_duration: float = 0.0
    sessions_per_day: float = 0.0
    current_streak: int = 0
    total_learning_time: float = 0.0


def _empty_distribution() -> dict[str, int]:
    return {level.value: 0 for level in MasteryLevel}


class MasteryTracker:
    """
    Track mastery labels and learning progress.

    Label rules (first match wins):
    - mastered:   >= 10 attempts and >= 80% correct
    - practicing: >= 3 attempts and >= 60% correct
    - introduced: otherwise
    """

    def __init__(self, config: MasteryConfig | None = None):
        self.config = config or MasteryConfig()

    # =========================================================================
    # Per-item updates
    # =========================================================================

    def update_mastery_level(
        self,
        item: LearnableItem,
        performance: int,
        now: datetime | None = None,
    ) -> LearnableItem:
        """
        Record one attempt and relabel the item.

        Args:
            item: The practiced item
            performance: Rating 0-5
            now: Attempt time (defaults to current UTC time)

        Returns:
            Updated copy of the item

        Raises:
            InvalidArgument: If the rating is outside 0-5
        """
        performance = validate_performance(performance)

        practice_count = item.practice_count + 1
        correct_count = item.correct_count
        if performance >= self.config.correct_rating:
            correct_count += 1

        success_rate = correct_count / practice_count * 100
        mastered = item.mastered

        if (
            practice_count >= self.config.mastered_min_practice
            and success_rate >= self.config.mastered_success_rate
        ):
            level = MasteryLevel.MASTERED
            mastered = True
        elif (
            practice_count >= self.config.practicing_min_practice
            and success_rate >= self.config.practicing_success_rate
        ):
            level = MasteryLevel.PRACTICING
        else:
            level = MasteryLevel.INTRODUCED

        if mastered and level is not MasteryLevel.MASTERED:
            # Mastery is never revoked once reached
            level = MasteryLevel.MASTERED

        logger.debug(
            f"Mastery {item.id}: {practice_count} attempts, "
            f"{success_rate:.0f}% correct -> {level.value}"
        )

        return replace(
            item,
            practice_count=practice_count,
            correct_count=correct_count,
            mastery_level=level,
            mastered=mastered,
            last_practiced=now or utc_now(),
            last_performance=performance,
        )

    # =========================================================================
    # Collection queries
    # =========================================================================

    def get_mastery_distribution(self, items: Iterable[LearnableItem] | None) -> dict[str, int]:
        """
        Percentage of items at each mastery level.

        Percentages are rounded independently and may not sum to 100.
        Items never practiced count as introduced.
        """
        items = list(items or [])
        counts = _empty_distribution()
        if not items:
            return counts

        for item in items:
            level = item.mastery_level or MasteryLevel.INTRODUCED
            counts[level.value] += 1

        return {level: percentage(count, len(items)) for level, count in counts.items()}

    def get_items_by_mastery_level(
        self,
        items: Iterable[LearnableItem] | None,
        level: MasteryLevel,
    ) -> list[LearnableItem]:
        """Items currently carrying the given label (unlabelled = introduced)."""
        return [
            item for item in items or []
            if (item.mastery_level or MasteryLevel.INTRODUCED) == level
        ]

    def get_items_needing_review(
        self,
        items: Iterable[LearnableItem] | None,
        now: datetime | None = None,
    ) -> list[LearnableItem]:
        """Practiced but unmastered items not touched for ``review_stale_days``."""
        cutoff = (now or utc_now()) - timedelta(days=self.config.review_stale_days)
        return [
            item for item in items or []
            if item.mastery_level in (MasteryLevel.INTRODUCED, MasteryLevel.PRACTICING)
            and item.last_practiced is not None
            and item.last_practiced < cutoff
        ]

    # =========================================================================
    # Streaks & reports
    # =========================================================================

    def calculate_streak(
        self,
        sessions: Iterable[Session] | None,
        today: date | None = None,
    ) -> StreakInfo:
        """
        Count consecutive practice days ending today or yesterday.

        Calendar days are taken from session start times in UTC. The streak
        is broken (0) when the latest session is older than yesterday.
        ``longest_streak`` mirrors ``current_streak``; no history of broken
        streaks is kept.
        """
        sessions = list(sessions or [])
        if not sessions:
            return StreakInfo()

        today = today or utc_date(utc_now())
        yesterday = today - timedelta(days=1)

        active_dates = {utc_date(session.timestamp) for session in sessions}
        last_active = max(active_dates)

        if last_active < yesterday:
            return StreakInfo(current_streak=0, longest_streak=0, last_active_date=last_active)

        current = today if last_active == today else yesterday
        streak = 0
        while current in active_dates:
            streak += 1
            current -= timedelta(days=1)

        return StreakInfo(
            current_streak=streak,
            longest_streak=streak,
            last_active_date=last_active,
        )

    def generate_progress_report(
        self,
        items: Iterable[LearnableItem] | None,
        sessions: Iterable[Session] | None,
        today: date | None = None,
    ) -> ProgressReport:
        """
        Build the aggregate progress report.

        Returns a zeroed report when there are no items.
        """
        items = list(items or [])
        sessions = list(sessions or [])
        if not items:
            return ProgressReport(mastery_distribution=_empty_distribution())

        total_time = sum(session.duration or 0 for session in sessions)
        average_time = total_time / len(sessions) if sessions else 0.0

        items_per_category: dict[str, int] = defaultdict(int)
        mastered_per_category: dict[str, int] = defaultdict(int)
        for item in items:
            category = item.category or DEFAULT_CATEGORY
            items_per_category[category] += 1
            if item.mastered:
                mastered_per_category[category] += 1

        mastery_per_category = {
            category: percentage(mastered_per_category[category], count)
            for category, count in items_per_category.items()
        }

        recent = sorted(sessions, key=lambda s: s.timestamp, reverse=True)[:RECENT_SESSION_LIMIT]

        return ProgressReport(
            mastery_distribution=self.get_mastery_distribution(items),
            streak=self.calculate_streak(sessions, today=today),
            total_learning_time=total_time,
            average_session_time=average_time,
            items_per_category=dict(items_per_category),
            mastery_per_category=mastery_per_category,
            recent_performance=[
                SessionSummary(
                    date=session.timestamp,
                    score=session.score or 0,
                    items_studied=session.items_studied or 0,
                    duration=session.duration or 0,
                )
                for session in recent
            ],
        )

    def get_session_statistics(
        self,
        sessions: Iterable[Session] | None,
        stats: LearningStats | None = None,
    ) -> SessionStatistics:
        """Session counts, average duration and practice frequency."""
        sessions = list(sessions or [])
        stats = stats or LearningStats()

        durations = [s.duration for s in sessions if s.duration]
        average = sum(durations) / len(durations) if durations else 0.0

        active_days = {utc_date(s.timestamp) for s in sessions}
        per_day = len(sessions) / len(active_days) if active_days else 0.0

        return SessionStatistics(
            total_sessions=len(sessions),
            average_session_duration=average,
            sessions_per_day=per_day,
            current_streak=stats.learning_streak,
            total_learning_time=stats.total_learning_time,
        )
