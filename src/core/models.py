"""
Core domain models for adaptive vocabulary practice.

Plain dataclasses shared by the scheduler, difficulty advisor, mastery
tracker and path generator. Each record converts to and from the camelCase
document shape the progress store persists (numbers as numbers, ISO-8601
strings for timestamps, booleans as booleans).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

from src.core.exceptions import InvalidArgument

DIFFICULTY_LEVELS = (1, 2, 3)
DEFAULT_CATEGORY = "uncategorized"


class MasteryLevel(str, Enum):
    """Three-stage mastery label for a learnable item."""

    INTRODUCED = "introduced"
    PRACTICING = "practicing"
    MASTERED = "mastered"

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.INTRODUCED: "yellow",
            MasteryLevel.PRACTICING: "cyan",
            MasteryLevel.MASTERED: "green",
        }[self]


# =============================================================================
# Timestamp helpers
# =============================================================================


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 timestamp.

    Naive values are taken to be UTC. A trailing ``Z`` is accepted.

    Raises:
        InvalidArgument: If the value is not a datetime or ISO string
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidArgument(f"Malformed timestamp {value!r}") from e
    else:
        raise InvalidArgument(f"Malformed timestamp {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def utc_date(value: datetime) -> date:
    """Calendar day of an instant in UTC (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(UTC).date()


def format_timestamp(value: datetime | None) -> str | None:
    """Serialize a datetime to ISO-8601 (None passes through)."""
    return value.isoformat() if value is not None else None


# =============================================================================
# Learnable Item
# =============================================================================


@dataclass
class LearnableItem:
    """
    One vocabulary word, phrase, or grammar point eligible for scheduling.

    Catalog records only carry id, category and difficulty (plus display
    text). The scheduling fields stay ``None`` until the review scheduler
    first touches the item; the mastery counters start at zero.
    """

    id: str
    category: str = DEFAULT_CATEGORY
    difficulty: int = 1

    # Display content from the catalog
    nepali: str | None = None
    english: str | None = None
    pronunciation: str | None = None

    # Scheduling state (owned by ReviewScheduler)
    repetition_number: int | None = None
    ease_factor: float | None = None
    interval: int | None = None
    next_review_date: datetime | None = None
    mastered: bool = False

    # Mastery state (owned by MasteryTracker)
    mastery_level: MasteryLevel | None = None
    practice_count: int = 0
    correct_count: int = 0
    last_practiced: datetime | None = None
    last_performance: int | None = None

    def __post_init__(self):
        """Validate identity and difficulty tier."""
        if not isinstance(self.id, str) or not self.id:
            raise InvalidArgument(f"Item id must be a non-empty string, got {self.id!r}")
        if isinstance(self.difficulty, bool) or self.difficulty not in DIFFICULTY_LEVELS:
            raise InvalidArgument(
                f"Item {self.id} difficulty must be one of {DIFFICULTY_LEVELS}, "
                f"got {self.difficulty!r}"
            )
        if self.mastery_level is not None and not isinstance(self.mastery_level, MasteryLevel):
            try:
                self.mastery_level = MasteryLevel(self.mastery_level)
            except ValueError as e:
                raise InvalidArgument(
                    f"Item {self.id} has unknown mastery level {self.mastery_level!r}"
                ) from e
        if self.correct_count > self.practice_count:
            raise InvalidArgument(
                f"Item {self.id} has more correct attempts ({self.correct_count}) "
                f"than attempts ({self.practice_count})"
            )

    @property
    def is_new(self) -> bool:
        """True until the scheduler has set a review date."""
        return self.next_review_date is None

    def is_due(self, now: datetime | None = None) -> bool:
        """Check if this item is due for review."""
        if self.next_review_date is None:
            return True  # Never scheduled = due
        return self.next_review_date <= (now or utc_now())

    @property
    def success_rate(self) -> float:
        """Correct attempts as a percentage of all attempts."""
        if self.practice_count == 0:
            return 0.0
        return self.correct_count / self.practice_count * 100

    @classmethod
    def from_dict(cls, data: dict) -> LearnableItem:
        """
        Create an item from a catalog entry or persisted progress record.

        Args:
            data: Dictionary with camelCase keys

        Returns:
            LearnableItem instance

        Raises:
            InvalidArgument: If ``id`` is missing or a field is malformed
        """
        if not isinstance(data, dict):
            raise InvalidArgument(f"Item record must be a mapping, got {type(data).__name__}")
        if not data.get("id"):
            raise InvalidArgument("Item record is missing 'id'")

        return cls(
            id=str(data["id"]),
            category=data.get("category") or DEFAULT_CATEGORY,
            difficulty=data.get("difficulty") or 1,
            nepali=data.get("nepaliWord") or data.get("nepaliPhrase"),
            english=data.get("englishTranslation"),
            pronunciation=data.get("pronunciation"),
            repetition_number=data.get("repetitionNumber"),
            ease_factor=data.get("easeFactor"),
            interval=data.get("interval"),
            next_review_date=parse_timestamp(data.get("nextReviewDate")),
            mastered=bool(data.get("mastered", False)),
            mastery_level=data.get("masteryLevel"),
            practice_count=data.get("practiceCount") or 0,
            correct_count=data.get("correctCount") or 0,
            last_practiced=parse_timestamp(data.get("lastPracticed")),
            last_performance=data.get("lastPerformance"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted document shape."""
        return {
            "id": self.id,
            "category": self.category,
            "difficulty": self.difficulty,
            "nepaliWord": self.nepali,
            "englishTranslation": self.english,
            "pronunciation": self.pronunciation,
            "repetitionNumber": self.repetition_number,
            "easeFactor": self.ease_factor,
            "interval": self.interval,
            "nextReviewDate": format_timestamp(self.next_review_date),
            "mastered": self.mastered,
            "masteryLevel": self.mastery_level.value if self.mastery_level else None,
            "practiceCount": self.practice_count,
            "correctCount": self.correct_count,
            "lastPracticed": format_timestamp(self.last_practiced),
            "lastPerformance": self.last_performance,
        }


@dataclass
class CompletedItem:
    """An item the learner just practiced, with the rating it earned."""

    item: LearnableItem
    performance: int | None = None


# =============================================================================
# Sessions & Progress
# =============================================================================


def _default_session_metrics() -> dict[str, float]:
    return {"focusScore": 0, "progressMade": 0, "reviewCompleted": 0}


@dataclass
class Session:
    """A single practice session."""

    session_id: str
    start_time: datetime
    end_time: datetime | None = None
    duration: float = 0.0  # Minutes, derived when the session closes
    activities: list[dict] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=_default_session_metrics)
    score: float = 0.0
    items_studied: int = 0

    @property
    def timestamp(self) -> datetime:
        """Instant used to order sessions and compute streaks."""
        return self.start_time

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    @classmethod
    def from_dict(cls, data: dict) -> Session:
        """Create a session from its persisted form."""
        start = parse_timestamp(data.get("startTime") or data.get("timestamp"))
        if start is None:
            raise InvalidArgument(f"Session {data.get('sessionId')!r} has no start time")

        return cls(
            session_id=str(data.get("sessionId") or f"session_{int(start.timestamp() * 1000)}"),
            start_time=start,
            end_time=parse_timestamp(data.get("endTime")),
            duration=data.get("duration") or 0.0,
            activities=list(data.get("activities") or []),
            metrics=dict(data.get("metrics") or _default_session_metrics()),
            score=data.get("score") or 0.0,
            items_studied=data.get("itemsStudied") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted document shape."""
        return {
            "sessionId": self.session_id,
            "startTime": format_timestamp(self.start_time),
            "endTime": format_timestamp(self.end_time),
            "duration": self.duration,
            "activities": list(self.activities),
            "metrics": dict(self.metrics),
            "score": self.score,
            "itemsStudied": self.items_studied,
        }


@dataclass
class LearningStats:
    """Streak and time bookkeeping for one learner."""

    learning_streak: int = 0
    last_session_date: datetime | None = None
    total_learning_time: float = 0.0  # Minutes
    total_words_learned: int = 0

    @classmethod
    def from_dict(cls, data: dict | None) -> LearningStats:
        data = data or {}
        return cls(
            learning_streak=data.get("learningStreak") or 0,
            last_session_date=parse_timestamp(data.get("lastSessionDate")),
            total_learning_time=data.get("totalLearningTime") or 0.0,
            total_words_learned=data.get("totalWordsLearned") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "learningStreak": self.learning_streak,
            "lastSessionDate": format_timestamp(self.last_session_date),
            "totalLearningTime": self.total_learning_time,
            "totalWordsLearned": self.total_words_learned,
        }


@dataclass
class UserProgressSnapshot:
    """All item states plus streak bookkeeping for one learner."""

    user_id: str
    items: list[LearnableItem] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)
    stats: LearningStats = field(default_factory=LearningStats)

    @classmethod
    def from_dict(cls, data: dict) -> UserProgressSnapshot:
        return cls(
            user_id=str(data.get("userId", "")),
            items=[LearnableItem.from_dict(d) for d in data.get("vocabularyProgress") or []],
            sessions=[Session.from_dict(d) for d in data.get("sessionHistory") or []],
            stats=LearningStats.from_dict(data.get("learningStats")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "vocabularyProgress": [item.to_dict() for item in self.items],
            "sessionHistory": [session.to_dict() for session in self.sessions],
            "learningStats": self.stats.to_dict(),
        }
