"""
SM-2 Review Scheduler.

Decides, per item, when it is next due for review from the most recent
performance rating.

SM-2 Grade Scale:
0 - Complete blackout, wrong response
1 - Incorrect, but upon seeing answer remembered
2 - Incorrect, but answer seemed easy to recall
3 - Correct, but with significant difficulty
4 - Correct, with some hesitation
5 - Correct, with perfect recall
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from loguru import logger

from src.core.exceptions import validate_performance
from src.core.models import LearnableItem, MasteryLevel, utc_now
from src.core.utils import percentage, round_half_up


@dataclass
class SchedulerConfig:
    """Configuration for the SM-2 scheduler."""

    initial_ease_factor: float = 2.5
    minimum_ease_factor: float = 1.3
    first_interval: int = 1  # Days after first success (and after any failure)
    second_interval: int = 3  # Days after second success
    mastery_repetitions: int = 8
    passing_grade: int = 3

    @classmethod
    def from_settings(cls) -> SchedulerConfig:
        """Build from application settings."""
        from config import get_settings

        return cls(**get_settings().get_scheduler_config())


class ReviewScheduler:
    """
    Implements the SuperMemo 2 scheduling rules for learnable items.

    Each item carries:
    - Ease Factor (EF): interval multiplier (2.5 default, min 1.3)
    - Interval: days until next review
    - Repetition number: consecutive successful recalls

    The scheduler is stateless; all state lives on the items passed in.
    """

    def __init__(self, config: SchedulerConfig | None = None):
        """
        Initialize the scheduler.

        Args:
            config: Custom configuration (uses defaults if None)
        """
        self.config = config or SchedulerConfig()

    def schedule_next_review(
        self,
        item: LearnableItem,
        performance: int,
        now: datetime | None = None,
    ) -> LearnableItem:
        """
        Calculate the next review date for an item.

        Args:
            item: The reviewed item
            performance: Rating 0-5
            now: Review time (defaults to current UTC time)

        Returns:
            Updated copy of the item

        Raises:
            InvalidArgument: If the rating is outside 0-5
        """
        performance = validate_performance(performance)
        now = now or utc_now()

        repetitions = item.repetition_number or 0
        ease = item.ease_factor or self.config.initial_ease_factor
        interval = item.interval or 0

        if performance < self.config.passing_grade:
            # Failed - reset repetitions, keep ease factor
            repetitions = 0
            interval = self.config.first_interval
        else:
            # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
            miss = 5 - performance
            ease = max(
                self.config.minimum_ease_factor,
                ease + (0.1 - miss * (0.08 + miss * 0.02)),
            )

            if repetitions == 0:
                interval = self.config.first_interval
            elif repetitions == 1:
                interval = self.config.second_interval
            else:
                interval = round_half_up(interval * ease)

            repetitions += 1

        mastered = item.mastered or repetitions >= self.config.mastery_repetitions
        # A mastered item always carries the mastered label
        mastery_level = MasteryLevel.MASTERED if mastered else item.mastery_level

        logger.debug(
            f"Scheduled {item.id}: grade={performance}, reps={repetitions}, "
            f"ef={ease:.2f}, interval={interval}d"
        )

        return replace(
            item,
            repetition_number=repetitions,
            ease_factor=ease,
            interval=interval,
            next_review_date=now + timedelta(days=interval),
            mastered=mastered,
            mastery_level=mastery_level,
        )

    def get_due_items(
        self,
        items: Iterable[LearnableItem] | None,
        now: datetime | None = None,
    ) -> list[LearnableItem]:
        """
        Get items due for review.

        Items never scheduled are always due. Input order is preserved.
        """
        if not items:
            return []
        now = now or utc_now()
        return [item for item in items if item.is_due(now)]

    def get_mastery_percentage(self, items: Iterable[LearnableItem] | None) -> int:
        """Mastered items as a whole-number percentage (0 for no items)."""
        items = list(items or [])
        return percentage(sum(1 for item in items if item.mastered), len(items))

    def days_overdue(self, item: LearnableItem, now: datetime | None = None) -> int:
        """Whole days past the scheduled review date."""
        if item.next_review_date is None:
            return 0
        delta = (now or utc_now()) - item.next_review_date
        return max(0, delta.days)
