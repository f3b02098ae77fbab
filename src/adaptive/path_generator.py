"""
Adaptive Path Generator.

Builds the bounded, personalized queue of items a learner should practice
next:
1. Due reviews first (spaced repetition priority)
2. Recommended difficulty from per-tier and overall mastery
3. Remaining slots filled with unmastered items sampled by difficulty
4. Trimmed to the requested length
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from loguru import logger

from src.adaptive.mastery_tracker import MasteryTracker
from src.core.exceptions import InvalidArgument, NotFound, validate_path_length
from src.core.models import DEFAULT_CATEGORY, CompletedItem, LearnableItem
from src.core.utils import percentage
from src.scheduling.difficulty_advisor import DifficultyAdvisor
from src.scheduling.review_scheduler import ReviewScheduler


@dataclass
class PathConfig:
    """Configuration for path generation."""

    default_length: int = 10
    fallback_rating: int = 3  # Applied when a completed item has no rating

    # Per-tier mastery (%) needed to move the learner up a tier
    tier1_mastery_for_tier2: float = 70.0
    tier2_mastery_for_tier3: float = 50.0

    @classmethod
    def from_settings(cls) -> PathConfig:
        """Build from application settings."""
        from config import get_settings

        return cls(**get_settings().get_path_config())


@dataclass
class LearningMetrics:
    """Aggregate mastery over the item pool."""

    overall_mastery: int
    category_mastery: dict[str, int]
    total_items: int
    mastered_items: int
    current_difficulty: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallMastery": self.overall_mastery,
            "categoryMastery": dict(self.category_mastery),
            "totalItems": self.total_items,
            "masteredItems": self.mastered_items,
            "currentDifficulty": self.current_difficulty,
        }


class PathGenerator:
    """
    Compose due reviews and new material into a personalized path.

    Holds the learner's item pool and current path. Reviews write updated
    items back into the pool by id; callers persist ``items`` afterwards.
    Not thread-safe: one scheduling pass at a time per learner.
    """

    def __init__(
        self,
        items: Iterable[LearnableItem] | None = None,
        scheduler: ReviewScheduler | None = None,
        advisor: DifficultyAdvisor | None = None,
        tracker: MasteryTracker | None = None,
        config: PathConfig | None = None,
    ):
        """
        Initialize the generator.

        Args:
            items: Master item pool (catalog merged with saved progress)
            scheduler: ReviewScheduler (creates default if None)
            advisor: DifficultyAdvisor (creates default if None)
            tracker: Optional MasteryTracker; when set, completed items also
                get their mastery label updated
            config: Path configuration
        """
        self._items: list[LearnableItem] = list(items or [])
        self.scheduler = scheduler or ReviewScheduler()
        self.advisor = advisor or DifficultyAdvisor()
        self.tracker = tracker
        self.config = config or PathConfig()
        self.current_path: list[LearnableItem] = []

    @property
    def items(self) -> list[LearnableItem]:
        """Snapshot of the master pool."""
        return list(self._items)

    # =========================================================================
    # Path generation
    # =========================================================================

    def generate_personalized_path(
        self,
        path_length: int | None = None,
        now: datetime | None = None,
    ) -> list[LearnableItem]:
        """
        Generate a personalized practice path.

        Args:
            path_length: Maximum items in the path (default from config)
            now: Reference time for due checks

        Returns:
            Ordered list of at most ``path_length`` items

        Raises:
            InvalidArgument: If ``path_length`` is not a positive integer
        """
        if path_length is None:
            path_length = self.config.default_length
        path_length = validate_path_length(path_length)

        due_items = self.scheduler.get_due_items(self._items, now=now)
        mastery_pct = self.scheduler.get_mastery_percentage(self._items)
        current = self.get_current_difficulty()
        recommended = self.advisor.calculate_recommended_difficulty(current, mastery_pct)

        path = list(due_items)

        if len(path) < path_length:
            in_path = {item.id for item in path}
            candidates = [
                item for item in self._items
                if not item.mastered and item.id not in in_path
            ]
            path.extend(
                self.advisor.generate_mixed_difficulty_set(
                    candidates, recommended, path_length - len(path)
                )
            )

        self.current_path = path[:path_length]

        logger.info(
            f"Path built: {len(due_items)} due, mastery {mastery_pct}%, "
            f"tier {current}->{recommended}, {len(self.current_path)}/{path_length} items"
        )

        return list(self.current_path)

    def get_current_difficulty(self) -> int:
        """
        Current tier from per-tier mastery.

        Tier 3 when tier-1 mastery >= 70% and tier-2 mastery >= 50%;
        tier 2 when only tier-1 mastery >= 70%; otherwise tier 1.
        Tiers with no items count as 0% mastered.
        """
        totals: dict[int, int] = defaultdict(int)
        mastered: dict[int, int] = defaultdict(int)
        for item in self._items:
            totals[item.difficulty] += 1
            if item.mastered:
                mastered[item.difficulty] += 1

        def tier_mastery(level: int) -> float:
            if not totals[level]:
                return 0.0
            return mastered[level] / totals[level] * 100

        if (
            tier_mastery(1) >= self.config.tier1_mastery_for_tier2
            and tier_mastery(2) >= self.config.tier2_mastery_for_tier3
        ):
            return 3
        elif tier_mastery(1) >= self.config.tier1_mastery_for_tier2:
            return 2
        return 1

    # =========================================================================
    # Review results
    # =========================================================================

    def update_path(
        self,
        completed_items: Iterable[CompletedItem] | None,
        now: datetime | None = None,
    ) -> list[LearnableItem]:
        """
        Apply review results and backfill the path.

        Each completed item is rescheduled from its current pool entry,
        written back into the pool and dropped from the current path. A bad rating or an unknown id is
        logged and skipped; the rest of the batch still applies. The path
        is then regenerated at its previous depth plus the number of
        completed items.

        Returns:
            Refreshed path
        """
        completed_items = list(completed_items or [])
        if not completed_items:
            return list(self.current_path)

        for completed in completed_items:
            # Schedule from the pool entry so repeated ids in a batch build on each other
            try:
                item = self.get_item(completed.item.id)
            except NotFound:
                item = completed.item
            performance = completed.performance
            if performance is None:
                performance = self.config.fallback_rating

            try:
                updated = self.scheduler.schedule_next_review(item, performance, now=now)
                if self.tracker is not None:
                    updated = self.tracker.update_mastery_level(updated, performance, now=now)
            except InvalidArgument as e:
                logger.warning(f"Skipping review for {item.id}: {e}")
                continue

            try:
                self._write_back(updated)
            except NotFound as e:
                logger.warning(f"Review not saved: {e}")

            self.current_path = [i for i in self.current_path if i.id != updated.id]

        return self.generate_personalized_path(
            len(self.current_path) + len(completed_items), now=now
        )

    def _write_back(self, updated: LearnableItem) -> None:
        """Replace the pool entry with the same id."""
        for index, existing in enumerate(self._items):
            if existing.id == updated.id:
                self._items[index] = updated
                return
        raise NotFound(updated.id)

    def get_item(self, item_id: str) -> LearnableItem:
        """Look up a pool item by id."""
        for item in self._items:
            if item.id == item_id:
                return item
        raise NotFound(item_id)

    # =========================================================================
    # Metrics
    # =========================================================================

    def get_learning_metrics(self) -> LearningMetrics:
        """Overall and per-category mastery over the pool."""
        counts: dict[str, int] = defaultdict(int)
        mastered: dict[str, int] = defaultdict(int)
        for item in self._items:
            category = item.category or DEFAULT_CATEGORY
            counts[category] += 1
            if item.mastered:
                mastered[category] += 1

        return LearningMetrics(
            overall_mastery=self.scheduler.get_mastery_percentage(self._items),
            category_mastery={
                category: percentage(mastered[category], count)
                for category, count in counts.items()
            },
            total_items=len(self._items),
            mastered_items=sum(mastered.values()),
            current_difficulty=self.get_current_difficulty(),
        )
