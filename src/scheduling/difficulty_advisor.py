"""
Difficulty Advisor.

Adjusts content difficulty to learner performance:
- Recommends a difficulty tier (1-3) from a performance percentage
- Filters a content pool by tier
- Samples difficulty-weighted practice sets
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from src.core.exceptions import InvalidArgument
from src.core.models import DIFFICULTY_LEVELS, LearnableItem
from src.core.utils import round_half_up

MIN_DIFFICULTY = DIFFICULTY_LEVELS[0]
MAX_DIFFICULTY = DIFFICULTY_LEVELS[-1]

# Share of a practice set drawn from each tier, keyed by recommended tier
DIFFICULTY_DISTRIBUTIONS: dict[int, dict[int, float]] = {
    1: {1: 0.8, 2: 0.2, 3: 0.0},
    2: {1: 0.2, 2: 0.6, 3: 0.2},
    3: {1: 0.1, 2: 0.3, 3: 0.6},
}


@dataclass
class DifficultyThresholds:
    """Performance bands (percent correct) for difficulty adjustment."""

    excellent: float = 90.0  # Step up
    good: float = 70.0  # Hold
    fair: float = 50.0  # Hold, more practice
    # Below fair: step down


def _check_tier(difficulty: int, name: str = "difficulty") -> int:
    if isinstance(difficulty, bool) or difficulty not in DIFFICULTY_LEVELS:
        raise InvalidArgument(f"{name} must be one of {DIFFICULTY_LEVELS}, got {difficulty!r}")
    return difficulty


class DifficultyAdvisor:
    """
    Recommends difficulty tiers and builds difficulty-balanced item sets.

    Randomness comes from an injected ``random.Random`` so practice sets
    can be reproduced in tests.
    """

    def __init__(
        self,
        thresholds: DifficultyThresholds | None = None,
        rng: random.Random | None = None,
    ):
        self.thresholds = thresholds or DifficultyThresholds()
        self.rng = rng or random.Random()

    def calculate_recommended_difficulty(
        self,
        current_difficulty: int,
        performance_percentage: float,
    ) -> int:
        """
        Recommend a difficulty tier from recent performance.

        Args:
            current_difficulty: Current tier (1-3)
            performance_percentage: Percent correct (0-100)

        Returns:
            Recommended tier (1-3)
        """
        current_difficulty = _check_tier(current_difficulty, "current_difficulty")

        if performance_percentage >= self.thresholds.excellent:
            return min(MAX_DIFFICULTY, current_difficulty + 1)
        elif performance_percentage >= self.thresholds.good:
            return current_difficulty
        elif performance_percentage >= self.thresholds.fair:
            return current_difficulty
        else:
            return max(MIN_DIFFICULTY, current_difficulty - 1)

    def filter_content_by_difficulty(
        self,
        items: Sequence[LearnableItem] | None,
        recommended_difficulty: int,
        include_easier: bool = True,
    ) -> list[LearnableItem]:
        """
        Filter items by tier.

        Args:
            items: Content pool
            recommended_difficulty: Target tier
            include_easier: Keep lower tiers too (otherwise exact match only)
        """
        if not items:
            return []
        if include_easier:
            return [item for item in items if item.difficulty <= recommended_difficulty]
        return [item for item in items if item.difficulty == recommended_difficulty]

    def generate_mixed_difficulty_set(
        self,
        items: Sequence[LearnableItem] | None,
        recommended_difficulty: int,
        set_size: int,
    ) -> list[LearnableItem]:
        """
        Sample a practice set weighted toward the recommended tier.

        Each tier contributes about ``round(set_size * share)`` items drawn
        without replacement. Tiers with too few items are backfilled from the
        rest of the pool until ``set_size`` is reached or the pool runs out.

        Returns:
            At most ``set_size`` distinct items (``min(set_size, len(items))``)
        """
        recommended_difficulty = _check_tier(recommended_difficulty, "recommended_difficulty")
        if not items or set_size <= 0:
            return []

        mixed: list[LearnableItem] = []

        for level, count in self._tier_counts(recommended_difficulty, set_size).items():
            level_items = [item for item in items if item.difficulty == level]
            mixed.extend(self.get_random_items(level_items, count))

        if len(mixed) < set_size:
            chosen = {item.id for item in mixed}
            remaining = [item for item in items if item.id not in chosen]
            backfill = self.get_random_items(remaining, set_size - len(mixed))
            mixed.extend(backfill)
            logger.debug(
                f"Backfilled {len(backfill)} items for tier {recommended_difficulty} set"
            )

        return mixed

    @staticmethod
    def _tier_counts(recommended_difficulty: int, set_size: int) -> dict[int, int]:
        """
        Items to draw from each tier.

        Per-tier rounding can overshoot ``set_size``; the surplus comes off
        the tier rounded up the furthest (easier tier on ties).
        """
        distribution = DIFFICULTY_DISTRIBUTIONS[recommended_difficulty]
        counts = {level: round_half_up(set_size * share) for level, share in distribution.items()}

        while sum(counts.values()) > set_size:
            level = max(counts, key=lambda lvl: counts[lvl] - set_size * distribution[lvl])
            counts[level] -= 1

        return counts

    def get_random_items(
        self,
        items: Sequence[LearnableItem] | None,
        count: int,
    ) -> list[LearnableItem]:
        """Uniform sample without replacement (fewer if the pool is smaller)."""
        if not items or count <= 0:
            return []
        return self.rng.sample(list(items), min(count, len(items)))
