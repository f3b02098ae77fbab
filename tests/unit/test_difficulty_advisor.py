"""
Unit tests for DifficultyAdvisor.

Tests:
- Recommended tier bands and clamping
- Tier filtering
- Weighted practice-set sampling and backfill

Run: pytest tests/unit/test_difficulty_advisor.py -v
"""

import random
from collections import Counter

import pytest

from src.core.exceptions import InvalidArgument
from src.scheduling.difficulty_advisor import DifficultyAdvisor


@pytest.fixture
def advisor(rng):
    return DifficultyAdvisor(rng=rng)


class TestRecommendedDifficulty:
    @pytest.mark.parametrize(
        "current,pct,expected",
        [
            (1, 95, 2),
            (2, 90, 3),
            (3, 100, 3),  # Clamped at the top
            (2, 89.9, 2),
            (2, 70, 2),
            (2, 50, 2),
            (2, 49, 1),
            (3, 10, 2),
            (1, 0, 1),  # Clamped at the bottom
        ],
    )
    def test_bands(self, advisor, current, pct, expected):
        assert advisor.calculate_recommended_difficulty(current, pct) == expected

    @pytest.mark.parametrize("current", [1, 2, 3])
    def test_result_within_one_step(self, advisor, current):
        for pct in range(0, 101, 5):
            result = advisor.calculate_recommended_difficulty(current, pct)
            assert 1 <= result <= 3
            assert abs(result - current) <= 1

    @pytest.mark.parametrize("current", [0, 4, "2", True])
    def test_invalid_tier(self, advisor, current):
        with pytest.raises(InvalidArgument):
            advisor.calculate_recommended_difficulty(current, 80)


class TestFilterContent:
    def test_include_easier(self, advisor, sample_pool):
        result = advisor.filter_content_by_difficulty(sample_pool, 2)
        assert len(result) == 10
        assert all(item.difficulty <= 2 for item in result)

    def test_exact_tier(self, advisor, sample_pool):
        result = advisor.filter_content_by_difficulty(sample_pool, 2, include_easier=False)
        assert [item.id for item in result] == [f"t2_{i}" for i in range(4)]

    def test_empty_pool(self, advisor):
        assert advisor.filter_content_by_difficulty([], 1) == []
        assert advisor.filter_content_by_difficulty(None, 1) == []


class TestMixedDifficultySet:
    def test_size_and_distinct(self, advisor, sample_pool):
        for tier in (1, 2, 3):
            for size in range(0, 15):
                result = advisor.generate_mixed_difficulty_set(sample_pool, tier, size)
                ids = [item.id for item in result]
                assert len(ids) == min(size, len(sample_pool))
                assert len(set(ids)) == len(ids)
                assert set(ids) <= {item.id for item in sample_pool}

    def test_tier_two_proportions(self, advisor, make_item):
        pool = (
            [make_item(f"a{i}", 1) for i in range(10)]
            + [make_item(f"b{i}", 2) for i in range(10)]
            + [make_item(f"c{i}", 3) for i in range(10)]
        )

        result = advisor.generate_mixed_difficulty_set(pool, 2, 10)

        tiers = Counter(item.difficulty for item in result)
        assert tiers == {1: 2, 2: 6, 3: 2}

    def test_tier_one_excludes_hard_items_when_enough_easy(self, advisor, make_item):
        pool = (
            [make_item(f"a{i}", 1) for i in range(10)]
            + [make_item(f"b{i}", 2) for i in range(10)]
            + [make_item(f"c{i}", 3) for i in range(10)]
        )

        result = advisor.generate_mixed_difficulty_set(pool, 1, 5)

        tiers = Counter(item.difficulty for item in result)
        assert tiers == {1: 4, 2: 1}

    def test_backfill_when_tier_is_short(self, advisor, make_item):
        """Tier 3 wants 6 of 10 but only 1 exists; the rest is backfilled."""
        pool = [make_item(f"a{i}", 1) for i in range(8)] + [make_item("c0", 3)]

        result = advisor.generate_mixed_difficulty_set(pool, 3, 10)

        assert len(result) == 9
        assert {item.id for item in result} == {item.id for item in pool}

    def test_rounding_overshoot_is_trimmed(self, advisor, make_item):
        """Set size 3 at tier 2: shares round to 1 + 2 + 1 = 4."""
        pool = [make_item(f"x{t}{i}", t) for t in (1, 2, 3) for i in range(5)]

        result = advisor.generate_mixed_difficulty_set(pool, 2, 3)

        assert len(result) == 3
        assert Counter(item.difficulty for item in result)[2] == 2

    def test_rounding_overshoot_keeps_recommended_share(self, advisor, make_item):
        """Set size 5 at tier 3: shares round to 1 + 2 + 3 = 6; tier 3 keeps all 3."""
        pool = [make_item(f"x{t}{i}", t) for t in (1, 2, 3) for i in range(5)]

        result = advisor.generate_mixed_difficulty_set(pool, 3, 5)

        tiers = Counter(item.difficulty for item in result)
        assert len(result) == 5
        assert tiers[3] == 3
        assert tiers[1] + tiers[2] == 2

    def test_empty_inputs(self, advisor, sample_pool):
        assert advisor.generate_mixed_difficulty_set([], 2, 5) == []
        assert advisor.generate_mixed_difficulty_set(sample_pool, 2, 0) == []

    def test_invalid_tier(self, advisor, sample_pool):
        with pytest.raises(InvalidArgument):
            advisor.generate_mixed_difficulty_set(sample_pool, 5, 3)

    def test_seeded_rng_is_reproducible(self, sample_pool):
        first = DifficultyAdvisor(rng=random.Random(7)).generate_mixed_difficulty_set(
            sample_pool, 2, 6
        )
        second = DifficultyAdvisor(rng=random.Random(7)).generate_mixed_difficulty_set(
            sample_pool, 2, 6
        )
        assert [i.id for i in first] == [i.id for i in second]


class TestRandomItems:
    def test_count_capped_by_pool(self, advisor, sample_pool):
        assert len(advisor.get_random_items(sample_pool, 50)) == len(sample_pool)
        assert advisor.get_random_items(sample_pool, 0) == []
        assert advisor.get_random_items([], 3) == []
