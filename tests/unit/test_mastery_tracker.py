"""
Unit tests for MasteryTracker.

Tests:
- Mastery label progression and precedence
- Distribution and level queries
- Streak calculation over UTC calendar days
- Progress report and session statistics

Run: pytest tests/unit/test_mastery_tracker.py -v
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.adaptive.mastery_tracker import MasteryTracker
from src.core.exceptions import InvalidArgument
from src.core.models import LearningStats, MasteryLevel, Session


@pytest.fixture
def tracker():
    return MasteryTracker()


def make_session(start, duration=10.0, score=0.0, items_studied=0):
    return Session(
        session_id=f"session_{int(start.timestamp() * 1000)}",
        start_time=start,
        end_time=start + timedelta(minutes=duration),
        duration=duration,
        score=score,
        items_studied=items_studied,
    )


class TestUpdateMasteryLevel:
    def test_first_attempt_is_introduced(self, tracker, make_item, now):
        result = tracker.update_mastery_level(make_item("w1"), 5, now=now)

        assert result.practice_count == 1
        assert result.correct_count == 1
        assert result.mastery_level == MasteryLevel.INTRODUCED
        assert result.last_practiced == now
        assert result.last_performance == 5

    def test_rating_three_is_not_correct(self, tracker, make_item, now):
        result = tracker.update_mastery_level(make_item("w1"), 3, now=now)

        assert result.practice_count == 1
        assert result.correct_count == 0

    def test_practicing_after_three_good_attempts(self, tracker, make_item, now):
        item = make_item("w1")
        for _ in range(3):
            item = tracker.update_mastery_level(item, 4, now=now)

        assert item.mastery_level == MasteryLevel.PRACTICING
        assert item.mastered is False

    def test_mastered_after_ten_attempts_at_eighty_percent(self, tracker, make_item, now):
        item = make_item("w1", practice_count=9, correct_count=7)

        result = tracker.update_mastery_level(item, 5, now=now)

        # 8/10 = 80%
        assert result.mastery_level == MasteryLevel.MASTERED
        assert result.mastered is True

    def test_low_success_stays_introduced(self, tracker, make_item, now):
        item = make_item("w1", practice_count=9, correct_count=4)

        result = tracker.update_mastery_level(item, 1, now=now)

        # 4/10 = 40%
        assert result.mastery_level == MasteryLevel.INTRODUCED

    def test_mastered_is_never_revoked(self, tracker, make_item, now):
        item = make_item(
            "w1",
            practice_count=10,
            correct_count=8,
            mastered=True,
            mastery_level=MasteryLevel.MASTERED,
        )
        for _ in range(5):
            item = tracker.update_mastery_level(item, 0, now=now)

        assert item.mastered is True
        assert item.mastery_level == MasteryLevel.MASTERED
        assert item.correct_count == 8
        assert item.practice_count == 15

    def test_correct_never_exceeds_practice(self, tracker, make_item, now):
        item = make_item("w1")
        for rating in [5, 0, 4, 4, 2, 5, 5, 3, 1, 5, 4]:
            item = tracker.update_mastery_level(item, rating, now=now)
            assert 0 <= item.correct_count <= item.practice_count

    def test_invalid_rating(self, tracker, make_item):
        with pytest.raises(InvalidArgument):
            tracker.update_mastery_level(make_item("w1"), 9)


class TestDistribution:
    def test_empty(self, tracker):
        assert tracker.get_mastery_distribution([]) == {
            "introduced": 0,
            "practicing": 0,
            "mastered": 0,
        }

    def test_percentages(self, tracker, make_item):
        items = [
            make_item("a", mastery_level=MasteryLevel.MASTERED, mastered=True),
            make_item("b", mastery_level=MasteryLevel.PRACTICING),
            make_item("c", mastery_level=MasteryLevel.PRACTICING),
            make_item("d"),  # Unlabelled counts as introduced
        ]

        assert tracker.get_mastery_distribution(items) == {
            "introduced": 25,
            "practicing": 50,
            "mastered": 25,
        }

    def test_items_by_level(self, tracker, make_item):
        items = [make_item("a", mastery_level="practicing"), make_item("b")]

        practicing = tracker.get_items_by_mastery_level(items, MasteryLevel.PRACTICING)
        introduced = tracker.get_items_by_mastery_level(items, MasteryLevel.INTRODUCED)

        assert [i.id for i in practicing] == ["a"]
        assert [i.id for i in introduced] == ["b"]

    def test_items_needing_review(self, tracker, make_item, now):
        stale = make_item(
            "stale", mastery_level="practicing", last_practiced=now - timedelta(days=4)
        )
        fresh = make_item(
            "fresh", mastery_level="introduced", last_practiced=now - timedelta(days=1)
        )
        done = make_item(
            "done",
            mastery_level="mastered",
            mastered=True,
            last_practiced=now - timedelta(days=30),
        )
        untouched = make_item("untouched")

        result = tracker.get_items_needing_review([stale, fresh, done, untouched], now=now)

        assert [i.id for i in result] == ["stale"]


class TestStreak:
    today = date(2026, 3, 10)

    def at(self, day, hour=12):
        return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)

    def test_no_sessions(self, tracker):
        streak = tracker.calculate_streak([], today=self.today)
        assert streak.current_streak == 0
        assert streak.last_active_date is None

    def test_three_consecutive_days(self, tracker):
        sessions = [make_session(self.at(self.today - timedelta(days=d))) for d in range(3)]

        streak = tracker.calculate_streak(sessions, today=self.today)

        assert streak.current_streak == 3
        assert streak.longest_streak == 3
        assert streak.last_active_date == self.today

    def test_streak_ending_yesterday_still_counts(self, tracker):
        sessions = [make_session(self.at(self.today - timedelta(days=d))) for d in (1, 2)]

        assert tracker.calculate_streak(sessions, today=self.today).current_streak == 2

    def test_gap_breaks_streak(self, tracker):
        sessions = [make_session(self.at(self.today - timedelta(days=d))) for d in (2, 3, 4)]

        streak = tracker.calculate_streak(sessions, today=self.today)

        assert streak.current_streak == 0
        assert streak.last_active_date == self.today - timedelta(days=2)

    def test_multiple_sessions_same_day_count_once(self, tracker):
        sessions = [
            make_session(self.at(self.today, 8)),
            make_session(self.at(self.today, 20)),
            make_session(self.at(self.today - timedelta(days=1), 9)),
        ]

        assert tracker.calculate_streak(sessions, today=self.today).current_streak == 2

    def test_offset_timestamps_use_utc_day(self, tracker):
        # 23:30 at -05:00 on the 9th is 04:30 UTC on the 10th
        late_evening = datetime(2026, 3, 9, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

        streak = tracker.calculate_streak([make_session(late_evening)], today=date(2026, 3, 11))

        assert streak.current_streak == 1
        assert streak.last_active_date == date(2026, 3, 10)

    def test_nepal_offset_early_morning_counts_previous_utc_day(self, tracker):
        # 05:00 at +05:45 on the 10th is 23:15 UTC on the 9th
        nepal = timezone(timedelta(hours=5, minutes=45))
        sessions = [
            make_session(datetime(2026, 3, 10, 5, 0, tzinfo=nepal)),
            make_session(self.at(self.today)),
        ]

        assert tracker.calculate_streak(sessions, today=self.today).current_streak == 2

    def test_older_break_does_not_count(self, tracker):
        days = (0, 1, 3, 4, 5)
        sessions = [make_session(self.at(self.today - timedelta(days=d))) for d in days]

        assert tracker.calculate_streak(sessions, today=self.today).current_streak == 2


class TestProgressReport:
    def test_empty_items_gives_zeroed_report(self, tracker, now):
        report = tracker.generate_progress_report([], [make_session(now)])

        assert report.mastery_distribution == {"introduced": 0, "practicing": 0, "mastered": 0}
        assert report.total_learning_time == 0
        assert report.recent_performance == []

    def test_report_contents(self, tracker, make_item, now):
        items = [
            make_item("a", category="colors", mastered=True, mastery_level="mastered"),
            make_item("b", category="colors"),
            make_item("c", category="animals"),
        ]
        sessions = [
            make_session(now - timedelta(days=1), duration=10, score=70, items_studied=4),
            make_session(now, duration=20, score=90, items_studied=6),
        ]

        report = tracker.generate_progress_report(items, sessions, today=now.date())

        assert report.total_learning_time == 30
        assert report.average_session_time == 15
        assert report.items_per_category == {"colors": 2, "animals": 1}
        assert report.mastery_per_category == {"colors": 50, "animals": 0}
        assert report.streak.current_streak == 2
        # Most recent first
        assert [s.score for s in report.recent_performance] == [90, 70]
        assert report.to_dict()["recentPerformance"][0]["itemsStudied"] == 6

    def test_recent_performance_capped_at_ten(self, tracker, make_item, now):
        sessions = [make_session(now - timedelta(hours=h)) for h in range(15)]

        report = tracker.generate_progress_report([make_item("a")], sessions)

        assert len(report.recent_performance) == 10
        assert report.recent_performance[0].date == now


class TestSessionStatistics:
    def test_empty(self, tracker):
        stats = tracker.get_session_statistics([])
        assert stats.total_sessions == 0
        assert stats.average_session_duration == 0
        assert stats.sessions_per_day == 0

    def test_aggregates(self, tracker, now):
        sessions = [
            make_session(now, duration=10),
            make_session(now + timedelta(hours=1), duration=30),
            make_session(now - timedelta(days=1), duration=20),
        ]
        learning_stats = LearningStats(learning_streak=2, total_learning_time=60)

        stats = tracker.get_session_statistics(sessions, learning_stats)

        assert stats.total_sessions == 3
        assert stats.average_session_duration == 20
        assert stats.sessions_per_day == 1.5
        assert stats.current_streak == 2
        assert stats.total_learning_time == 60

    def test_sessions_per_day_uses_utc_days(self, tracker):
        minus_five = timezone(timedelta(hours=-5))
        sessions = [
            # Both fall on 2026-03-10 in UTC
            make_session(datetime(2026, 3, 9, 23, 0, tzinfo=minus_five)),
            make_session(datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)),
        ]

        assert tracker.get_session_statistics(sessions).sessions_per_day == 2
