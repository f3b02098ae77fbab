"""
Practice Session Tracker.

Opens and closes practice sessions and keeps the learner's streak and
time totals current:
- Streak bookkeeping on session start (yesterday = +1, today = same, gap = 1)
- Activity log for the open session
- Duration and total learning time on session end
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any

from loguru import logger

from src.core.models import LearningStats, Session, utc_date, utc_now


class SessionTracker:
    """
    Tracks the open practice session for one learner.

    ``stats`` and ``history`` are the learner's persisted bookkeeping; the
    caller saves them after each start/end.
    """

    def __init__(
        self,
        stats: LearningStats | None = None,
        history: list[Session] | None = None,
    ):
        self.stats = stats or LearningStats()
        self.history: list[Session] = list(history or [])
        self.current_session: Session | None = None

    def start_session(self, now: datetime | None = None) -> Session:
        """
        Open a new session and update the streak.

        Returns:
            The new open Session
        """
        now = now or utc_now()
        streak = self.stats.learning_streak
        last = self.stats.last_session_date

        if last is None:
            streak = 1  # First session ever
        else:
            days_since = (utc_date(now) - utc_date(last)).days
            if days_since == 1:
                streak += 1
            elif days_since != 0:
                streak = 1
            # Same day: keep the current streak

        self.stats = replace(self.stats, learning_streak=streak, last_session_date=now)
        self.current_session = Session(
            session_id=f"session_{int(now.timestamp() * 1000)}",
            start_time=now,
        )

        logger.info(f"Session {self.current_session.session_id} started (streak {streak})")
        return self.current_session

    def record_activity(self, activity: dict[str, Any], now: datetime | None = None) -> Session:
        """Append an activity to the open session, opening one if needed."""
        if self.current_session is None:
            self.start_session(now)
        self.current_session.activities.append(dict(activity))
        return self.current_session

    def end_session(
        self,
        now: datetime | None = None,
        score: float | None = None,
    ) -> Session | None:
        """
        Close the open session.

        Args:
            now: End time (defaults to current UTC time)
            score: Optional session score to record

        Returns:
            The completed Session, or None if no session was open
        """
        if self.current_session is None:
            return None

        now = now or utc_now()
        duration = (now - self.current_session.start_time).total_seconds() / 60

        completed = replace(
            self.current_session,
            end_time=now,
            duration=duration,
            items_studied=len(self.current_session.activities),
            score=score if score is not None else self.current_session.score,
        )

        self.history.append(completed)
        self.stats = replace(
            self.stats,
            total_learning_time=(self.stats.total_learning_time or 0) + duration,
        )
        self.current_session = None

        logger.info(
            f"Session {completed.session_id} ended: {completed.items_studied} activities, "
            f"{duration:.1f} min"
        )
        return completed
