"""
SQLite Progress Store.

Provides local persistence for one learner's:
- Per-item scheduling and mastery state
- Practice session history
- Streak and learning-time bookkeeping

Database location: ~/.nepalijets/progress.db (see Settings.progress_db_path)
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from src.core.models import (
    LearnableItem,
    LearningStats,
    Session,
    UserProgressSnapshot,
    format_timestamp,
    parse_timestamp,
)


class ProgressStore:
    """
    SQLite-backed progress persistence.

    Handles:
    - Item state (SM-2 fields, mastery counters and label)
    - Session history
    - Learner stats (streak, last session, totals)

    One database file per learner. Callers serialize access.
    """

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the progress store.

        Args:
            db_path: Custom database path (defaults to Settings.progress_db_path)
        """
        if db_path is None:
            from config import get_settings

            db_path = get_settings().progress_db_path
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.info(f"ProgressStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS item_state (
                item_id TEXT PRIMARY KEY,
                category TEXT NOT NULL,
                difficulty INTEGER NOT NULL,
                repetition_number INTEGER,
                ease_factor REAL,
                interval_days INTEGER,
                next_review TEXT,
                mastered INTEGER DEFAULT 0,
                mastery_level TEXT,
                practice_count INTEGER DEFAULT 0,
                correct_count INTEGER DEFAULT 0,
                last_practiced TEXT,
                last_performance INTEGER
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS session_history (
                session_id TEXT PRIMARY KEY,
                start_time TEXT NOT NULL,
                end_time TEXT,
                duration REAL DEFAULT 0.0,
                score REAL DEFAULT 0.0,
                items_studied INTEGER DEFAULT 0,
                activities TEXT,
                metrics TEXT
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS learner_stats (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                user_id TEXT,
                learning_streak INTEGER DEFAULT 0,
                last_session_date TEXT,
                total_learning_time REAL DEFAULT 0.0,
                total_words_learned INTEGER DEFAULT 0
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_item_state_next_review
            ON item_state(next_review)
        """)

        self.conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # =========================================================================
    # Item State Operations
    # =========================================================================

    def save_item(self, item: LearnableItem) -> None:
        """Save or update one item's state."""
        self.save_items([item])

    def save_items(self, items: Iterable[LearnableItem]) -> int:
        """
        Save or update state for many items in one transaction.

        Returns:
            Number of items written
        """
        rows = [
            (
                item.id,
                item.category,
                item.difficulty,
                item.repetition_number,
                item.ease_factor,
                item.interval,
                format_timestamp(item.next_review_date),
                int(item.mastered),
                item.mastery_level.value if item.mastery_level else None,
                item.practice_count,
                item.correct_count,
                format_timestamp(item.last_practiced),
                item.last_performance,
            )
            for item in items
        ]
        if not rows:
            return 0

        self.conn.executemany(
            """
            INSERT INTO item_state (
                item_id, category, difficulty, repetition_number, ease_factor,
                interval_days, next_review, mastered, mastery_level,
                practice_count, correct_count, last_practiced, last_performance
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(item_id) DO UPDATE SET
                category = excluded.category,
                difficulty = excluded.difficulty,
                repetition_number = excluded.repetition_number,
                ease_factor = excluded.ease_factor,
                interval_days = excluded.interval_days,
                next_review = excluded.next_review,
                mastered = excluded.mastered,
                mastery_level = excluded.mastery_level,
                practice_count = excluded.practice_count,
                correct_count = excluded.correct_count,
                last_practiced = excluded.last_practiced,
                last_performance = excluded.last_performance
        """,
            rows,
        )
        self.conn.commit()
        logger.debug(f"Saved state for {len(rows)} items")
        return len(rows)

    def get_item_state(self, item_id: str) -> LearnableItem | None:
        """Get saved state for an item (None if never saved)."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM item_state WHERE item_id = ?", (item_id,))
        row = cursor.fetchone()
        return self._row_to_item(row) if row is not None else None

    def load_items(self) -> list[LearnableItem]:
        """Load all saved item states."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM item_state ORDER BY item_id")
        return [self._row_to_item(row) for row in cursor.fetchall()]

    def count_due_items(self, now_iso: str) -> int:
        """Count saved items due at or before the given ISO timestamp."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT COUNT(*) AS cnt FROM item_state WHERE next_review IS NULL OR next_review <= ?",
            (now_iso,),
        )
        return cursor.fetchone()["cnt"]

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> LearnableItem:
        return LearnableItem(
            id=row["item_id"],
            category=row["category"],
            difficulty=row["difficulty"],
            repetition_number=row["repetition_number"],
            ease_factor=row["ease_factor"],
            interval=row["interval_days"],
            next_review_date=parse_timestamp(row["next_review"]),
            mastered=bool(row["mastered"]),
            mastery_level=row["mastery_level"],
            practice_count=row["practice_count"],
            correct_count=row["correct_count"],
            last_practiced=parse_timestamp(row["last_practiced"]),
            last_performance=row["last_performance"],
        )

    # =========================================================================
    # Session Operations
    # =========================================================================

    def save_session(self, session: Session) -> None:
        """Save or update a session record."""
        self.conn.execute(
            """
            INSERT INTO session_history (
                session_id, start_time, end_time, duration, score,
                items_studied, activities, metrics
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(session_id) DO UPDATE SET
                end_time = excluded.end_time,
                duration = excluded.duration,
                score = excluded.score,
                items_studied = excluded.items_studied,
                activities = excluded.activities,
                metrics = excluded.metrics
        """,
            (
                session.session_id,
                format_timestamp(session.start_time),
                format_timestamp(session.end_time),
                session.duration,
                session.score,
                session.items_studied,
                json.dumps(session.activities),
                json.dumps(session.metrics),
            ),
        )
        self.conn.commit()

    def get_session_history(self, limit: int | None = None) -> list[Session]:
        """
        Get saved sessions, most recent first.

        Args:
            limit: Maximum sessions to return (all if None)
        """
        cursor = self.conn.cursor()
        query = "SELECT * FROM session_history ORDER BY start_time DESC"
        if limit is not None:
            cursor.execute(query + " LIMIT ?", (limit,))
        else:
            cursor.execute(query)

        return [
            Session(
                session_id=row["session_id"],
                start_time=parse_timestamp(row["start_time"]),
                end_time=parse_timestamp(row["end_time"]),
                duration=row["duration"] or 0.0,
                score=row["score"] or 0.0,
                items_studied=row["items_studied"] or 0,
                activities=json.loads(row["activities"] or "[]"),
                metrics=json.loads(row["metrics"] or "{}"),
            )
            for row in cursor.fetchall()
        ]

    # =========================================================================
    # Learner Stats
    # =========================================================================

    def get_stats(self) -> LearningStats:
        """Get streak and time bookkeeping (zeroed if never saved)."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM learner_stats WHERE id = 1")
        row = cursor.fetchone()
        if row is None:
            return LearningStats()

        return LearningStats(
            learning_streak=row["learning_streak"] or 0,
            last_session_date=parse_timestamp(row["last_session_date"]),
            total_learning_time=row["total_learning_time"] or 0.0,
            total_words_learned=row["total_words_learned"] or 0,
        )

    def save_stats(self, stats: LearningStats, user_id: str | None = None) -> None:
        """Save streak and time bookkeeping."""
        self.conn.execute(
            """
            INSERT INTO learner_stats (
                id, user_id, learning_streak, last_session_date,
                total_learning_time, total_words_learned
            ) VALUES (1, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                user_id = COALESCE(excluded.user_id, learner_stats.user_id),
                learning_streak = excluded.learning_streak,
                last_session_date = excluded.last_session_date,
                total_learning_time = excluded.total_learning_time,
                total_words_learned = excluded.total_words_learned
        """,
            (
                user_id,
                stats.learning_streak,
                format_timestamp(stats.last_session_date),
                stats.total_learning_time,
                stats.total_words_learned,
            ),
        )
        self.conn.commit()

    def _get_user_id(self) -> str:
        cursor = self.conn.cursor()
        cursor.execute("SELECT user_id FROM learner_stats WHERE id = 1")
        row = cursor.fetchone()
        return (row["user_id"] if row else None) or ""

    # =========================================================================
    # Snapshots
    # =========================================================================

    def load_snapshot(self) -> UserProgressSnapshot:
        """Load everything saved for the learner."""
        return UserProgressSnapshot(
            user_id=self._get_user_id(),
            items=self.load_items(),
            sessions=list(reversed(self.get_session_history())),
            stats=self.get_stats(),
        )

    def save_snapshot(self, snapshot: UserProgressSnapshot) -> None:
        """Save item states, sessions and stats from a snapshot."""
        self.save_items(snapshot.items)
        for session in snapshot.sessions:
            self.save_session(session)
        self.save_stats(snapshot.stats, user_id=snapshot.user_id or None)
        logger.info(
            f"Snapshot saved: {len(snapshot.items)} items, {len(snapshot.sessions)} sessions"
        )
