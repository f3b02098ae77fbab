"""
Configuration settings for the NepaliJets learning core.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Spaced Repetition (SM-2)
    # ========================================
    srs_initial_ease_factor: float = Field(
        default=2.5,
        description="Ease factor assigned to an item on its first review",
    )
    srs_minimum_ease_factor: float = Field(
        default=1.3,
        description="Floor for the ease factor",
    )
    srs_first_interval_days: int = Field(
        default=1,
        description="Days until review after the first success or any failure",
    )
    srs_second_interval_days: int = Field(
        default=3,
        description="Days until review after the second consecutive success",
    )
    srs_mastery_repetitions: int = Field(
        default=8,
        description="Consecutive successful reviews that mark an item mastered",
    )
    srs_passing_grade: int = Field(
        default=3,
        description="Lowest rating (0-5) treated as a successful recall",
    )

    # ========================================
    # Mastery Tracking
    # ========================================
    mastery_correct_rating: int = Field(
        default=4,
        description="Lowest rating (0-5) counted as a correct attempt",
    )
    mastery_mastered_min_practice: int = Field(
        default=10,
        description="Attempts required before an item can be labelled mastered",
    )
    mastery_mastered_success_rate: float = Field(
        default=80.0,
        description="Success rate (%) required for the mastered label",
    )
    mastery_practicing_min_practice: int = Field(
        default=3,
        description="Attempts required before an item can be labelled practicing",
    )
    mastery_practicing_success_rate: float = Field(
        default=60.0,
        description="Success rate (%) required for the practicing label",
    )
    mastery_review_stale_days: int = Field(
        default=3,
        description="Days without practice before an unmastered item needs review",
    )

    # ========================================
    # Adaptive Path
    # ========================================
    path_default_length: int = Field(
        default=10,
        description="Default number of items in a personalized path",
    )
    path_fallback_rating: int = Field(
        default=3,
        description="Rating applied to completed items reported without one",
    )

    # ========================================
    # Storage & Content
    # ========================================
    progress_db_path: Path = Field(
        default=Path.home() / ".nepalijets" / "progress.db",
        description="SQLite database holding per-learner progress",
    )
    content_dir: Path = Field(
        default=Path("content"),
        description="Directory containing vocabulary catalog JSON files",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Log level for the CLI stderr sink",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def get_scheduler_config(self) -> dict[str, Any]:
        """Get SM-2 scheduler configuration as a dictionary."""
        return {
            "initial_ease_factor": self.srs_initial_ease_factor,
            "minimum_ease_factor": self.srs_minimum_ease_factor,
            "first_interval": self.srs_first_interval_days,
            "second_interval": self.srs_second_interval_days,
            "mastery_repetitions": self.srs_mastery_repetitions,
            "passing_grade": self.srs_passing_grade,
        }

    def get_mastery_config(self) -> dict[str, Any]:
        """Get mastery tracker thresholds as a dictionary."""
        return {
            "correct_rating": self.mastery_correct_rating,
            "mastered_min_practice": self.mastery_mastered_min_practice,
            "mastered_success_rate": self.mastery_mastered_success_rate,
            "practicing_min_practice": self.mastery_practicing_min_practice,
            "practicing_success_rate": self.mastery_practicing_success_rate,
            "review_stale_days": self.mastery_review_stale_days,
        }

    def get_path_config(self) -> dict[str, Any]:
        """Get adaptive path configuration as a dictionary."""
        return {
            "default_length": self.path_default_length,
            "fallback_rating": self.path_fallback_rating,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
