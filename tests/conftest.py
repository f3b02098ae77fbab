"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import random
import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.models import LearnableItem  # noqa: E402

# Fixed reference time so due/streak checks are deterministic
NOW = datetime(2026, 3, 10, 9, 0, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite + catalog files)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed reference time."""
    return NOW


@pytest.fixture
def rng():
    """Seeded random source for reproducible sampling."""
    return random.Random(1234)


@pytest.fixture
def make_item():
    """Factory for learnable items."""

    def _make(item_id: str, difficulty: int = 1, category: str = "colors", **fields):
        return LearnableItem(id=item_id, category=category, difficulty=difficulty, **fields)

    return _make


@pytest.fixture
def sample_pool(make_item):
    """Twelve new items: six tier-1, four tier-2, two tier-3."""
    return (
        [make_item(f"t1_{i}", 1, "colors") for i in range(6)]
        + [make_item(f"t2_{i}", 2, "animals") for i in range(4)]
        + [make_item(f"t3_{i}", 3, "greetings") for i in range(2)]
    )


@pytest.fixture
def sample_word():
    """Provide a sample catalog record for testing."""
    return {
        "id": "word_1",
        "nepaliWord": "नमस्ते",
        "englishTranslation": "Hello",
        "pronunciation": "namaste",
        "category": "greetings",
        "difficulty": 1,
    }


@pytest.fixture
def content_dir(tmp_path, sample_word):
    """Catalog directory with a small two-tier word list."""
    directory = tmp_path / "content"
    directory.mkdir()
    records = [
        sample_word,
        {"id": "word_4", "nepaliWord": "रातो", "englishTranslation": "Red",
         "category": "colors", "difficulty": 1},
        {"id": "word_14", "nepaliWord": "कुकुर", "englishTranslation": "Dog",
         "category": "animals", "difficulty": 2},
    ]
    (directory / "unit1.json").write_text(
        json.dumps({"items": records}, ensure_ascii=False), encoding="utf-8"
    )
    return directory
