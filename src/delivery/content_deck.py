"""
Content Deck: Vocabulary Catalog Loader.

Loads learnable items from JSON catalog files (a list of records, or an
object with an ``items`` list) and overlays saved progress onto them.

Features:
- Indexes items by category and difficulty tier
- Skips malformed records without aborting the load
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path

from loguru import logger

from src.core.exceptions import InvalidArgument, NotFound
from src.core.models import LearnableItem


class ContentDeck:
    """
    Manages the vocabulary catalog.

    Catalog items only carry content (id, category, difficulty, text).
    Scheduling and mastery state comes from the progress store and is
    merged in with ``merge_progress``.
    """

    DEFAULT_CONTENT_DIR = Path("content")
    FILE_PATTERN = "*.json"

    def __init__(self, content_dir: Path | None = None):
        """
        Initialize the deck.

        Args:
            content_dir: Directory containing catalog JSON files (default: content/)
        """
        self.content_dir = content_dir or self.DEFAULT_CONTENT_DIR

        self._items: dict[str, LearnableItem] = {}  # id -> item
        self._by_category: dict[str, list[str]] = {}
        self._by_difficulty: dict[int, list[str]] = {}

        self._files_loaded: list[Path] = []
        self._records_skipped: int = 0

    @property
    def total_items(self) -> int:
        return len(self._items)

    @property
    def items(self) -> list[LearnableItem]:
        """All catalog items in load order."""
        return list(self._items.values())

    @property
    def categories(self) -> list[str]:
        return sorted(self._by_category.keys())

    @property
    def records_skipped(self) -> int:
        return self._records_skipped

    def load(self) -> int:
        """
        Load items from all catalog files in the content directory.

        Returns:
            Number of items loaded
        """
        self._items.clear()
        self._by_category.clear()
        self._by_difficulty.clear()
        self._files_loaded.clear()
        self._records_skipped = 0

        json_files = sorted(self.content_dir.glob(self.FILE_PATTERN))
        if not json_files:
            logger.warning(f"No catalog files found in {self.content_dir}")
            return 0

        for json_path in json_files:
            self._load_file(json_path)

        logger.info(
            f"ContentDeck loaded: {self.total_items} items from {len(self._files_loaded)} files "
            f"({self._records_skipped} skipped)"
        )
        return self.total_items

    def _load_file(self, path: Path) -> int:
        """Load items from one catalog file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load {path}: {e}")
            return 0

        records = data.get("items") if isinstance(data, dict) else data
        if not isinstance(records, list):
            logger.error(f"Failed to load {path}: expected a list of items")
            return 0

        loaded = 0

        for record in records:
            try:
                self.add(LearnableItem.from_dict(record))
                loaded += 1
            except InvalidArgument as e:
                self._records_skipped += 1
                logger.warning(f"Skipping record in {path.name}: {e}")

        self._files_loaded.append(path)
        logger.debug(f"Loaded {loaded} items from {path.name}")
        return loaded

    def add(self, item: LearnableItem) -> None:
        """Add or replace a catalog item."""
        if item.id in self._items:
            self._unindex(self._items[item.id])
        self._items[item.id] = item
        self._by_category.setdefault(item.category, []).append(item.id)
        self._by_difficulty.setdefault(item.difficulty, []).append(item.id)

    def _unindex(self, item: LearnableItem) -> None:
        self._by_category[item.category].remove(item.id)
        self._by_difficulty[item.difficulty].remove(item.id)

    def get(self, item_id: str) -> LearnableItem:
        """Get an item by id."""
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFound(item_id) from None

    def get_by_ids(self, item_ids: Iterable[str]) -> list[LearnableItem]:
        """Get items by id, skipping unknown ids."""
        return [self._items[i] for i in item_ids if i in self._items]

    def by_category(self, category: str) -> list[LearnableItem]:
        return self.get_by_ids(self._by_category.get(category, []))

    def by_difficulty(self, difficulty: int) -> list[LearnableItem]:
        return self.get_by_ids(self._by_difficulty.get(difficulty, []))

    def merge_progress(self, progress: Iterable[LearnableItem]) -> list[LearnableItem]:
        """
        Overlay saved scheduling and mastery state onto catalog items.

        Content fields (category, difficulty, text) come from the catalog;
        progress for ids no longer in the catalog is dropped.

        Returns:
            Catalog items with progress applied, in catalog order
        """
        saved = {item.id: item for item in progress}
        merged: list[LearnableItem] = []

        for item in self._items.values():
            state = saved.get(item.id)
            if state is None:
                merged.append(item)
                continue
            merged.append(
                replace(
                    item,
                    repetition_number=state.repetition_number,
                    ease_factor=state.ease_factor,
                    interval=state.interval,
                    next_review_date=state.next_review_date,
                    mastered=state.mastered,
                    mastery_level=state.mastery_level,
                    practice_count=state.practice_count,
                    correct_count=state.correct_count,
                    last_practiced=state.last_practiced,
                    last_performance=state.last_performance,
                )
            )

        orphaned = len(set(saved) - set(self._items))
        if orphaned:
            logger.debug(f"Dropped progress for {orphaned} items missing from the catalog")

        return merged
