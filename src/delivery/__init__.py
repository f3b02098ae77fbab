"""
Delivery: catalog, persistence and terminal interface.

A portable, server-free front end for the adaptive learning core.

Components:
- ContentDeck: JSON vocabulary catalog loading
- ProgressStore: SQLite persistence of item state, sessions and streaks
- cli: Typer/Rich terminal commands (path, review, report, metrics)
"""

from .content_deck import ContentDeck
from .progress_store import ProgressStore

__all__ = [
    "ContentDeck",
    "ProgressStore",
]
