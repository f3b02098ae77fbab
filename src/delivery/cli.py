"""
NepaliJets Learning CLI.

A Rich terminal interface over the adaptive learning core.

Commands:
- jets path      - Show the personalized practice path
- jets review    - Record ratings for practiced items
- jets report    - Show the progress report
- jets metrics   - Show mastery metrics for the item pool
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from src.adaptive.mastery_tracker import MasteryConfig, MasteryTracker
from src.adaptive.path_generator import PathConfig, PathGenerator
from src.adaptive.session_tracker import SessionTracker
from src.core.exceptions import InvalidArgument, LearningCoreError, validate_performance
from src.core.models import CompletedItem, LearnableItem, MasteryLevel, utc_now
from src.scheduling.review_scheduler import ReviewScheduler, SchedulerConfig

from .content_deck import ContentDeck
from .progress_store import ProgressStore

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="jets",
    help="NepaliJets: adaptive Nepali vocabulary practice",
    no_args_is_help=True,
)
console = Console()

STYLES = {
    "info": "bold cyan",
    "error": "bold red",
    "dim": "dim",
    "difficulty": {1: "green", 2: "yellow", 3: "red"},
}

ContentDirOption = typer.Option(
    None, "--content-dir", "-c", help="Directory of catalog JSON files"
)
DbOption = typer.Option(None, "--db", help="Progress database path")


# =============================================================================
# Helpers
# =============================================================================


def style_difficulty(difficulty: int) -> str:
    """Get styled difficulty tier."""
    color = STYLES["difficulty"].get(difficulty, "white")
    return f"[{color}]{difficulty}[/{color}]"


def _open_learner(
    content_dir: Optional[Path],
    db_path: Optional[Path],
) -> tuple[ContentDeck, ProgressStore, list[LearnableItem]]:
    """Load the catalog and overlay saved progress."""
    settings = get_settings()
    deck = ContentDeck(content_dir or settings.content_dir)
    deck.load()
    store = ProgressStore(db_path or settings.progress_db_path)
    items = deck.merge_progress(store.load_items())
    return deck, store, items


def _build_generator(items: list[LearnableItem]) -> PathGenerator:
    return PathGenerator(
        items,
        scheduler=ReviewScheduler(SchedulerConfig.from_settings()),
        tracker=MasteryTracker(MasteryConfig.from_settings()),
        config=PathConfig.from_settings(),
    )


def _parse_rating(pair: str) -> tuple[str, int]:
    """Parse ``ITEM_ID:RATING``."""
    item_id, sep, rating = pair.rpartition(":")
    if not sep or not item_id:
        raise InvalidArgument(f"Expected ITEM_ID:RATING, got {pair!r}")
    try:
        return item_id, int(rating)
    except ValueError:
        raise InvalidArgument(f"Rating must be an integer, got {rating!r}") from None


def _fail(message: str) -> None:
    console.print(f"[{STYLES['error']}]{message}[/{STYLES['error']}]")
    raise typer.Exit(code=1)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def path(
    length: Optional[int] = typer.Option(
        None, "--length", "-l", help="Number of items in the path"
    ),
    content_dir: Optional[Path] = ContentDirOption,
    db: Optional[Path] = DbOption,
) -> None:
    """Show the personalized practice path."""
    _, store, items = _open_learner(content_dir, db)
    generator = _build_generator(items)

    try:
        queue = generator.generate_personalized_path(length)
    except InvalidArgument as e:
        store.close()
        _fail(str(e))
    store.close()

    if not queue:
        console.print("[yellow]Nothing to practice - the catalog is empty.[/yellow]")
        return

    now = utc_now()
    table = Table(title="Practice Path")
    table.add_column("#", style="dim")
    table.add_column("Item")
    table.add_column("Nepali")
    table.add_column("English")
    table.add_column("Category")
    table.add_column("Tier")
    table.add_column("Status")

    for index, item in enumerate(queue, 1):
        if item.is_new:
            status = "[green]new[/green]"
        elif item.is_due(now):
            status = "[yellow]due[/yellow]"
        else:
            status = "[dim]fill[/dim]"
        table.add_row(
            str(index),
            item.id,
            item.nepali or "",
            item.english or "",
            item.category,
            style_difficulty(item.difficulty),
            status,
        )

    console.print(table)


@app.command()
def review(
    ratings: list[str] = typer.Argument(..., help="ITEM_ID:RATING pairs, rating 0-5"),
    content_dir: Optional[Path] = ContentDirOption,
    db: Optional[Path] = DbOption,
) -> None:
    """Record ratings for practiced items and reschedule them."""
    try:
        parsed = [_parse_rating(pair) for pair in ratings]
    except InvalidArgument as e:
        _fail(str(e))

    _, store, items = _open_learner(content_dir, db)
    generator = _build_generator(items)
    tracker = SessionTracker(store.get_stats())

    now = utc_now()
    session = tracker.start_session(now)
    completed: list[CompletedItem] = []

    for item_id, rating in parsed:
        try:
            item = generator.get_item(item_id)
        except LearningCoreError as e:
            console.print(f"[yellow]Skipped: {e}[/yellow]")
            continue
        completed.append(CompletedItem(item=item, performance=rating))
        tracker.record_activity({"itemId": item_id, "rating": rating})

    generator.update_path(completed, now=now)
    finished = tracker.end_session(now)

    store.save_items(generator.items)
    if finished is not None:
        store.save_session(finished)
    store.save_stats(tracker.stats)
    store.close()

    table = Table(title=f"Session {session.session_id}")
    table.add_column("Item")
    table.add_column("Rating")
    table.add_column("Interval")
    table.add_column("Next Review")
    table.add_column("Mastery")

    for done in completed:
        updated = generator.get_item(done.item.id)
        try:
            validate_performance(done.performance)
        except InvalidArgument:
            table.add_row(done.item.id, str(done.performance), "-", "[red]rejected[/red]", "-")
            continue
        level = updated.mastery_level or MasteryLevel.INTRODUCED
        table.add_row(
            updated.id,
            str(done.performance),
            f"{updated.interval}d",
            updated.next_review_date.strftime("%Y-%m-%d") if updated.next_review_date else "-",
            f"[{level.color}]{level.display_name}[/{level.color}]",
        )

    console.print(table)
    console.print(f"[{STYLES['info']}]Streak: {tracker.stats.learning_streak} day(s)[/]")


@app.command()
def report(
    content_dir: Optional[Path] = ContentDirOption,
    db: Optional[Path] = DbOption,
) -> None:
    """Show the progress report."""
    _, store, items = _open_learner(content_dir, db)
    sessions = store.get_session_history()
    store.close()

    progress = MasteryTracker(MasteryConfig.from_settings()).generate_progress_report(
        items, sessions
    )

    console.print("\n[bold cyan]Progress Report[/bold cyan]")
    console.print("=" * 40)

    summary = Table(show_header=False, box=None)
    summary.add_column("Metric", style="dim")
    summary.add_column("Value", style="bold")
    for level in MasteryLevel:
        summary.add_row(level.display_name, f"{progress.mastery_distribution.get(level.value, 0)}%")
    summary.add_row("Current streak", f"{progress.streak.current_streak} day(s)")
    summary.add_row("Total learning time", f"{progress.total_learning_time:.1f} min")
    summary.add_row("Average session", f"{progress.average_session_time:.1f} min")
    console.print(summary)

    if progress.items_per_category:
        categories = Table(title="Categories")
        categories.add_column("Category")
        categories.add_column("Items")
        categories.add_column("Mastered")
        for category, count in sorted(progress.items_per_category.items()):
            categories.add_row(
                category, str(count), f"{progress.mastery_per_category.get(category, 0)}%"
            )
        console.print(categories)

    if progress.recent_performance:
        recent = Table(title="Recent Sessions")
        recent.add_column("Date")
        recent.add_column("Items")
        recent.add_column("Score")
        recent.add_column("Minutes")
        for entry in progress.recent_performance:
            recent.add_row(
                entry.date.strftime("%Y-%m-%d %H:%M"),
                str(entry.items_studied),
                f"{entry.score:g}",
                f"{entry.duration:.1f}",
            )
        console.print(recent)


@app.command()
def metrics(
    content_dir: Optional[Path] = ContentDirOption,
    db: Optional[Path] = DbOption,
) -> None:
    """Show mastery metrics for the item pool."""
    _, store, items = _open_learner(content_dir, db)
    store.close()

    learning = _build_generator(items).get_learning_metrics()

    body = (
        f"Overall mastery: [bold]{learning.overall_mastery}%[/bold]\n"
        f"Mastered items: {learning.mastered_items}/{learning.total_items}\n"
        f"Current difficulty: {style_difficulty(learning.current_difficulty)}"
    )
    if learning.category_mastery:
        body += "\n\n" + "\n".join(
            f"  {category}: {pct}%" for category, pct in sorted(learning.category_mastery.items())
        )

    console.print(Panel(body, title="Learning Metrics", border_style="cyan", padding=(1, 2)))


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
