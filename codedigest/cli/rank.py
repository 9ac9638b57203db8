"""Rank and compute command implementations."""

import asyncio
import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..config import Category, Config, Period, get_category_config, get_period_config
from ..db import PostgresScoreStore, create_pool, save_digest_selections
from ..judge import get_judge
from ..models import FeedItem
from ..pipeline import DigestService, InMemoryScoreStore, compute_and_save_scores
from ..ranking import RankedItem, SelectionResult, has_more, print_ranking_summary

console = Console()


def load_items(items_file: Path) -> List[FeedItem]:
    """Load feed items from a JSON array file."""
    with open(items_file) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array of items in {items_file}")
    return [FeedItem.model_validate(entry) for entry in data]


def print_selection(selection: SelectionResult, category: Category, period: Period) -> None:
    """Print selected items with their selection reasons."""
    table = Table(title=f"{category.value} ({period.value})")
    table.add_column("#", style="dim")
    table.add_column("Title", style="yellow")
    table.add_column("Source", style="cyan")
    table.add_column("Score", style="green")
    table.add_column("Reason", style="dim")

    for i, item in enumerate(selection.items, 1):
        table.add_row(
            str(i),
            item.title,
            item.source_title,
            f"{item.final_score:.3f}",
            selection.reasons.get(item.id, ""),
        )

    console.print(table)


async def _rank(
    config: Config,
    items: List[FeedItem],
    category: Category,
    period: Period,
    limit: Optional[int],
    max_per_source: Optional[int],
    use_db: bool,
    use_judge: bool,
) -> Tuple[List[RankedItem], SelectionResult]:
    judge = get_judge(config.get_llm_config()) if use_judge else None
    pool = await create_pool(config.get_db_config()) if use_db else None
    try:
        store = PostgresScoreStore(pool) if pool is not None else InMemoryScoreStore()
        service = DigestService(config.config, store, judge)
        period_config = get_period_config(config.config, period)
        ranked = await service.ranker.rank_category(items, category, period_config.days, period)
        selection = service.select(ranked, category, period, limit, max_per_source)
        if pool is not None:
            await save_digest_selections(pool, selection, category, period)
        return ranked, selection
    finally:
        if pool is not None:
            await pool.close()


async def _compute(
    config: Config,
    items_by_category: Dict[Category, List[FeedItem]],
    use_db: bool,
) -> Dict[Category, int]:
    judge = get_judge(config.get_llm_config())
    pool = await create_pool(config.get_db_config()) if use_db else None
    try:
        store = PostgresScoreStore(pool) if pool is not None else InMemoryScoreStore()
        counts = {}
        for category, items in items_by_category.items():
            counts[category] = await compute_and_save_scores(
                items, category, store, judge, config.config
            )
        return counts
    finally:
        if pool is not None:
            await pool.close()


def rank_command(
    items_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file of feed items"),
    category: str = typer.Option(..., "--category", "-c", help="Category to rank"),
    period: str = typer.Option("week", "--period", "-p", help="Period: day, week, month or all"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Number of items to select"),
    max_per_source: Optional[int] = typer.Option(
        None, "--max-per-source", help="Per-source cap (default from the period)"
    ),
    use_db: bool = typer.Option(False, "--db/--no-db", help="Use stored scores from Postgres"),
    use_judge: bool = typer.Option(True, "--judge/--no-judge", help="Judge unscored items"),
    show_all: bool = typer.Option(False, "--show-ranking", help="Also print the full ranking"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Configuration file"),
) -> None:
    """Rank items for a category and select a diverse digest."""
    try:
        config = Config(config_path)
        get_category_config(config.config, category)
        get_period_config(config.config, period)
        items = load_items(items_file)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    category_enum, period_enum = Category(category), Period(period)
    candidates = [item for item in items if item.category == category_enum]
    console.print(
        f"[dim]{len(candidates)} of {len(items)} items in category {category_enum.value}[/dim]"
    )

    try:
        ranked, selection = asyncio.run(
            _rank(config, candidates, category_enum, period_enum, limit, max_per_source, use_db, use_judge)
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Ranking interrupted by user[/yellow]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Ranking failed: {e}[/red]")
        raise typer.Exit(1)

    if show_all:
        print_ranking_summary(ranked, limit=len(ranked))
    print_selection(selection, category_enum, period_enum)
    if has_more(ranked, selection):
        console.print("[dim]More items are available beyond this selection.[/dim]")


def compute_command(
    items_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file of feed items"),
    category: Optional[str] = typer.Option(
        None, "--category", "-c", help="Only compute this category (default: all in the file)"
    ),
    use_db: bool = typer.Option(True, "--db/--no-db", help="Save scores to Postgres"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Configuration file"),
) -> None:
    """Pre-compute and store scores for newly synced items."""
    try:
        config = Config(config_path)
        if category is not None:
            get_category_config(config.config, category)
        items = load_items(items_file)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    items_by_category: Dict[Category, List[FeedItem]] = defaultdict(list)
    for item in items:
        if category is None or item.category == Category(category):
            items_by_category[item.category].append(item)

    try:
        counts = asyncio.run(_compute(config, dict(items_by_category), use_db))
    except Exception as e:
        console.print(f"[red]Score computation failed: {e}[/red]")
        raise typer.Exit(1)

    for cat, count in counts.items():
        console.print(f"✅ {cat.value}: scored {count} new items")
