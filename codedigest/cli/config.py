"""Config command implementation."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config

console = Console()


def config_command(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (default: CODEDIGEST_CONFIG or ~/.config/codedigest)"
    ),
) -> None:
    """Show the effective category and period settings."""
    try:
        config = Config(config_path).config
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)

    categories = Table(title="Categories")
    categories.add_column("Category", style="cyan")
    categories.add_column("Weights (llm/bm25/recency)")
    categories.add_column("Half-life", justify="right")
    categories.add_column("Max items", justify="right")
    categories.add_column("Min relevance", justify="right")
    for category, cfg in config.categories.items():
        categories.add_row(
            category.value,
            f"{cfg.weights.llm:.2f}/{cfg.weights.bm25:.2f}/{cfg.weights.recency:.2f}",
            f"{cfg.half_life_days:g}d",
            str(cfg.max_items),
            f"{cfg.min_relevance:g}",
        )
    console.print(categories)

    periods = Table(title="Periods")
    periods.add_column("Period", style="cyan")
    periods.add_column("Window", justify="right")
    periods.add_column("Half-life", justify="right")
    periods.add_column("Max per source", justify="right")
    for period, cfg in config.periods.items():
        periods.add_row(period.value, f"{cfg.days}d", f"{cfg.half_life_days:g}d", str(cfg.max_per_source))
    console.print(periods)
