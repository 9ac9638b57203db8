"""Main CLI application."""

import logging

import typer
from dotenv import load_dotenv
from rich.logging import RichHandler

# Load .env file if it exists
load_dotenv()

from .config import config_command
from .init import init_command
from .rank import compute_command, rank_command

app = typer.Typer(
    name="codedigest",
    help="Code Intelligence Digest - rank and select curated feed items",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Code Intelligence Digest."""
    setup_logging(verbose)


# Register commands
app.command("init")(init_command)
app.command("rank")(rank_command)
app.command("compute")(compute_command)
app.command("config")(config_command)


if __name__ == "__main__":
    app()
