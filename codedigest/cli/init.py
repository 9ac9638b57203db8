"""Init command implementation."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, save_config
from ..config.loader import DEFAULT_CONFIG_PATH
from ..db import create_pool, init_database, validate_connection

console = Console()


async def _init_schema(db_config: dict) -> bool:
    pool = await create_pool(db_config, max_size=1)
    try:
        if not await validate_connection(pool):
            return False
        await init_database(pool)
        return True
    finally:
        await pool.close()


def init_command(
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path of the configuration file to write",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("codedigest", "--db-name", help="Database name"),
    db_user: str = typer.Option("codedigest", "--db-user", help="Database user"),
    with_db: bool = typer.Option(
        False,
        "--with-db/--no-db",
        help="Also create the score and selection tables",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Write a default configuration and optionally initialize the database."""
    console.print(Panel.fit("Code Intelligence Digest - Initialization", style="bold blue"))

    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists: {config_path} (use --force to overwrite)[/yellow]")
    else:
        config = ConfigModel(
            postgres={
                "host": db_host,
                "port": db_port,
                "database": db_name,
                "user": db_user,
                "password_env": "CODEDIGEST_DB_PASSWORD",
            },
        )
        save_config(config, config_path)
        console.print(f"✅ Created config: {config_path}")

    if with_db:
        console.print("\n[bold]Initializing database schema...[/bold]")
        db_config = {
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "CODEDIGEST_DB_PASSWORD",
        }
        try:
            ok = asyncio.run(_init_schema(db_config))
        except Exception as e:
            console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
            raise typer.Exit(1)
        if not ok:
            console.print(
                "[red]❌ Database connection failed![/red]\n"
                "Please ensure Postgres is running and credentials are correct.\n"
                "Set the password via environment variable: "
                "[bold]export CODEDIGEST_DB_PASSWORD=your_password[/bold]"
            )
            raise typer.Exit(1)
        console.print("✅ Database schema initialized")

    console.print(
        Panel(
            f"[green]✅ Code Intelligence Digest initialized![/green]\n\n"
            f"Configuration: {config_path}\n\n"
            f"Next steps:\n"
            f"1. Set LLM API key: [bold]export OPENAI_API_KEY=your_key[/bold]\n"
            f"2. Run: [bold]codedigest rank items.json --category ai_news --period week[/bold]",
            style="green",
        )
    )
