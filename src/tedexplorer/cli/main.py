"""
TED Explorer CLI - Main entry point.

Search EU public procurement notices, export them to CSV,
and track saved tenders and market share.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.traceback import install as install_rich_traceback

from tedexplorer import __app_name__, __version__
from tedexplorer.core.config.loader import CONFIG_ENV_VAR, DEFAULT_APP_CONFIG, resolve_config_path

# Load environment variables from .env (if present)
load_dotenv()

install_rich_traceback(show_locals=False, width=120)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name=__app_name__,
    help="Search and track TED procurement notices",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help=f"Path to app.yaml (default: ${CONFIG_ENV_VAR} or {DEFAULT_APP_CONFIG})",
    ),
) -> None:
    """TED Explorer - procurement notice search and market share tracking."""
    if config is not None:
        os.environ[CONFIG_ENV_VAR] = str(config)


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import analysis, db, search, tenders  # noqa: E402

app.add_typer(search.app, name="search", help="Search TED notices")
app.add_typer(tenders.app, name="tenders", help="Manage saved tenders")
app.add_typer(analysis.app, name="analysis", help="Market share analysis")
app.add_typer(db.app, name="db", help="Database operations")


# =============================================================================
# Init Command
# =============================================================================


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Initialize directories, default configuration and the database."""
    from tedexplorer.cli.context import init_database, load_config

    app_config_path = resolve_config_path()
    if not app_config_path.exists() or force:
        _create_default_app_config(app_config_path)

    config = load_config(with_logging=False)
    config.ensure_directories()
    init_database(config)

    console.print()
    console.print(Panel.fit(
        "[bold green]OK - TED Explorer initialized[/bold green]\n\n"
        f"  - [cyan]{app_config_path}[/cyan] - Application configuration\n"
        f"  - [cyan]{config.data_dir}/[/cyan] - Database storage\n"
        f"  - [cyan]{config.export_dir}/[/cyan] - CSV exports\n\n"
        "Next steps:\n"
        "  1. Search: [yellow]tedexplorer search run -k hospital -c DE[/yellow]\n"
        "  2. Save a row: [yellow]tedexplorer search run -k hospital --save 1[/yellow]\n"
        "  3. Market share: [yellow]tedexplorer analysis show[/yellow]",
        title="[bold]Initialization Complete[/bold]",
        border_style="green",
    ))


def _create_default_app_config(path: Path) -> None:
    """Write app.yaml holding the default settings."""
    import yaml

    from tedexplorer.core.config.models import AppConfig

    # Filter metadata lists stay at their built-in defaults
    settings = AppConfig().model_dump(mode="json", exclude={"cpv_codes", "countries"})
    header = (
        "# TED Explorer configuration\n"
        "# String values may use ${VAR} or ${VAR:-default}.\n\n"
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(header + yaml.safe_dump(settings, sort_keys=False), encoding="utf-8")


# =============================================================================
# Status Command
# =============================================================================


@app.command()
def status() -> None:
    """Show configuration and saved data for the current owner."""
    from rich.table import Table

    from tedexplorer.cli.context import init_database, load_config
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import MarketAnalysisRepository, SavedTenderRepository

    config = load_config(with_logging=False)

    table = Table(title="TED Explorer Status", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("Endpoint", config.endpoint.url)
    table.add_row("Fallback on error", "yes" if config.endpoint.fallback_on_error else "no")
    table.add_row("Database", config.database.url)
    table.add_row("Owner", config.owner)

    init_database(config)
    with get_session() as session:
        tenders = SavedTenderRepository(session).list_for_owner(config.owner)
        analyses = MarketAnalysisRepository(session).list_for_owner(config.owner)
        table.add_row("Saved tenders", str(len(tenders)))
        table.add_row("Our sector", str(sum(1 for t in tenders if t.is_our_sector)))
        table.add_row("Analyses", str(len(analyses)))

    console.print(table)


@app.command("validate-config")
def validate_config(
    path: Path = typer.Argument(DEFAULT_APP_CONFIG, help="Configuration file to check"),
) -> None:
    """Check a configuration file without running anything."""
    from tedexplorer.core.config.loader import validate_app_config_file

    errors = validate_app_config_file(path)
    if errors:
        for error in errors:
            err_console.print(f"[red]x[/red] {error}")
        raise typer.Exit(1)
    console.print(f"[green]OK[/green] {path} is valid")


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
