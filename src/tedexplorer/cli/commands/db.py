"""
Database management commands.

``init`` creates tables straight from the models; the alembic commands
manage the schema revision for databases that are upgraded in place.
"""

from __future__ import annotations

from typing import Callable

import typer
from rich.console import Console

from tedexplorer.cli.context import load_config

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Database operations",
    no_args_is_help=True,
)

ALEMBIC_INI = "alembic.ini"


def _run_alembic(label: str, action: Callable[..., None], *args) -> None:
    """Run an alembic command against the configured database."""
    from alembic.config import Config
    from alembic.util import CommandError

    config = load_config(with_logging=False)
    alembic_cfg = Config(ALEMBIC_INI)
    alembic_cfg.set_main_option("sqlalchemy.url", config.database.url)

    try:
        action(alembic_cfg, *args)
    except CommandError as e:
        err_console.print(f"[red]{label} failed:[/red] {e}")
        raise typer.Exit(1)


@app.command("init")
def init_database(
    drop_existing: bool = typer.Option(False, "--drop", help="Drop all tables first"),
) -> None:
    """Create any missing tables. With --drop, start from an empty database."""
    from tedexplorer.persistence.db import drop_db, init_db

    config = load_config(with_logging=False)
    url = config.database.url

    if drop_existing:
        typer.confirm(
            f"Delete ALL saved tenders and analyses in {url}?",
            default=False,
            abort=True,
        )
        drop_db(url)
        console.print("[yellow]Dropped existing tables[/yellow]")

    init_db(url, echo=config.database.echo)
    console.print(f"[green]OK[/green] Database ready at [cyan]{url}[/cyan]")


@app.command("migrate")
def run_migrations(
    revision: str = typer.Option("head", "--revision", "-r", help="Target revision"),
) -> None:
    """Upgrade the schema to a revision (default: latest)."""
    from alembic import command

    _run_alembic("Migration", command.upgrade, revision)
    console.print(f"[green]OK[/green] Schema at {revision}")


@app.command("downgrade")
def downgrade_database(
    revision: str = typer.Argument(..., help="Target revision, e.g. base"),
) -> None:
    """Downgrade the schema to an earlier revision."""
    from alembic import command

    typer.confirm(f"Downgrade to '{revision}'? Dropped tables lose their data.", abort=True)
    _run_alembic("Downgrade", command.downgrade, revision)
    console.print(f"[green]OK[/green] Schema at {revision}")


@app.command("current")
def show_current() -> None:
    """Print the schema revision of the configured database."""
    from alembic import command

    console.print("[bold]Current revision:[/bold]")
    _run_alembic("Lookup", command.current)
