"""
Shared setup for CLI commands: configuration, logging and formatting.
"""

from __future__ import annotations

import typer
from rich.console import Console

from tedexplorer.core.config.loader import ConfigError, load_app_config
from tedexplorer.core.config.models import AppConfig
from tedexplorer.core.logging import setup_logging

err_console = Console(stderr=True)


def load_config(with_logging: bool = True) -> AppConfig:
    """Load app config, exiting with a message if it is invalid."""
    try:
        config = load_app_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    if with_logging:
        setup_logging(
            level=config.logging.level,
            log_file=config.logging.file,
            json_format=config.logging.json_format,
            rich_console=config.logging.rich_console,
        )
    return config


def init_database(config: AppConfig) -> None:
    """Bind the global engine to the configured database and create tables."""
    from tedexplorer.persistence.db import init_db

    init_db(config.database.url, echo=config.database.echo)


def format_money(value: float | None, currency: str = "EUR") -> str:
    """Compact money string, or a dim dash when missing."""
    if value is None:
        return "[dim]-[/dim]"
    symbol = "€" if currency == "EUR" else f"{currency} "
    if value >= 1_000_000:
        return f"{symbol}{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{symbol}{value / 1_000:.0f}K"
    return f"{symbol}{value:,.0f}"


def type_style(tag: str) -> str:
    return {"notice": "green", "tender": "blue"}.get(tag, "yellow")
