"""
Market share analysis commands.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tedexplorer.cli.context import format_money, init_database, load_config

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Market share analysis",
    no_args_is_help=True,
)


def _render(calculation) -> None:
    console.print(Panel.fit(
        f"Total market value:  [bold]{format_money(calculation.total_value)}[/bold]"
        f"  ({calculation.tender_count} tenders)\n"
        f"Our sector value:    [bold]{format_money(calculation.subset_value)}[/bold]"
        f"  ({calculation.subset_count} tenders)\n"
        f"Market share:        [bold cyan]{calculation.percentage:.2f}%[/bold cyan]",
        title="[bold]Market Share[/bold]",
        border_style="cyan",
    ))


@app.command("show")
def show_share(
    owner: Optional[str] = typer.Option(None, "--owner", help="Owner (default: from config)"),
) -> None:
    """Compute market share over saved tenders that have a value."""
    from tedexplorer.core.analysis.market_share import compute_market_share
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import SavedTenderRepository

    config = load_config()
    init_database(config)

    with get_session() as session:
        calculation = compute_market_share(
            SavedTenderRepository(session).valued_tenders(owner or config.owner)
        )

    if calculation.tender_count == 0:
        console.print("[dim]No valued tenders yet. Set one with:[/dim] tedexplorer tenders value <id> <amount>")
        return
    _render(calculation)


@app.command("save")
def save_analysis(
    name: str = typer.Option(..., "--name", help="Analysis name"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    cpv: Optional[list[str]] = typer.Option(None, "--cpv", help="CPV codes the analysis covers"),
    country: Optional[list[str]] = typer.Option(None, "--country", help="Countries the analysis covers"),
    date_from: Optional[datetime] = typer.Option(None, "--from", formats=["%Y-%m-%d"]),
    date_to: Optional[datetime] = typer.Option(None, "--to", formats=["%Y-%m-%d"]),
    owner: Optional[str] = typer.Option(None, "--owner", help="Owner (default: from config)"),
) -> None:
    """Compute the current market share and store it under a name."""
    from tedexplorer.core.analysis.market_share import compute_market_share
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import (
        MarketAnalysisRepository,
        SavedTenderRepository,
        ValidationError,
    )

    config = load_config()
    init_database(config)
    who = owner or config.owner

    with get_session() as session:
        calculation = compute_market_share(SavedTenderRepository(session).valued_tenders(who))
        try:
            analysis = MarketAnalysisRepository(session).save(
                who,
                name,
                calculation,
                description=description,
                cpv_codes=list(cpv) if cpv else None,
                countries=[c.upper() for c in country] if country else None,
                date_from=date_from.date() if date_from else None,
                date_to=date_to.date() if date_to else None,
            )
        except ValidationError as e:
            err_console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        analysis_id = analysis.id

    _render(calculation)
    console.print(f"[green]OK[/green] Saved analysis #{analysis_id} '{name.strip()}'")


@app.command("list")
def list_analyses(
    limit: int = typer.Option(50, "--limit", "-n"),
    owner: Optional[str] = typer.Option(None, "--owner", help="Owner (default: from config)"),
) -> None:
    """List stored analyses, newest first."""
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import MarketAnalysisRepository

    config = load_config()
    init_database(config)

    with get_session() as session:
        analyses = MarketAnalysisRepository(session).list_for_owner(owner or config.owner, limit=limit)
        if not analyses:
            console.print("[dim]No saved analyses.[/dim]")
            return

        table = Table(title="Market Analyses", show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Name", style="cyan")
        table.add_column("Total", justify="right")
        table.add_column("Ours", justify="right")
        table.add_column("Share", justify="right")
        table.add_column("Created", no_wrap=True)

        for a in analyses:
            table.add_row(
                str(a.id),
                a.analysis_name,
                format_money(a.total_market_value),
                format_money(a.our_sector_value),
                f"{a.market_share_percentage:.2f}%",
                a.created_at.strftime("%Y-%m-%d %H:%M"),
            )
        console.print(table)


@app.command("remove")
def remove_analysis(
    analysis_id: int = typer.Argument(...),
    owner: Optional[str] = typer.Option(None, "--owner", help="Owner (default: from config)"),
) -> None:
    """Delete a stored analysis."""
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import MarketAnalysisRepository, RecordNotFoundError

    config = load_config()
    init_database(config)

    with get_session() as session:
        try:
            MarketAnalysisRepository(session).delete(owner or config.owner, analysis_id)
        except RecordNotFoundError as e:
            err_console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    console.print(f"[green]OK[/green] Removed analysis #{analysis_id}")
