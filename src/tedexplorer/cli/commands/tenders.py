"""
Saved tender commands.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tedexplorer.cli.context import format_money, init_database, load_config, type_style

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Manage saved tenders",
    no_args_is_help=True,
)


def _owner_option() -> Optional[str]:
    return typer.Option(None, "--owner", help="Owner (default: from config)")


@app.command("list")
def list_tenders(
    our_sector: bool = typer.Option(False, "--our-sector", help="Only tenders flagged as our sector"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum rows to show"),
    owner: Optional[str] = _owner_option(),
) -> None:
    """List saved tenders, newest first."""
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import SavedTenderRepository

    config = load_config()
    init_database(config)

    with get_session() as session:
        tenders = SavedTenderRepository(session).list_for_owner(
            owner or config.owner,
            our_sector_only=our_sector,
            limit=limit,
        )

        if not tenders:
            console.print("[dim]No saved tenders. Save one with:[/dim] tedexplorer search run ... --save N")
            return

        table = Table(title=f"Saved Tenders ({len(tenders)})", show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Title", max_width=45)
        table.add_column("Date", no_wrap=True)
        table.add_column("Country")
        table.add_column("Type", justify="center")
        table.add_column("Value", justify="right")
        table.add_column("Sector", justify="center")

        for t in tenders:
            style = type_style(t.type)
            table.add_row(
                str(t.id),
                escape(t.title if len(t.title) <= 45 else t.title[:42] + "..."),
                t.date,
                t.country or "[dim]-[/dim]",
                f"[{style}]{t.type}[/{style}]",
                format_money(t.tender_value, t.currency),
                "[green]ours[/green]" if t.is_our_sector else "",
            )

        console.print(table)


@app.command("toggle")
def toggle_sector(
    tender_id: int = typer.Argument(..., help="Saved tender number"),
    owner: Optional[str] = _owner_option(),
) -> None:
    """Flip whether a tender counts as our sector."""
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import RecordNotFoundError, SavedTenderRepository

    config = load_config()
    init_database(config)

    with get_session() as session:
        try:
            tender = SavedTenderRepository(session).toggle_our_sector(owner or config.owner, tender_id)
        except RecordNotFoundError as e:
            err_console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        state = "in" if tender.is_our_sector else "out of"
        console.print(f"[green]OK[/green] #{tender.id} is now {state} our sector")


@app.command("value")
def set_value(
    tender_id: int = typer.Argument(..., help="Saved tender number"),
    value: Optional[float] = typer.Argument(None, help="Tender value; omit to clear"),
    currency: Optional[str] = typer.Option(None, "--currency", help="ISO currency code"),
    owner: Optional[str] = _owner_option(),
) -> None:
    """Set or clear the value of a saved tender."""
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import RecordNotFoundError, SavedTenderRepository

    if value is not None and value < 0:
        err_console.print("[red]Value cannot be negative[/red]")
        raise typer.Exit(1)

    config = load_config()
    init_database(config)

    with get_session() as session:
        try:
            tender = SavedTenderRepository(session).set_value(
                owner or config.owner, tender_id, value, currency
            )
        except RecordNotFoundError as e:
            err_console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        console.print(
            f"[green]OK[/green] #{tender.id} value: {format_money(tender.tender_value, tender.currency)}"
        )


@app.command("remove")
def remove_tender(
    tender_id: int = typer.Argument(..., help="Saved tender number"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    owner: Optional[str] = _owner_option(),
) -> None:
    """Delete a saved tender."""
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import RecordNotFoundError, SavedTenderRepository

    if not yes and not typer.confirm(f"Remove saved tender #{tender_id}?", default=False):
        raise typer.Abort()

    config = load_config()
    init_database(config)

    with get_session() as session:
        try:
            SavedTenderRepository(session).delete(owner or config.owner, tender_id)
        except RecordNotFoundError as e:
            err_console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    console.print(f"[green]OK[/green] Removed #{tender_id}")
