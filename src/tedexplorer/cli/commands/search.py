"""
Search commands: query TED, page through results, export and save them.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tedexplorer.cli.context import load_config, type_style

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Search TED notices",
    no_args_is_help=True,
)


def _build_filters(**values):
    """Validate CLI input into SearchFilters, exiting on bad values."""
    from tedexplorer.core.query.models import SearchFilters

    try:
        return SearchFilters(**{k: v for k, v in values.items() if v is not None})
    except ValidationError as e:
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"]) or "filters"
            err_console.print(f"[red]Invalid {loc}:[/red] {error['msg']}")
        raise typer.Exit(1)


def _print_results(response) -> None:
    if response.is_fallback:
        console.print(
            "[bold yellow]Endpoint unavailable - showing SYNTHETIC sample data[/bold yellow]"
        )
        console.print(f"[dim]{response.fallback_reason}[/dim]")

    if not response.results:
        console.print("[dim]No results found. Try removing some filters.[/dim]")
        return

    table = Table(
        title=f"Search Results ({response.total:,} total) - page {response.page} of {response.total_pages}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Title", max_width=50)
    table.add_column("Date", no_wrap=True)
    table.add_column("CPV", no_wrap=True)
    table.add_column("Country")
    table.add_column("Type", justify="center")
    table.add_column("ID", style="dim")

    for position, result in enumerate(response.results, start=1):
        title = result.title if len(result.title) <= 50 else result.title[:47] + "..."
        style = type_style(result.type)
        table.add_row(
            str(position),
            escape(title),
            result.date,
            result.cpv_code or "[dim]-[/dim]",
            result.country_name if not result.country else f"{result.country} {result.country_name}",
            f"[{style}]{result.type_label}[/{style}]",
            result.id,
        )

    console.print(table)


def _save_rows(config, owner: str, response, rows: list[int]) -> None:
    """Save selected page rows (1-based) for ``owner``."""
    from tedexplorer.cli.context import init_database
    from tedexplorer.persistence.db import get_session
    from tedexplorer.persistence.repo import DuplicateRecordError, SavedTenderRepository

    if response.is_fallback:
        err_console.print("[red]Refusing to save synthetic results[/red]")
        raise typer.Exit(1)

    init_database(config)
    with get_session() as session:
        repo = SavedTenderRepository(session)
        for row in rows:
            if row < 1 or row > len(response.results):
                err_console.print(f"[red]No row {row} on this page[/red]")
                continue
            result = response.results[row - 1]
            try:
                tender = repo.save(owner, result)
            except DuplicateRecordError:
                console.print(f"[yellow]Already saved:[/yellow] {result.id}")
                continue
            console.print(f"[green]OK[/green] Saved {result.id} as #{tender.id}")


@app.command("run")
def run_search(
    keywords: Optional[str] = typer.Option(None, "--keywords", "-k", help="Title contains (case-insensitive)"),
    notice_type: Optional[str] = typer.Option(None, "--type", "-t", help="notice or tender"),
    date_from: Optional[datetime] = typer.Option(None, "--from", formats=["%Y-%m-%d"], help="Published on or after"),
    date_to: Optional[datetime] = typer.Option(None, "--to", formats=["%Y-%m-%d"], help="Published on or before"),
    cpv_code: Optional[str] = typer.Option(None, "--cpv", help="CPV code prefix"),
    country: Optional[str] = typer.Option(None, "--country", "-c", help="Country code, e.g. DE"),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Page number"),
    page_size: Optional[int] = typer.Option(None, "--page-size", "-n", min=1, help="Results per page"),
    output: str = typer.Option("table", "--format", "-f", help="Output format (table, json, csv)"),
    export: Optional[Path] = typer.Option(None, "--export", "-e", help="Write results to this CSV file (or into this directory)"),
    export_all: bool = typer.Option(False, "--all", help="Export every match, not just this page"),
    fallback: Optional[bool] = typer.Option(
        None,
        "--fallback/--no-fallback",
        help="Serve synthetic data if the endpoint fails (overrides config)",
    ),
    save: Optional[list[int]] = typer.Option(None, "--save", "-s", help="Save row N of this page (repeatable)"),
    owner: Optional[str] = typer.Option(None, "--owner", help="Owner to save tenders for"),
) -> None:
    """Search TED notices.

    Examples:
        tedexplorer search run -k hospital -c DE --page 2 --page-size 10
        tedexplorer search run --cpv 72 --from 2024-01-01 --export it.csv --all
        tedexplorer search run -k "medical devices" --save 1 --save 3
    """
    from tedexplorer.core.endpoint.base import EndpointError
    from tedexplorer.core.export.csv_export import (
        ExportError,
        default_export_filename,
        export_to_csv,
        results_to_csv,
    )
    from tedexplorer.core.search.service import SearchService

    config = load_config()
    if fallback is not None:
        config.endpoint.fallback_on_error = fallback

    filters = _build_filters(
        keywords=keywords,
        type=notice_type,
        date_from=date_from.date() if date_from else None,
        date_to=date_to.date() if date_to else None,
        cpv_code=cpv_code,
        country=country,
        page=page,
        page_size=page_size,
    )

    async def _run():
        async with SearchService.from_config(config) as service:
            response = await service.search(filters)
            export_response = response
            if export and export_all:
                export_response = await service.collect_all(filters)
            return response, export_response

    try:
        response, export_response = asyncio.run(_run())
    except EndpointError as e:
        err_console.print(f"[red]Search failed:[/red] {e}")
        raise typer.Exit(1)

    if output == "json":
        from dataclasses import asdict

        console.print_json(json.dumps({
            "total": response.total,
            "page": response.page,
            "page_size": response.page_size,
            "total_pages": response.total_pages,
            "is_fallback": response.is_fallback,
            "results": [asdict(r) for r in response.results],
        }))
    elif output == "csv":
        print(results_to_csv(response.results), end="")
    else:
        _print_results(response)

    if export:
        if export.is_dir():
            export = export / default_export_filename("all" if export_all else "page")
        try:
            path = export_to_csv(export_response.results, export)
        except ExportError as e:
            err_console.print(f"[red]Export failed:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"[green]OK[/green] Exported {len(export_response.results)} result(s) to [cyan]{path}[/cyan]")

    if save:
        _save_rows(config, owner or config.owner, response, save)


@app.command("metadata")
def show_metadata() -> None:
    """List CPV codes and countries available as filters."""
    from tedexplorer.core.search.service import get_metadata

    config = load_config(with_logging=False)
    metadata = get_metadata(config)

    cpv_table = Table(title="CPV Codes", show_header=True, header_style="bold magenta")
    cpv_table.add_column("Code", style="cyan")
    cpv_table.add_column("Description")
    for cpv in metadata["cpv_codes"]:
        cpv_table.add_row(cpv["code"], cpv["description"])
    console.print(cpv_table)

    country_table = Table(title="Countries", show_header=True, header_style="bold magenta")
    country_table.add_column("Code", style="cyan")
    country_table.add_column("Name")
    for country in metadata["countries"]:
        country_table.add_row(country["code"], country["name"])
    console.print(country_table)


@app.command("query")
def show_query(
    keywords: Optional[str] = typer.Option(None, "--keywords", "-k"),
    notice_type: Optional[str] = typer.Option(None, "--type", "-t"),
    date_from: Optional[datetime] = typer.Option(None, "--from", formats=["%Y-%m-%d"]),
    date_to: Optional[datetime] = typer.Option(None, "--to", formats=["%Y-%m-%d"]),
    cpv_code: Optional[str] = typer.Option(None, "--cpv"),
    country: Optional[str] = typer.Option(None, "--country", "-c"),
    page: int = typer.Option(1, "--page", "-p", min=1),
    page_size: int = typer.Option(20, "--page-size", "-n", min=1),
    count: bool = typer.Option(False, "--count", help="Show the count query instead"),
) -> None:
    """Print the SPARQL query a search would send."""
    from tedexplorer.core.query.builder import build_count_query, build_data_query

    filters = _build_filters(
        keywords=keywords,
        type=notice_type,
        date_from=date_from.date() if date_from else None,
        date_to=date_to.date() if date_to else None,
        cpv_code=cpv_code,
        country=country,
    )
    query = build_count_query(filters) if count else build_data_query(filters, page, page_size)
    print(query)
