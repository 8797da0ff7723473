"""CLI entry point."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from cardex.core.cardex import Cardex
from cardex.core.config import configure_logging, get_settings
from cardex.core.exceptions import CardexError
from cardex.models.collection import DexFilter

app = typer.Typer(
    name="cardex",
    help="Track the car models you have spotted",
    no_args_is_help=True,
)
console = Console()

T = TypeVar("T")


def _run(action: Callable[[Cardex], Awaitable[T]]) -> T:
    """Run an async action against a configured Cardex, mapping domain errors to exit 1."""
    settings = get_settings()
    configure_logging(settings)

    async def main() -> T:
        async with Cardex.from_settings(settings) as dex:
            return await action(dex)

    try:
        return asyncio.run(main())
    except CardexError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def _check(spotted: bool) -> str:
    return "[green]✓[/green]" if spotted else "·"


@app.command()
def version() -> None:
    """Show version."""
    from cardex import __version__

    console.print(f"cardex {__version__}")


@app.command()
def manufacturers() -> None:
    """List catalog manufacturers."""

    async def action(dex: Cardex) -> None:
        table = Table(title="Manufacturers")
        table.add_column("ID", justify="right")
        table.add_column("Name")
        table.add_column("Country")
        table.add_column("Progress", justify="right")
        for m in dex.list_manufacturers():
            progress = await dex.get_manufacturer_progress(m.id)
            table.add_row(
                m.id, m.name, m.country,
                f"{progress.spotted_count}/{progress.total_count}",
            )
        console.print(table)

    _run(action)


@app.command()
def models(
    manufacturer: Optional[str] = typer.Option(None, "--manufacturer", "-m", help="Manufacturer ID"),
) -> None:
    """List catalog models."""

    async def action(dex: Cardex) -> None:
        table = Table(title="Models")
        table.add_column("ID", justify="right")
        table.add_column("Manufacturer")
        table.add_column("Model")
        for joined in dex.list_models_joined():
            if manufacturer is not None and joined.manufacturer.id != manufacturer:
                continue
            table.add_row(joined.id, joined.manufacturer.name, joined.name)
        console.print(table)

    _run(action)


@app.command()
def spot(
    model_id: str = typer.Argument(..., help="Model ID"),
    photo: str = typer.Argument(..., help="Photo reference (path or URI)"),
    note: Optional[str] = typer.Option(None, "--note", help="Free-text note"),
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude"),
    lng: Optional[float] = typer.Option(None, "--lng", help="Longitude"),
) -> None:
    """Record a sighting."""
    if (lat is None) != (lng is None):
        console.print("[red]Error:[/red] --lat and --lng must be given together")
        raise typer.Exit(code=1)

    async def action(dex: Cardex) -> None:
        request: dict[str, Any] = {"model_id": model_id, "photo_reference": photo, "note": note}
        if lat is not None and lng is not None:
            request["location"] = {"lat": lat, "lng": lng}
        result = await dex.submit_capture(request)
        model = dex.catalog.get_model_joined(model_id)
        name = model.display_name if model else model_id
        if result.is_new_model:
            console.print(f"[bold green]New![/bold green] {name} added to your Cardex.")
        else:
            console.print(f"Spotted {name} again.")
        p = result.progress
        console.print(f"Progress: {p.spotted_count}/{p.total_count} ({p.percentage}%)")

    _run(action)


@app.command()
def progress(
    manufacturer: Optional[str] = typer.Option(None, "--manufacturer", "-m", help="Manufacturer ID"),
) -> None:
    """Show collection progress."""

    async def action(dex: Cardex) -> None:
        if manufacturer is None:
            p = await dex.get_progress()
        else:
            p = await dex.get_manufacturer_progress(manufacturer)
        console.print(f"{p.spotted_count}/{p.total_count} spotted ({p.percentage}%)")

    _run(action)


@app.command()
def dex(
    search: str = typer.Option("", "--search", "-s", help="Search model or manufacturer name"),
    filter_: DexFilter = typer.Option(DexFilter.ALL, "--filter", "-f", help="all, spotted or unspotted"),
) -> None:
    """Browse the catalog with spotted state."""

    async def action(dex: Cardex) -> None:
        items = await dex.browse(search, filter_)
        table = Table(title="Cardex")
        table.add_column("", justify="center")
        table.add_column("ID", justify="right")
        table.add_column("Model")
        table.add_column("First spotted")
        for item in items:
            first = item.entry.first_spotted_at.strftime("%Y-%m-%d %H:%M") if item.entry else ""
            table.add_row(_check(item.spotted), item.model.id, item.model.display_name, first)
        console.print(table)
        p = await dex.get_progress()
        console.print(f"{p.spotted_count}/{p.total_count} spotted ({p.percentage}%)")

    _run(action)


@app.command()
def history(model_id: str = typer.Argument(..., help="Model ID")) -> None:
    """Show your sightings of one model, newest first."""

    async def action(dex: Cardex) -> None:
        detail = await dex.get_model_detail(model_id)
        console.print(f"[bold]{detail.model.display_name}[/bold] {_check(detail.spotted)}")
        if detail.entry is None:
            console.print("Not spotted yet.")
            return
        table = Table()
        table.add_column("ID")
        table.add_column("When")
        table.add_column("Photo")
        table.add_column("Note")
        for s in detail.sightings:
            table.add_row(s.id, s.created_at.isoformat(timespec="seconds"), s.photo_reference, s.note or "")
        console.print(table)

    _run(action)


@app.command()
def rebuild() -> None:
    """Recompute the collection index from the sighting history."""

    async def action(dex: Cardex) -> None:
        entries = await dex.rebuild_index()
        console.print(f"Rebuilt {len(entries)} collection entries.")

    _run(action)


if __name__ == "__main__":
    app()
