"""CLI for the event scraper."""

import asyncio
import json
from pathlib import Path

import typer
from dotenv import load_dotenv

# Settings are read from the environment at import time, so .env goes first
load_dotenv(override=True)

from rich.console import Console  # noqa: E402
from rich.table import Table  # noqa: E402

from event_scraper import config  # noqa: E402
from event_scraper.extractors.fetch import PlaywrightRenderer, StaticRenderer  # noqa: E402
from event_scraper.extractors.pipeline import scrape_event  # noqa: E402
from event_scraper.extractors.render_pool import RenderPool  # noqa: E402
from event_scraper.models import ScrapeResult  # noqa: E402
from event_scraper.scripts.backfill_prices import backfill_file  # noqa: E402

app = typer.Typer(
    name="event-scraper",
    help="Scrape public event pages into pending event submissions",
    add_completion=False,
)
console = Console()


def print_result(result: ScrapeResult) -> None:
    """Summary table for a successful scrape, or the error."""
    if not result.ok:
        console.print(f"[red]{result.error.kind.value}:[/red] {result.error.message}")
        return

    data, meta = result.data, result.meta
    table = Table(title=f"{data.title[:60]} (confidence: {meta.confidence})")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green", max_width=70)

    price = "Grátis" if data.is_free else f"{data.price_type or '-'} {data.price_value or ''}".strip()
    rows = [
        ("Date", f"{data.start_date}{' → ' + str(data.end_date) if data.end_date else ''}"),
        ("Time", f"{data.start_time or '?'} - {data.end_time or '?'}"),
        ("Location", f"{data.venue_name or ''} {data.address or ''} {data.city}/{data.state}".strip()),
        ("Category", data.category),
        ("Format", data.format),
        ("Topics", ", ".join(data.topics) or "-"),
        ("Price", price),
        ("Organizer", data.organizer_name),
        ("Tickets", data.ticket_url or "-"),
        ("Slug", data.slug),
        ("Signals", f"structured={meta.has_structured_signal} social={meta.has_social_meta}"),
        ("Required fields", f"{meta.populated_required}/9"),
    ]
    for name, value in rows:
        table.add_row(name, value)
    console.print(table)


@app.command()
def scrape(
    url: str = typer.Argument(..., help="Event page URL"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response"),
    renderer: str = typer.Option(config.RENDERER, "--renderer", "-r", help="playwright or static"),
    timeout: float = typer.Option(config.DEADLINE_SECONDS, "--timeout", "-t", help="Deadline in seconds (max 60)"),
):
    """Scrape a single event page."""
    if renderer not in ("playwright", "static"):
        console.print(f"[red]Unknown renderer: {renderer}[/red]")
        raise typer.Exit(2)

    async def run() -> ScrapeResult:
        if renderer == "static":
            return await scrape_event(url, StaticRenderer(), deadline=timeout)
        async with RenderPool(size=1) as pool:
            return await scrape_event(url, PlaywrightRenderer(pool), deadline=timeout)

    result = asyncio.run(run())

    if as_json:
        print(json.dumps(result.to_response(), ensure_ascii=False, indent=2))
    else:
        print_result(result)

    if not result.ok:
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option(config.HOST, "--host", help="Host to bind"),
    port: int = typer.Option(config.PORT, "--port", "-p", help="Port to bind"),
    renderer: str = typer.Option(config.RENDERER, "--renderer", "-r", help="playwright or static"),
):
    """Run the HTTP scrape endpoint."""
    from event_scraper.server import serve as run_server

    try:
        asyncio.run(run_server(host, port, renderer))
    except KeyboardInterrupt:
        console.print("\n[dim]Server stopped[/dim]")


@app.command()
def backfill_prices(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of event records"),
    output: Path = typer.Option(None, "--output", "-o", help="Write here instead of in place"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print totals"),
):
    """Derive price_type/price_value from free-text price_info."""
    try:
        backfill_file(path, output, verbose=not quiet)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
