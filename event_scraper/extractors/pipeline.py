"""Main scraping pipeline orchestrator.

One URL in, one ScrapeResult out:
1. Fetch/render the page (single attempt, fetch sub-budget)
2. Structured signals (JSON-LD Event, OpenGraph/Twitter)
3. HTML heuristics for the fields structured data left empty
4. Normalization, confidence scoring and assembly

The whole run sits under one deadline; running out of time yields a timeout
error and never partial data.
"""

import asyncio
from datetime import date
from typing import Optional

from pydantic import ValidationError
from rich.console import Console

from event_scraper import config
from event_scraper.errors import ExtractionError, FetchError
from event_scraper.extractors.fetch import PlaywrightRenderer, Renderer, StaticRenderer, fetch_page
from event_scraper.extractors.heuristics import extract_heuristic_candidates
from event_scraper.extractors.render_pool import RenderPool
from event_scraper.extractors.structured import extract_structured_signals
from event_scraper.models import ScrapedEventData, ScrapeMeta, ScrapeResult
from event_scraper.normalizers.fields import normalize_fields, usable_field_names
from event_scraper.scoring import ConfidenceFeatures, score_confidence
from event_scraper.validators import is_valid_url

console = Console()


def build_renderer(kind: str = config.RENDERER, pool: Optional[RenderPool] = None) -> Renderer:
    if kind == "static":
        return StaticRenderer()
    if kind == "playwright":
        return PlaywrightRenderer(pool or RenderPool())
    raise ValueError(f"Unknown renderer: {kind}")


def build_result(
    html: str,
    source_url: str,
    fetch_method: Optional[str] = None,
    today: Optional[date] = None,
) -> ScrapeResult:
    """Turn rendered HTML into a ScrapeResult. Pure: no I/O."""
    signals = extract_structured_signals(html)

    # Heuristics only fill what structured data could not
    skip = usable_field_names(signals.candidates)
    heuristic = extract_heuristic_candidates(html, source_url, skip=skip)

    normalized = normalize_fields(signals.candidates + heuristic, source_url=source_url, today=today)
    missing = normalized.missing_minimal
    if missing:
        console.print(f"[yellow]No event found at {source_url[:60]} (missing: {', '.join(missing)})[/yellow]")
        return ScrapeResult.failure(ExtractionError(missing=missing))

    confidence = score_confidence(ConfidenceFeatures(
        has_structured_signal=signals.has_structured_signal,
        has_social_meta=signals.has_social_meta,
        populated_required=len(normalized.populated),
    ))

    try:
        data = ScrapedEventData(**normalized.values)
    except ValidationError as e:
        console.print(f"[yellow]Normalized record rejected: {e.error_count()} invalid field(s)[/yellow]")
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        return ScrapeResult.failure(ExtractionError(missing=fields))

    meta = ScrapeMeta(
        source_url=source_url,
        has_structured_signal=signals.has_structured_signal,
        has_social_meta=signals.has_social_meta,
        confidence=confidence,
        populated_required=len(normalized.populated),
        fetch_method=fetch_method,
    )
    console.print(f"[green]Extracted:[/green] {data.title[:60]} ({data.start_date}, {data.city}/{data.state}) confidence={confidence}")
    return ScrapeResult.success(data, meta)


async def _run(
    url: str,
    renderer: Renderer,
    fetch_budget: float,
    today: Optional[date],
) -> ScrapeResult:
    fetched = await fetch_page(url, renderer, timeout=fetch_budget)
    if not fetched.ok:
        return ScrapeResult.failure(fetched.error)

    # Parsing is CPU-bound; a thread keeps the deadline enforceable
    try:
        return await asyncio.to_thread(
            build_result, fetched.html, url, fetch_method=fetched.method, today=today,
        )
    except Exception as e:
        console.print(f"[red]Extraction crashed for {url[:60]}: {type(e).__name__}: {e}[/red]")
        return ScrapeResult.failure(ExtractionError(
            message=f"Erro inesperado ao processar a página ({type(e).__name__})",
        ))


async def scrape_event(
    url: str,
    renderer: Optional[Renderer] = None,
    deadline: float = config.DEADLINE_SECONDS,
    fetch_budget: float = config.FETCH_BUDGET_SECONDS,
    today: Optional[date] = None,
) -> ScrapeResult:
    """Scrape one event page into a pending-submission record.

    Args:
        url: Public event page URL
        renderer: Page renderer; defaults to a one-off Playwright pool
        deadline: Hard cap for the whole call, in seconds (at most 60)
        fetch_budget: Share of the deadline given to fetch/render
        today: Reference date for year-less dates (defaults to today)

    Returns:
        ScrapeResult with data + meta, or with a FetchError/ExtractionError
    """
    url = (url or "").strip()
    if not is_valid_url(url):
        return ScrapeResult.failure(FetchError.invalid_url(url))

    if renderer is None:
        if config.RENDERER == "static":
            return await scrape_event(url, StaticRenderer(), deadline, fetch_budget, today)
        async with RenderPool(size=1) as pool:
            return await scrape_event(url, PlaywrightRenderer(pool), deadline, fetch_budget, today)

    deadline = min(deadline, config.MAX_DEADLINE_SECONDS)
    try:
        return await asyncio.wait_for(
            _run(url, renderer, min(fetch_budget, deadline), today),
            timeout=deadline,
        )
    except asyncio.TimeoutError:
        console.print(f"[red]Deadline of {deadline:.0f}s exceeded for {url[:60]}[/red]")
        return ScrapeResult.failure(FetchError.timeout(url))
