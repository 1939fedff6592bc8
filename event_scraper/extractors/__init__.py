"""Page fetching and event extraction."""

from event_scraper.extractors.fetch import FetchResult, PlaywrightRenderer, StaticRenderer, fetch_page
from event_scraper.extractors.render_pool import PoolExhaustedError, RenderPool
from event_scraper.extractors.structured import StructuredSignals, extract_structured_signals
from event_scraper.extractors.heuristics import extract_heuristic_candidates
from event_scraper.extractors.pipeline import build_renderer, build_result, scrape_event

__all__ = [
    "FetchResult",
    "PlaywrightRenderer",
    "StaticRenderer",
    "fetch_page",
    "PoolExhaustedError",
    "RenderPool",
    "StructuredSignals",
    "extract_structured_signals",
    "extract_heuristic_candidates",
    "build_renderer",
    "build_result",
    "scrape_event",
]
