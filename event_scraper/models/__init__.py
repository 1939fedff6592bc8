"""Data models for the event scraper."""

from event_scraper.models.event import (
    Category,
    Confidence,
    EventFormat,
    Origin,
    PriceType,
    RawCandidateField,
    ScrapedEventData,
    ScrapeMeta,
    ScrapeResult,
)

__all__ = [
    "Category",
    "Confidence",
    "EventFormat",
    "Origin",
    "PriceType",
    "RawCandidateField",
    "ScrapedEventData",
    "ScrapeMeta",
    "ScrapeResult",
]
