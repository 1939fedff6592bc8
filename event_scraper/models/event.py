"""Data models for scraped events."""

from datetime import date, datetime, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from event_scraper.errors import ExtractionError, FetchError

Origin = Literal["structured", "heuristic"]
Category = Literal[
    "CONFERENCIA", "WORKSHOP", "MEETUP", "WEBINAR", "CURSO", "PALESTRA", "HACKATHON",
]
EventFormat = Literal["PRESENCIAL", "ONLINE", "HIBRIDO"]
PriceType = Literal["a_partir_de", "unico", "nao_informado"]
Confidence = Literal["high", "medium", "low"]


class RawCandidateField(BaseModel):
    """A raw value for one output field, before normalization."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    origin: Origin


class ScrapedEventData(BaseModel):
    """Normalized event record handed to moderation as a pending submission."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    description: str = ""

    # Dates
    start_date: date
    end_date: Optional[date] = None
    start_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")  # "HH:MM"
    end_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")

    # Location
    city: str = Field(min_length=1)
    state: str = Field(pattern=r"^[A-Z]{2}$")  # UF
    address: Optional[str] = None
    venue_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Classification
    category: Category = "CONFERENCIA"
    topics: tuple[str, ...] = ()
    format: EventFormat = "PRESENCIAL"

    # Tickets
    is_free: bool = False
    price_type: Optional[PriceType] = None
    price_value: Optional[float] = Field(default=None, gt=0)
    ticket_url: Optional[str] = None

    # Links
    event_url: str = Field(min_length=1)
    image_url: Optional[str] = None

    # Organizer
    organizer_name: str = Field(min_length=1)
    organizer_url: Optional[str] = None

    slug: str

    @model_validator(mode="before")
    @classmethod
    def clear_price_when_free(cls, values):
        if isinstance(values, dict) and values.get("is_free"):
            values = {**values, "price_type": None, "price_value": None}
        return values

    def to_submission(self) -> dict:
        """Plain JSON-ready dict for the persistence layer."""
        return self.model_dump(mode="json")


class ScrapeMeta(BaseModel):
    """Provenance and reliability of a scrape."""

    model_config = ConfigDict(frozen=True)

    source_url: str
    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    has_structured_signal: bool = False
    has_social_meta: bool = False
    confidence: Confidence = "low"
    populated_required: int = 0
    fetch_method: Optional[str] = None  # "playwright" or "static"


class ScrapeResult(BaseModel):
    """Outcome of one scrape: either data + meta, or a typed error."""

    model_config = ConfigDict(frozen=True)

    data: Optional[ScrapedEventData] = None
    meta: Optional[ScrapeMeta] = None
    error: Optional[Union[FetchError, ExtractionError]] = None

    @model_validator(mode="after")
    def check_exclusive(self):
        if self.error is not None and (self.data is not None or self.meta is not None):
            raise ValueError("a failed scrape carries no partial data")
        if self.error is None and (self.data is None or self.meta is None):
            raise ValueError("a successful scrape needs data and meta")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: ScrapedEventData, meta: ScrapeMeta) -> "ScrapeResult":
        return cls(data=data, meta=meta)

    @classmethod
    def failure(cls, error: Union[FetchError, ExtractionError]) -> "ScrapeResult":
        return cls(error=error)

    def to_response(self) -> dict:
        """JSON body for the HTTP boundary."""
        if self.error is not None:
            return {"success": False, "error": self.error.message, "kind": self.error.kind.value}
        return {
            "success": True,
            "data": self.data.model_dump(mode="json"),
            "meta": self.meta.model_dump(mode="json"),
        }
