"""Raw candidate fields → canonical typed values.

Candidates arrive grouped by field name, structured candidates first. For
single-valued fields the first candidate that normalizes wins, so a
structured value beats a heuristic one and an unusable value falls through.
Nothing is guessed: an unparseable value is dropped.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, Optional

from event_scraper.models import RawCandidateField
from event_scraper.normalizers.location import fold, normalize_city, normalize_state, state_for_city
from event_scraper.normalizers.price import resolve_price
from event_scraper.normalizers.taxonomy import DEFAULT_CATEGORY, normalize_topics, resolve_category
from event_scraper.validators import absolutize, organizer_from_domain

# Fields that count toward confidence
REQUIRED_FIELDS = frozenset({
    "title", "start_date", "city", "state", "category", "format",
    "organizer_name", "event_url", "description",
})

# Fields without which there is no record at all
MINIMAL_FIELDS = ("title", "start_date", "city", "state")

SLUG_MAX_LENGTH = 80
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000

MONTHS = {
    # Portuguese
    "janeiro": 1, "fevereiro": 2, "marco": 3, "abril": 4, "maio": 5, "junho": 6,
    "julho": 7, "agosto": 8, "setembro": 9, "outubro": 10, "novembro": 11, "dezembro": 12,
    "jan": 1, "fev": 2, "mar": 3, "abr": 4, "mai": 5, "jun": 6,
    "jul": 7, "ago": 8, "set": 9, "out": 10, "nov": 11, "dez": 12,
    # English
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
    "feb": 2, "apr": 4, "aug": 8, "sep": 9, "sept": 9, "oct": 10, "dec": 12,
}
MONTH_NAMES = "|".join(sorted(MONTHS, key=len, reverse=True))

ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
NUMERIC_DATE_RE = re.compile(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{4}|\d{2})$")
# "15 de março de 2026", "15 mar 2026", "15 March 2026", "15 de março"
DAY_MONTH_RE = re.compile(
    rf"^(\d{{1,2}})(?:º|°|o)?\s+(?:de\s+)?({MONTH_NAMES})\.?(?:,?\s+(?:de\s+)?(\d{{4}}))?$"
)
# "March 15, 2026", "Mar 15 2026"
MONTH_DAY_RE = re.compile(rf"^({MONTH_NAMES})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?,?\s+(\d{{4}})$")

TIME_RE = re.compile(
    r"(\d{1,2})\s*(?::\s*(\d{2})(?::(\d{2}))?\s*(?:h|hs|hrs)?|h(?:rs|s)?\s*(\d{2})?)\s*(am|pm)?",
    re.I,
)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(raw: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """Parse ISO, dd/mm/yyyy, Portuguese and English date notations.

    Day-first is assumed for numeric dates. A day-month date without a year
    resolves to its next occurrence on or after today.
    """
    if not raw:
        return None
    text = raw.strip()

    match = ISO_DATE_RE.match(text)
    if match:
        return _safe_date(*(int(g) for g in match.groups()))

    folded = re.sub(r"\s+", " ", fold(text)).strip(" ,.")
    # Weekday prefixes ("sábado, 15 de março")
    folded = re.sub(r"^[a-z]+(?:-feira)?\.?,\s*", "", folded)

    match = NUMERIC_DATE_RE.match(folded)
    if match:
        day, month, year = (int(g) for g in match.groups())
        if year < 100:
            year += 2000
        return _safe_date(year, month, day)

    match = DAY_MONTH_RE.match(folded)
    if match:
        day, month_name, year = match.groups()
        month = MONTHS[month_name]
        if year:
            return _safe_date(int(year), month, int(day))
        today = today or date.today()
        candidate = _safe_date(today.year, month, int(day))
        if candidate and candidate < today:
            candidate = _safe_date(today.year + 1, month, int(day))
        return candidate

    match = MONTH_DAY_RE.match(folded)
    if match:
        month_name, day, year = match.groups()
        return _safe_date(int(year), MONTHS[month_name], int(day))

    return None


def parse_time(raw: Optional[str]) -> Optional[str]:
    """'19:30', '19h30', '19h', '19:30:00', '7:30 pm' → 'HH:MM' (24h)."""
    if not raw:
        return None
    match = TIME_RE.fullmatch(raw.strip())
    if not match:
        return None
    hour_s, minute_colon, second, minute_h, meridiem = match.groups()
    hour = int(hour_s)
    minute = int(minute_colon or minute_h or 0)
    if second is not None and int(second) > 59:
        return None
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        hour = hour % 12 + (12 if meridiem.lower() == "pm" else 0)
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def slugify(title: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """URL-safe slug: lowercase, no diacritics, hyphen-separated, capped."""
    slug = re.sub(r"[^a-z0-9]+", "-", fold(title)).strip("-")
    return slug[:max_length].rstrip("-")


def decide_format(has_physical: bool, has_online: bool) -> str:
    if has_physical and has_online:
        return "HIBRIDO"
    if has_physical:
        return "PRESENCIAL"
    return "ONLINE"


def clean_text(raw: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    if raw is None:
        return None
    text = re.sub(r"\s+", " ", raw).strip()
    if max_length:
        text = text[:max_length].strip()
    return text or None


def _parse_coordinate(raw: Optional[str], limit: float) -> Optional[float]:
    try:
        value = float(str(raw).replace(",", "."))
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or abs(value) > limit:
        return None
    return value


def _parse_structured_price(raw: str) -> Optional[float]:
    """Offer prices arrive as numbers; text prices go through price_text."""
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) and value > 0 else None


def _is_truthy(raw: str) -> bool:
    return raw.strip().lower() in ("true", "1", "yes", "sim")


def group_candidates(candidates: Iterable[RawCandidateField]) -> dict[str, list[RawCandidateField]]:
    """Group by name, structured candidates ahead of heuristic ones."""
    grouped: dict[str, list[RawCandidateField]] = {}
    for candidate in sorted(candidates, key=lambda c: c.origin != "structured"):
        grouped.setdefault(candidate.name, []).append(candidate)
    return grouped


def _first(
    grouped: dict[str, list[RawCandidateField]],
    name: str,
    convert: Callable[[str], object],
) -> Optional[object]:
    for candidate in grouped.get(name, []):
        value = convert(candidate.value)
        if value is not None and value != "":
            return value
    return None


# Converters used to decide whether a candidate is usable
FIELD_CONVERTERS: dict[str, Callable[[str], object]] = {
    "title": lambda v: clean_text(v, TITLE_MAX_LENGTH),
    "description": lambda v: clean_text(v, DESCRIPTION_MAX_LENGTH),
    "start_date": parse_date,
    "end_date": parse_date,
    "start_time": parse_time,
    "end_time": parse_time,
    "city": normalize_city,
    "state": normalize_state,
    "address": clean_text,
    "venue_name": lambda v: clean_text(v, 200),
    "latitude": lambda v: _parse_coordinate(v, 90.0),
    "longitude": lambda v: _parse_coordinate(v, 180.0),
    "category": resolve_category,
    "organizer_name": lambda v: clean_text(v, 200),
}


def usable_field_names(candidates: Iterable[RawCandidateField]) -> set[str]:
    """Names with at least one candidate that normalizes to a value."""
    names = set()
    for candidate in candidates:
        convert = FIELD_CONVERTERS.get(candidate.name)
        if convert is None:
            if candidate.value.strip():
                names.add(candidate.name)
        elif convert(candidate.value) not in (None, ""):
            names.add(candidate.name)
    return names


@dataclass
class NormalizedFields:
    """Keyword arguments for ScrapedEventData plus which required fields resolved."""

    values: dict = field(default_factory=dict)
    populated: set[str] = field(default_factory=set)

    @property
    def missing_minimal(self) -> list[str]:
        return [name for name in MINIMAL_FIELDS if self.values.get(name) in (None, "")]


def normalize_fields(
    candidates: Iterable[RawCandidateField],
    source_url: str,
    today: Optional[date] = None,
) -> NormalizedFields:
    """Normalize every output field from the merged candidates."""
    grouped = group_candidates(candidates)
    values: dict = {}
    populated: set[str] = set()

    for name, convert in FIELD_CONVERTERS.items():
        if name in ("start_date", "end_date"):
            values[name] = _first(grouped, name, lambda v: parse_date(v, today))
        else:
            values[name] = _first(grouped, name, convert)

    # Multi-day events never end before they start
    if values["start_date"] and values["end_date"] and values["end_date"] < values["start_date"]:
        values["end_date"] = None

    # A known city implies its state
    if not values["state"]:
        values["state"] = state_for_city(values["city"])

    # Category always resolves; the default counts once anything was extracted
    values["category"] = values["category"] or DEFAULT_CATEGORY
    if grouped:
        populated.add("category")

    values["topics"] = normalize_topics(c.value for c in grouped.get("topics", []))

    # Format from physical/online signals
    has_physical = bool(
        values["address"] or values["venue_name"]
        or _first(grouped, "physical_signal", lambda v: True if _is_truthy(v) else None)
    )
    has_online = bool(_first(grouped, "online_signal", lambda v: True if _is_truthy(v) else None))
    values["format"] = decide_format(has_physical, has_online)
    if has_physical or has_online:
        populated.add("format")

    # Tickets
    is_free = bool(_first(grouped, "is_free", lambda v: True if _is_truthy(v) else None))
    values["is_free"] = is_free
    if is_free:
        values["price_type"], values["price_value"] = None, None
    else:
        structured_value = _first(grouped, "price_value", _parse_structured_price)
        if structured_value is not None:
            hint = _first(grouped, "price_type", lambda v: v if v in ("a_partir_de", "unico") else None)
            values["price_type"], values["price_value"] = hint or "unico", structured_value
        else:
            values["price_type"], values["price_value"] = resolve_price(
                c.value for c in grouped.get("price_text", [])
            )

    # Links
    for name in ("ticket_url", "image_url", "organizer_url"):
        values[name] = _first(grouped, name, lambda v: absolutize(v, source_url))
    values["event_url"] = _first(grouped, "event_url", lambda v: absolutize(v, source_url)) or source_url

    if not values["organizer_name"]:
        values["organizer_name"] = organizer_from_domain(source_url)

    values["description"] = values["description"] or ""
    values["slug"] = slugify(values["title"]) if values["title"] else ""

    for name in REQUIRED_FIELDS - {"category", "format"}:
        if values.get(name) not in (None, ""):
            populated.add(name)

    return NormalizedFields(values=values, populated=populated)
