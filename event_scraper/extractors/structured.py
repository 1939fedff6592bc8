"""Extract structured signals from HTML (Schema.org JSON-LD, OpenGraph, Twitter cards).

JSON-LD blocks are treated as untyped documents: known properties are
projected defensively and anything malformed or not an Event is skipped on
its own, never failing the page.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from bs4 import BeautifulSoup
from rich.console import Console

from event_scraper.models import RawCandidateField

console = Console()

# Schema.org Event and its subtypes
EVENT_TYPES = frozenset({
    "Event", "BusinessEvent", "ChildrensEvent", "ComedyEvent", "CourseInstance",
    "DanceEvent", "DeliveryEvent", "EducationEvent", "EventSeries", "ExhibitionEvent",
    "Festival", "FoodEvent", "Hackathon", "LiteraryEvent", "MusicEvent",
    "PublicationEvent", "SaleEvent", "ScreeningEvent", "SocialEvent", "SportsEvent",
    "TheaterEvent", "VisualArtsEvent",
})

# Social-preview tag → candidate field
SOCIAL_TAGS = {
    "og:title": "title",
    "og:description": "description",
    "og:image": "image_url",
    "og:image:url": "image_url",
    "og:url": "event_url",
    "twitter:title": "title",
    "twitter:description": "description",
    "twitter:image": "image_url",
}


@dataclass
class StructuredSignals:
    """Candidates from machine-readable markup plus which signal kinds exist."""

    candidates: list[RawCandidateField] = field(default_factory=list)
    has_structured_signal: bool = False
    has_social_meta: bool = False


def _type_names(node: dict) -> list[str]:
    raw = node.get("@type", "")
    types = raw if isinstance(raw, list) else [raw]
    # "http://schema.org/Event" → "Event"
    return [t.rsplit("/", 1)[-1] for t in types if isinstance(t, str)]


def is_event_node(node: Any) -> bool:
    return isinstance(node, dict) and any(t in EVENT_TYPES for t in _type_names(node))


def _walk(data: Any, depth: int = 0) -> Iterator[dict]:
    """Yield every dict in a JSON-LD document, flattening lists and @graph."""
    if depth > 6:
        return
    if isinstance(data, list):
        for item in data:
            yield from _walk(item, depth + 1)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if graph is not None:
            yield from _walk(graph, depth + 1)


def extract_json_ld(soup: BeautifulSoup) -> list[Any]:
    """Parse every JSON-LD script; unparseable scripts are skipped."""
    blocks = []
    for script in soup.find_all("script", type=re.compile(r"application/ld\+json", re.I)):
        raw = script.string or script.get_text() or ""
        try:
            blocks.append(json.loads(raw))
        except (json.JSONDecodeError, TypeError):
            # Some CMSs emit trailing commas or HTML comments around the JSON
            cleaned = re.sub(r",\s*([}\]])", r"\1", raw.strip().strip("<!-->"))
            try:
                blocks.append(json.loads(cleaned))
            except (json.JSONDecodeError, TypeError):
                console.print("[dim]Skipping malformed JSON-LD block[/dim]")
    return blocks


def find_event_nodes(blocks: list[Any]) -> list[dict]:
    return [node for block in blocks for node in _walk(block) if is_event_node(node)]


def _text(value: Any) -> Optional[str]:
    """Scalar JSON value as a trimmed string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, dict):
        # {"@value": ...} or {"@id": ...}
        return _text(value.get("@value") or value.get("name"))
    return None


def _as_list(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _url_of(value: Any) -> Optional[str]:
    """URL from a string, an ImageObject-like dict or a list of either."""
    for item in _as_list(value):
        if isinstance(item, str) and item.strip():
            return item.strip()
        if isinstance(item, dict):
            url = item.get("url") or item.get("contentUrl") or item.get("@id")
            if isinstance(url, str) and url.strip():
                return url.strip()
    return None


def _split_datetime(raw: str) -> tuple[str, Optional[str]]:
    """'2026-03-15T19:00:00-03:00' → ('2026-03-15', '19:00')."""
    match = re.match(r"^(\d{4}-\d{1,2}-\d{1,2})[T ](\d{1,2}:\d{2})", raw)
    if match:
        time = match.group(2)
        # Date-only values serialized as midnight carry no time information
        return match.group(1), None if time in ("00:00", "0:00") else time
    return raw, None


class _Collector:
    """Accumulates structured candidates, first value per name wins."""

    def __init__(self):
        self.candidates: list[RawCandidateField] = []
        self._seen: set[tuple[str, str]] = set()

    def add(self, name: str, value: Any) -> None:
        text = _text(value)
        if text is None or (name, text) in self._seen:
            return
        self._seen.add((name, text))
        self.candidates.append(RawCandidateField(name=name, value=text, origin="structured"))


def _project_location(location: Any, out: _Collector) -> None:
    for place in _as_list(location):
        if isinstance(place, str):
            out.add("address", place)
            continue
        if not isinstance(place, dict):
            continue
        if "VirtualLocation" in _type_names(place):
            out.add("online_signal", "true")
            continue
        out.add("physical_signal", "true")
        out.add("venue_name", place.get("name"))
        address = place.get("address")
        for addr in _as_list(address):
            if isinstance(addr, str):
                out.add("address", addr)
            elif isinstance(addr, dict):
                out.add("address", addr.get("streetAddress"))
                out.add("city", addr.get("addressLocality"))
                out.add("state", addr.get("addressRegion"))
        geo = place.get("geo")
        if isinstance(geo, dict):
            out.add("latitude", geo.get("latitude"))
            out.add("longitude", geo.get("longitude"))


def _project_offers(offers: Any, out: _Collector) -> None:
    prices: list[float] = []
    price_texts: list[str] = []
    starting_from = False
    for offer in _as_list(offers):
        if not isinstance(offer, dict):
            continue
        out.add("ticket_url", offer.get("url"))
        if offer.get("lowPrice") is not None:
            starting_from = True
        for key in ("lowPrice", "price"):
            value = offer.get(key)
            if isinstance(value, bool) or value is None:
                continue
            if isinstance(value, (int, float)):
                prices.append(float(value))
            elif isinstance(value, str) and value.strip():
                try:
                    prices.append(float(value))
                except ValueError:
                    price_texts.append(value)
            break

    positive = sorted(p for p in prices if p > 0)
    if positive:
        out.add("price_value", positive[0])
        # Several distinct prices (ticket tiers) read as "starting from" the lowest
        differs = len(set(positive)) > 1
        out.add("price_type", "a_partir_de" if starting_from or differs else "unico")
    elif prices and not price_texts and all(p == 0 for p in prices):
        out.add("is_free", "true")
    for text in price_texts:
        out.add("price_text", text)


def _project_organizer(organizer: Any, out: _Collector) -> None:
    for org in _as_list(organizer):
        if isinstance(org, str):
            out.add("organizer_name", org)
        elif isinstance(org, dict):
            out.add("organizer_name", org.get("name"))
            out.add("organizer_url", _url_of(org.get("url")))


# Event subtypes that pin down a category
TYPE_CATEGORIES = {
    "Hackathon": "HACKATHON",
    "CourseInstance": "CURSO",
}

ATTENDANCE_SIGNALS = {
    "OfflineEventAttendanceMode": ("physical_signal",),
    "OnlineEventAttendanceMode": ("online_signal",),
    "MixedEventAttendanceMode": ("physical_signal", "online_signal"),
}


def project_event(node: dict) -> list[RawCandidateField]:
    """Project the known properties of one Event node into candidates."""
    out = _Collector()

    out.add("title", node.get("name"))
    out.add("description", node.get("description"))
    out.add("event_url", _url_of(node.get("url")))
    out.add("image_url", _url_of(node.get("image")))

    for prop, date_name, time_name in (
        ("startDate", "start_date", "start_time"),
        ("endDate", "end_date", "end_time"),
    ):
        raw = _text(node.get(prop))
        if raw:
            day, time = _split_datetime(raw)
            out.add(date_name, day)
            out.add(time_name, time)

    _project_location(node.get("location"), out)

    mode = _text(node.get("eventAttendanceMode")) or ""
    for name in ATTENDANCE_SIGNALS.get(mode.rsplit("/", 1)[-1], ()):
        out.add(name, "true")

    _project_offers(node.get("offers"), out)
    if node.get("isAccessibleForFree") in (True, "true", "True"):
        out.add("is_free", "true")

    _project_organizer(node.get("organizer"), out)

    keywords = node.get("keywords")
    if isinstance(keywords, str):
        keywords = [k.strip() for k in keywords.split(",")]
    for keyword in _as_list(keywords)[:20]:
        out.add("topics", keyword)

    for type_name in _type_names(node):
        out.add("category", TYPE_CATEGORIES.get(type_name))

    return out.candidates


def extract_social_meta(soup: BeautifulSoup) -> list[RawCandidateField]:
    """OpenGraph / Twitter card tags and the canonical link."""
    out = _Collector()

    for meta in soup.find_all("meta"):
        key = (meta.get("property") or meta.get("name") or "").strip().lower()
        content = meta.get("content") or ""
        if key in SOCIAL_TAGS and content.strip():
            out.add(SOCIAL_TAGS[key], content)

    canonical = soup.find("link", rel="canonical")
    if canonical and canonical.get("href"):
        out.add("event_url", canonical["href"])

    return out.candidates


def has_social_tags(soup: BeautifulSoup) -> bool:
    for meta in soup.find_all("meta"):
        key = (meta.get("property") or meta.get("name") or "").strip().lower()
        if key.startswith(("og:", "twitter:")) and (meta.get("content") or "").strip():
            return True
    return False


def extract_structured_signals(html: str) -> StructuredSignals:
    """Extract candidates from JSON-LD Events and social-preview tags.

    Event blocks come first so their values win over social tags.
    """
    soup = BeautifulSoup(html, "lxml")
    signals = StructuredSignals()

    for node in find_event_nodes(extract_json_ld(soup)):
        signals.has_structured_signal = True
        try:
            signals.candidates.extend(project_event(node))
        except (AttributeError, TypeError, ValueError) as e:
            console.print(f"[dim]Skipping unusable Event block: {e}[/dim]")

    signals.has_social_meta = has_social_tags(soup)
    signals.candidates.extend(extract_social_meta(soup))

    return signals
