"""HTML heuristics for event data extraction.

When structured data leaves a field empty, fall back to pattern matching on
the visible text: dates and times near contextual keywords, prices near
currency and ticket words, Brazilian addresses, keyword dictionaries for
category/topics, and the page's domain for the organizer.

Every strategy is best-effort: no match means no candidate.
"""

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup
from rich.console import Console

from event_scraper.config import MAX_TEXT_LENGTH
from event_scraper.models import RawCandidateField
from event_scraper.normalizers.fields import MONTHS
from event_scraper.normalizers.location import MAIN_CITIES, UF_CODES, fold, state_for_city
from event_scraper.normalizers.price import normalize_price
from event_scraper.normalizers.taxonomy import best_category, match_topics
from event_scraper.validators import absolutize, organizer_from_domain

console = Console()

# Elements that never hold event content
NOISE_TAGS = ["script", "style", "nav", "footer", "header", "iframe", "noscript", "svg", "form"]
NOISE_ATTR_RE = re.compile(r"cookie|banner|popup|modal|sidebar|advert|\bads\b", re.I)

# --- Dates and times (matched on accent-folded, lowercased text) ---

DATE_KEYWORDS = ("data", "quando", "dia ", "date", "when", "inicio", "realizacao", "acontece")
TIME_KEYWORDS = ("horario", "hora", "as ", "inicio", "abertura", "time", "comeca")

_MONTHS = "|".join(sorted(MONTHS, key=len, reverse=True))
DATE_RANGE_RE = re.compile(
    rf"\b(\d{{1,2}})\s*(?:a|e|ate|-|–)\s*(\d{{1,2}})\s+de\s+({_MONTHS})(?:\s+de\s+(\d{{4}}))?\b"
)
DATE_PATTERNS = [
    # ISO: 2026-03-15
    re.compile(r"\b(\d{4}-\d{2}-\d{2})\b"),
    # Numeric, day first: 15/03/2026, 15.03.2026
    re.compile(r"\b(\d{1,2}/\d{1,2}/(?:\d{4}|\d{2}))\b"),
    re.compile(r"\b(\d{1,2}\.\d{1,2}\.\d{4})\b"),
    # Portuguese: 15 de março de 2026, 15 de março
    re.compile(rf"\b(\d{{1,2}}o?\s+de\s+(?:{_MONTHS})(?:\s+de\s+\d{{4}})?)\b"),
    # 15 mar 2026, 15 March 2026
    re.compile(rf"\b(\d{{1,2}}\s+(?:{_MONTHS})\.?,?\s+\d{{4}})\b"),
    # English: March 15, 2026
    re.compile(rf"\b((?:{_MONTHS})\.?\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}})\b"),
]

CLOCK = r"\d{1,2}(?::\d{2}|h\d{2}|h)"
TIME_RANGE_RE = re.compile(rf"(?<![\d:/.,])({CLOCK})(?:\s*(?:as|a|ate|-|–|to)\s*({CLOCK}))?(?![\d:])")

# --- Prices (matched on original text) ---

CURRENCY_RE = re.compile(r"R\$|US\$|\$|€")
PRICE_KEYWORD_RE = re.compile(
    r"ingressos?|pre[çc]os?|valor(?:es)?|investimento|lotes?|inscri[çc](?:ão|ões|ao|oes)|"
    r"prices?|tickets?",
    re.I,
)
NOT_AN_AMOUNT_RE = re.compile(
    r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b|\b\d{1,2}(?::\d{2}|h\d{0,2})(?!\d)|"
    r"\b\d{1,2}(?:º|°|ª|o|a)\s|\b(?:19|20)\d{2}\b"
)
FREE_RE = re.compile(
    r"\b(?:gratuit[oa]s?|gratis|entrada (?:franca|gratuita|livre)|sem custo|"
    r"free (?:entry|event|admission)|evento gratuito)\b"
)

# --- Location (matched on original text) ---

STREET_TYPES = (
    r"(?i:rua|r\.|avenida|av\.?|alameda|al\.|pra[çc]a|p[çc]a\.?|rodovia|rod\.|"
    r"estrada|travessa|largo|viaduto|parque)"
)
CITY_NAME = r"[A-ZÀ-Ý][\wÀ-ÿ'.]*(?:\s+(?:d[aeo]s?\s+)?[A-ZÀ-Ý][\wÀ-ÿ'.]*){0,3}"
ADDRESS_RE = re.compile(
    rf"\b({STREET_TYPES}\s+[^\d|•]{{2,60}}?,?\s*(?:n[º°o]\.?\s*)?\d{{1,5}}[^|•]{{0,60}}?)"
    rf"\s*[-–,/]\s*({CITY_NAME})\s*[-–,/]\s*([A-Z]{{2}})\b"
)
CITY_UF_RE = re.compile(rf"\b({CITY_NAME})\s*(?:-|–|/|,)\s*([A-Z]{{2}})\b")
VENUE_LEAD_RE = re.compile(r"^(?:local|endere[çc]o|onde|venue|location|where)\s*:?\s*", re.I)
VENUE_CONNECTORS = {"de", "do", "da", "dos", "das", "e", "&", "of", "the"}
CITY_STOPWORDS = frozenset({"lote", "ingresso", "ingressos", "evento", "local", "data"})

ONLINE_LINK_RE = re.compile(
    r"zoom\.us|meet\.google\.com|teams\.microsoft\.com|teams\.live\.com|youtube\.com/live|"
    r"youtu\.be|streamyard\.com|twitch\.tv|hopin\.com|on24\.com|webex\.com",
    re.I,
)
ONLINE_TEXT_RE = re.compile(
    r"\b(?:evento online|100% online|online e ao vivo|online ao vivo|transmissao ao vivo|"
    r"ao vivo pelo|via zoom|pelo zoom|google meet|microsoft teams|formato online|"
    r"evento virtual|online event|livestream|live stream)\b"
)

# --- Organizer and tickets ---

ORGANIZER_RE = re.compile(
    r"(?i:organiza[çc][ãa]o|organizado por|realiza[çc][ãa]o|realizado por|promovido por|"
    r"organized by|hosted by|produ[çc][ãa]o)\s*:?\s*"
    r"((?:[A-ZÀ-Ý0-9][\wÀ-ÿ&'.-]*)(?:\s+(?:[A-ZÀ-Ý0-9&][\wÀ-ÿ&'.-]*|de|do|da|dos|das)){0,7})"
)
TICKET_DOMAINS = (
    "sympla.com.br", "eventbrite.", "ingresse.com", "even3.com.br", "doity.com.br",
    "ticketmaster.", "blueticket.com.br", "ingressorapido.com.br", "uhuu.com",
    "lets.events", "bilheteriadigital.com", "meetup.com",
)
TICKET_TEXT_RE = re.compile(
    r"\b(?:ingressos?|inscreva-se|inscricoes|inscricao|comprar|garanta|tickets?|register|registrar)\b"
)


def _candidate(name: str, value: Optional[str]) -> Optional[RawCandidateField]:
    if value is None or not str(value).strip():
        return None
    return RawCandidateField(name=name, value=str(value).strip(), origin="heuristic")


def visible_text(soup: BeautifulSoup, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Body text without navigation, scripts, banners and forms. Mutates soup."""
    for tag in soup.find_all(NOISE_TAGS):
        tag.decompose()
    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        attrs = " ".join([tag.get("id") or ""] + list(tag.get("class") or []))
        if attrs.strip() and NOISE_ATTR_RE.search(attrs):
            tag.decompose()
    body = soup.body or soup
    text = body.get_text(separator=" ", strip=True)
    return re.sub(r"\s+", " ", text)[:max_length].strip()


def _near_keyword(folded: str, position: int, keywords: Iterable[str], window: int = 80) -> bool:
    before = folded[max(0, position - window):position]
    return any(keyword in before for keyword in keywords)


def find_dates(folded: str) -> tuple[Optional[str], Optional[str]]:
    """(start, end) raw date strings, preferring matches after date keywords."""
    matches: list[tuple[int, str, Optional[str]]] = []

    range_spans: list[tuple[int, int]] = []
    for match in DATE_RANGE_RE.finditer(folded):
        first, last, month, year = match.groups()
        suffix = f" de {month}" + (f" de {year}" if year else "")
        matches.append((match.start(), first + suffix, last + suffix))
        range_spans.append(match.span())

    seen_starts = set()
    for pattern in DATE_PATTERNS:
        for match in pattern.finditer(folded):
            if any(start <= match.start() < end for start, end in range_spans):
                continue  # Part of a range already seen
            if match.start() in seen_starts:
                continue
            seen_starts.add(match.start())
            matches.append((match.start(), match.group(1), None))

    if not matches:
        return None, None
    matches.sort(key=lambda m: m[0])
    preferred = [m for m in matches if _near_keyword(folded, m[0], DATE_KEYWORDS)]
    position, start, end = (preferred or matches)[0]

    if end is None:
        # "de 15/03/2026 a 17/03/2026": a second date right after the first
        following = [m for m in matches if position < m[0] <= position + len(start) + 12]
        if following:
            end = following[0][1]
    return start, end


def find_times(folded: str) -> tuple[Optional[str], Optional[str]]:
    """(start, end) raw clock strings, preferring matches after time keywords."""
    matches = [(m.start(), m.group(1), m.group(2)) for m in TIME_RANGE_RE.finditer(folded)]
    if not matches:
        return None, None
    preferred = [m for m in matches if _near_keyword(folded, m[0], TIME_KEYWORDS, window=30)]
    _, start, end = (preferred or matches)[0]
    return start, end


def find_price_fragments(text: str, limit: int = 10) -> list[str]:
    """Text blocks that probably describe a price, most specific first.

    Currency windows keep the words right before the symbol ("a partir de")
    but not earlier digits ("Lote 1 - "), so the first numeric token is the
    amount itself.
    """
    fragments: list[str] = []
    for match in CURRENCY_RE.finditer(text):
        before = text[max(0, match.start() - 30):match.start()]
        before = re.split(r"\d", before)[-1]
        fragments.append((before + text[match.start():match.end() + 20]).strip())
    for match in PRICE_KEYWORD_RE.finditer(text):
        window = text[match.start():match.end() + 60]
        # Dates and clock times near ticket words are not amounts
        window = NOT_AN_AMOUNT_RE.sub(" ", window)
        fragments.append(re.sub(r"\s+", " ", window).strip())
    return list(dict.fromkeys(fragments))[:limit]


def find_address(text: str) -> Optional[tuple[str, str, str, Optional[str]]]:
    """(address, city, uf, venue) for the first Brazilian street address."""
    for match in ADDRESS_RE.finditer(text):
        address, city, uf = match.groups()
        if uf not in UF_CODES:
            continue
        venue = find_venue(text[max(0, match.start() - 100):match.start()])
        return address.strip(" ,-–"), city.strip(), uf, venue
    return None


def find_venue(preceding: str) -> Optional[str]:
    """Capitalized phrase right before an address ('Teatro Gazeta - Av. ...')."""
    segments = [s.strip() for s in re.split(r"[-–,:|•·]|\s{2,}", preceding) if s.strip()]
    if not segments:
        return None
    venue = VENUE_LEAD_RE.sub("", segments[-1]).strip()
    words = venue.split()
    if not words or len(words) > 8:
        return None
    significant = [w for w in words if w.lower() not in VENUE_CONNECTORS]
    if significant and all(w[0].isupper() or w[0].isdigit() for w in significant):
        return venue
    return None


def find_city(text: str, folded: str) -> Optional[tuple[str, str]]:
    """(city, uf) from 'City - UF' style mentions or a known main city.

    A mention that agrees with the known-city table wins, then any known city
    named in the text, then the first plausible 'City - UF' pair.
    """
    pairs = [
        (city.strip(), uf)
        for city, uf in CITY_UF_RE.findall(text)
        if uf in UF_CODES and fold(city) not in CITY_STOPWORDS
    ]
    for city, uf in pairs:
        if state_for_city(city) == uf:
            return city, uf
    for city, uf in MAIN_CITIES.items():
        if re.search(rf"\b{re.escape(fold(city))}\b", folded):
            return city, uf
    return pairs[0] if pairs else None


def find_ticket_url(anchors: list[tuple[str, str]], source_url: str) -> Optional[str]:
    for href, _ in anchors:
        if any(domain in href.lower() for domain in TICKET_DOMAINS):
            return absolutize(href, source_url)
    for href, label in anchors:
        if TICKET_TEXT_RE.search(fold(label)):
            url = absolutize(href, source_url)
            if url:
                return url
    return None


def find_organizer(text: str) -> Optional[str]:
    match = ORGANIZER_RE.search(text)
    if not match:
        return None
    name = match.group(1).strip(" .-")
    return name if len(name) >= 2 else None


def extract_heuristic_candidates(
    html: str,
    source_url: str,
    skip: Iterable[str] = (),
) -> list[RawCandidateField]:
    """Best-effort candidates for every field not listed in skip."""
    skip = set(skip)
    soup = BeautifulSoup(html, "lxml")

    # Read title, description and links before noise removal
    heading = soup.find("h1") or soup.find("title")
    title = heading.get_text(" ", strip=True)[:200] if heading else None
    meta_desc = soup.find("meta", attrs={"name": "description"})
    anchors = [(a["href"], a.get_text(" ", strip=True)) for a in soup.find_all("a", href=True)]

    text = visible_text(soup)
    folded = fold(text)
    found: list[Optional[RawCandidateField]] = []

    if "title" not in skip:
        found.append(_candidate("title", title))

    if "description" not in skip:
        description = meta_desc.get("content") if meta_desc else None
        if not description:
            for p in soup.find_all("p"):
                p_text = p.get_text(" ", strip=True)
                if len(p_text) > 100:
                    description = p_text
                    break
        found.append(_candidate("description", description))

    if "start_date" not in skip:
        start, end = find_dates(folded)
        found.append(_candidate("start_date", start))
        if "end_date" not in skip:
            found.append(_candidate("end_date", end))

    if "start_time" not in skip:
        start, end = find_times(folded)
        found.append(_candidate("start_time", start))
        if "end_time" not in skip:
            found.append(_candidate("end_time", end))

    if not skip & {"price_value", "price_text", "is_free"}:
        fragments = find_price_fragments(text)
        found.extend(_candidate("price_text", f) for f in fragments)
        has_amount = any(normalize_price(f).has_numeric_token for f in fragments)
        if not has_amount and FREE_RE.search(folded):
            found.append(_candidate("is_free", "true"))

    address = find_address(text) if "address" not in skip else None
    if address:
        street, city, uf, venue = address
        found.append(_candidate("address", street))
        if "city" not in skip:
            found.append(_candidate("city", city))
        if "state" not in skip:
            found.append(_candidate("state", uf))
        if "venue_name" not in skip:
            found.append(_candidate("venue_name", venue))
    if not skip >= {"city", "state"}:
        city_uf = find_city(text, folded)
        if city_uf:
            found.append(_candidate("city", city_uf[0]))
            found.append(_candidate("state", city_uf[1]))

    if "online_signal" not in skip:
        online = ONLINE_TEXT_RE.search(folded) or any(ONLINE_LINK_RE.search(href) for href, _ in anchors)
        if online:
            found.append(_candidate("online_signal", "true"))

    if "category" not in skip:
        found.append(_candidate("category", best_category(title or "") or best_category(text)))

    if "topics" not in skip:
        found.extend(_candidate("topics", slug) for slug in match_topics(f"{title or ''} {text}"))

    if "organizer_name" not in skip:
        found.append(_candidate("organizer_name", find_organizer(text) or organizer_from_domain(source_url)))

    if "ticket_url" not in skip:
        found.append(_candidate("ticket_url", find_ticket_url(anchors, source_url)))

    candidates = [c for c in found if c is not None]
    console.print(f"[dim]Heuristics found {len(candidates)} candidates for {source_url[:60]}[/dim]")
    return candidates
