"""Price text → (price_type, price_value).

Single implementation shared by live extraction and the offline price
backfill (event_scraper.scripts.backfill_prices). Both must produce identical
results for identical text, so any change here changes stored data semantics.

Brazilian and English notations are both accepted:

    "R$ 1.490,00"          → unico, 1490.0
    "A partir de R$ 99,90" → a_partir_de, 99.9
    "$1,299.50"            → unico, 1299.5
    "1.300"                → unico, 1.3   (dot-only: parsed as-is, kept for
                                            consistency with stored values)
    "Grátis"               → unico, None  (no numeric token)
"""

import math
import re
from typing import Iterable, NamedTuple, Optional

# "Starting from" signal words, Portuguese and English
STARTING_FROM_RE = re.compile(r"a partir|from|partir|starting|desde|min\.|mín\.|mínimo|minimo", re.I)

# 1-3 leading digits, 3-digit groups, optional 1-2 digit fraction
PRICE_TOKEN_RE = re.compile(r"\d{1,3}(?:[.,]\d{3})*(?:[.,]\d{1,2})?")


class PriceParse(NamedTuple):
    price_type: str  # "a_partir_de" or "unico"
    price_value: Optional[float]
    has_numeric_token: bool


def classify_price_type(text: str) -> str:
    """'a_partir_de' if the text carries a starting-from signal, else 'unico'."""
    return "a_partir_de" if STARTING_FROM_RE.search(text) else "unico"


def find_price_token(text: str) -> Optional[str]:
    match = PRICE_TOKEN_RE.search(text)
    return match.group(0) if match else None


def parse_price_number(token: str) -> Optional[float]:
    """Disambiguate the decimal separator of a matched token and parse it."""
    last_comma = token.rfind(",")
    last_dot = token.rfind(".")

    if last_comma > last_dot:
        # Comma is the decimal mark (also covers "comma, no dot")
        normalized = token.replace(".", "")
        head, _, tail = normalized.rpartition(",")
        normalized = head.replace(",", "") + "." + tail
    else:
        normalized = token.replace(",", "")

    try:
        value = float(normalized)
    except ValueError:
        return None

    if not math.isfinite(value) or value <= 0:
        return None
    return value


def normalize_price(text: str) -> PriceParse:
    """Classify and parse one free-text price fragment. Pure, no I/O."""
    price_type = classify_price_type(text)
    token = find_price_token(text)
    if token is None:
        return PriceParse(price_type, None, False)
    return PriceParse(price_type, parse_price_number(token), True)


def resolve_price(fragments: Iterable[str]) -> tuple[str, Optional[float]]:
    """Final (price_type, price_value) for a set of price fragments.

    The first fragment with a numeric token decides. When no fragment has any
    numeric token the price is 'nao_informado'. Callers handle is_free.
    """
    for fragment in fragments:
        if not fragment:
            continue
        parsed = normalize_price(fragment)
        if parsed.has_numeric_token:
            return parsed.price_type, parsed.price_value
    return "nao_informado", None
