"""Normalizers: price, fields, taxonomy, location."""

from event_scraper.normalizers.price import normalize_price, resolve_price, PriceParse
from event_scraper.normalizers.fields import (
    normalize_fields,
    parse_date,
    parse_time,
    slugify,
    NormalizedFields,
    REQUIRED_FIELDS,
)

__all__ = [
    "normalize_price",
    "resolve_price",
    "PriceParse",
    "normalize_fields",
    "parse_date",
    "parse_time",
    "slugify",
    "NormalizedFields",
    "REQUIRED_FIELDS",
]
