"""URL validators and domain helpers."""

from .url_validator import absolutize, is_valid_url, organizer_from_domain, registrable_domain

__all__ = ["absolutize", "is_valid_url", "organizer_from_domain", "registrable_domain"]
