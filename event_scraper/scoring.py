"""Confidence tier from signal provenance and required-field completeness."""

from typing import NamedTuple

from event_scraper.normalizers.fields import REQUIRED_FIELDS

REQUIRED_COUNT = len(REQUIRED_FIELDS)


class ConfidenceFeatures(NamedTuple):
    has_structured_signal: bool
    has_social_meta: bool
    populated_required: int


# Evaluated top to bottom; first matching rule wins.
# (tier, needs structured, needs structured-or-social, min populated required fields)
CONFIDENCE_RULES = (
    ("high", True, False, REQUIRED_COUNT),
    ("medium", False, True, REQUIRED_COUNT - 2),
)


def score_confidence(features: ConfidenceFeatures) -> str:
    """Rate a result 'high', 'medium' or 'low'. Monotonic in every input."""
    populated = min(max(features.populated_required, 0), REQUIRED_COUNT)
    any_signal = features.has_structured_signal or features.has_social_meta

    for tier, needs_structured, needs_signal, min_populated in CONFIDENCE_RULES:
        if needs_structured and not features.has_structured_signal:
            continue
        if needs_signal and not any_signal:
            continue
        if populated >= min_populated:
            return tier
    return "low"
