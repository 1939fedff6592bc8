"""Tests for category and topic resolution."""

import pytest
from event_scraper.normalizers.taxonomy import (
    CATEGORIES,
    TOPIC_SLUGS,
    best_category,
    match_topics,
    normalize_topics,
    resolve_category,
)


class TestCategories:
    """Tests for category keyword matching."""

    @pytest.mark.parametrize("text,expected", [
        ("Workshop de SEO Avançado", "WORKSHOP"),
        ("Conferência Nacional de Marketing", "CONFERENCIA"),
        ("Meetup de Growth em Curitiba", "MEETUP"),
        ("Webinar: tendências de IA", "WEBINAR"),
        ("Curso intensivo de tráfego pago", "CURSO"),
        ("Palestra com o CMO da empresa", "PALESTRA"),
        ("Hackathon de Dados 2026", "HACKATHON"),
    ])
    def test_best_category(self, text: str, expected: str):
        assert best_category(text) == expected

    def test_no_keyword_means_no_category(self):
        assert best_category("Sobre nós") is None
        assert best_category("") is None

    def test_most_distinct_hits_wins(self):
        """Two workshop terms beat one conference term."""
        assert best_category("Oficina hands-on na feira") == "WORKSHOP"

    def test_tie_keeps_first_category(self):
        assert best_category("Workshop e meetup") == "WORKSHOP"

    def test_keywords_match_whole_words(self):
        """'aula' inside 'Paula' is not a course."""
        assert best_category("Ana Paula apresenta") is None

    @pytest.mark.parametrize("raw,expected", [
        ("WORKSHOP", "WORKSHOP"),
        ("workshop", "WORKSHOP"),
        ("Workshops", "WORKSHOP"),
        ("Conferências", "CONFERENCIA"),
        ("Hackathon", "HACKATHON"),
        ("Imersão presencial", "CURSO"),
    ])
    def test_resolve_category(self, raw: str, expected: str):
        assert resolve_category(raw) == expected
        assert resolve_category(raw) in CATEGORIES

    def test_resolve_unknown(self):
        assert resolve_category("Outro") is None
        assert resolve_category(None) is None


class TestTopics:
    """Tests for topic matching."""

    def test_matches_multiple_topics(self):
        topics = match_topics("Curso de SEO e tráfego pago com Google Ads")
        assert "seo" in topics
        assert "midia-paga" in topics

    def test_results_are_known_slugs(self):
        topics = match_topics("Growth, branding, CRM, UX, e-commerce, podcast e liderança")
        assert topics
        assert set(topics) <= TOPIC_SLUGS

    def test_limit(self):
        text = "growth branding seo crm ux ecommerce podcast comunidade lideranca newsletter"
        assert len(match_topics(text)) == 5
        assert len(match_topics(text, limit=2)) == 2

    def test_short_terms_need_word_boundaries(self):
        """'ia' inside 'mídia' is not artificial intelligence."""
        assert "inteligencia-artificial" not in match_topics("mídia social")

    def test_normalize_keeps_slugs_and_dedupes(self):
        assert normalize_topics(["growth", "Inteligência Artificial", "growth", " "]) == [
            "growth",
            "inteligencia-artificial",
        ]

    def test_normalize_unknown_topic_dropped(self):
        assert normalize_topics(["astronomia"]) == []
