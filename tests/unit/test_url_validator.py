"""Tests for URL validation and domain helpers."""

import pytest
from event_scraper.validators import absolutize, is_valid_url, organizer_from_domain, registrable_domain


class TestIsValidUrl:
    @pytest.mark.parametrize("url", [
        "https://www.sympla.com.br/evento/growth-2026/123",
        "http://example.com",
        "http://localhost:8080/evento",
        "http://127.0.0.1/evento",
    ])
    def test_valid(self, url: str):
        assert is_valid_url(url)

    @pytest.mark.parametrize("url", [
        "",
        None,
        "not a url",
        "example.com/evento",
        "ftp://example.com/file",
        "https://",
        "https://intranet/evento",
        "https://example.com:99999/",
        "javascript:alert(1)",
    ])
    def test_invalid(self, url):
        assert not is_valid_url(url)


class TestDomainHelpers:
    @pytest.mark.parametrize("url,expected", [
        ("https://www.sympla.com.br/evento/x", "sympla.com.br"),
        ("https://eventos.rdstation.com/growth", "rdstation.com"),
        ("https://example.com", "example.com"),
        ("http://localhost:8080", "localhost"),
    ])
    def test_registrable_domain(self, url: str, expected: str):
        assert registrable_domain(url) == expected

    @pytest.mark.parametrize("url,expected", [
        ("https://www.rd-station.com/evento", "Rd Station"),
        ("https://growthconf.com.br/2026", "Growthconf"),
        ("http://10.0.0.1/evento", None),
    ])
    def test_organizer_from_domain(self, url: str, expected):
        assert organizer_from_domain(url) == expected

    @pytest.mark.parametrize("link,expected", [
        ("/img/a.png", "https://example.com/img/a.png"),
        ("ingressos", "https://example.com/eventos/ingressos"),
        ("https://cdn.example.com/a.png", "https://cdn.example.com/a.png"),
        ("mailto:contato@example.com", None),
        ("", None),
        (None, None),
    ])
    def test_absolutize(self, link, expected):
        assert absolutize(link, "https://example.com/eventos/growth") == expected
