"""Shared test fixtures and configuration."""

import asyncio
import copy
import json
from datetime import date
from typing import Optional

import pytest

from event_scraper.extractors.fetch import FetchResult

EVENT_JSON_LD = {
    "@context": "https://schema.org",
    "@type": "Event",
    "name": "Conferência Growth Marketing 2026",
    "description": "O maior encontro de growth e marketing de performance do Brasil.",
    "startDate": "2026-11-20T09:00:00-03:00",
    "endDate": "2026-11-21T18:00:00-03:00",
    "eventAttendanceMode": "https://schema.org/OfflineEventAttendanceMode",
    "location": {
        "@type": "Place",
        "name": "Expo Center Norte",
        "address": {
            "@type": "PostalAddress",
            "streetAddress": "Rua José Bernardo Pinto, 333",
            "addressLocality": "São Paulo",
            "addressRegion": "SP",
        },
    },
    "offers": [
        {"@type": "Offer", "price": "497.00", "priceCurrency": "BRL",
         "url": "https://www.sympla.com.br/evento/growth-2026"},
        {"@type": "Offer", "price": "897.00", "priceCurrency": "BRL",
         "url": "https://www.sympla.com.br/evento/growth-2026"},
    ],
    "organizer": {"@type": "Organization", "name": "Growth Brasil", "url": "https://growthbrasil.com.br"},
    "image": "https://growthconf.com.br/img/banner.jpg",
    "url": "https://growthconf.com.br/2026",
    "keywords": "growth, seo, inteligência artificial",
}


def event_page(json_ld: dict, body: str = "<h1>Evento</h1>") -> str:
    return (
        "<html><head><title>Evento</title>"
        f'<script type="application/ld+json">{json.dumps(json_ld, ensure_ascii=False)}</script>'
        f"</head><body>{body}</body></html>"
    )


@pytest.fixture
def today() -> date:
    return date(2026, 1, 10)


@pytest.fixture
def full_event_html() -> str:
    """Complete JSON-LD Event plus social-preview tags."""
    return f"""<html>
<head>
  <title>Conferência Growth Marketing 2026</title>
  <meta property="og:title" content="Conferência Growth Marketing 2026">
  <meta property="og:image" content="https://growthconf.com.br/img/og.jpg">
  <script type="application/ld+json">{json.dumps(EVENT_JSON_LD, ensure_ascii=False)}</script>
</head>
<body>
  <h1>Conferência Growth Marketing 2026</h1>
  <p>Dois dias de conteúdo com os maiores nomes do mercado.</p>
</body>
</html>"""


@pytest.fixture
def social_only_html() -> str:
    """Social-preview tags only; dates, price and location live in the body text."""
    return """<html>
<head>
  <title>Workshop de SEO Avançado | Agência X</title>
  <meta property="og:title" content="Workshop de SEO Avançado">
  <meta property="og:description" content="Aprenda técnicas avançadas de SEO na prática.">
  <meta property="og:image" content="/img/seo.png">
  <meta property="og:url" content="https://agenciax.com.br/workshop-seo">
</head>
<body>
  <h1>Workshop de SEO Avançado</h1>
  <p>Data: 15 de março de 2026</p>
  <p>Horário: 19h às 22h</p>
  <p>Local: Espaço Cultural Vila - Rua Augusta, 1500 - São Paulo - SP</p>
  <p>Ingressos: R$ 149,90</p>
</body>
</html>"""


@pytest.fixture
def no_event_html() -> str:
    return """<html>
<head><title>Sobre nós</title></head>
<body><h1>Sobre nós</h1><p>Somos uma agência de marketing digital.</p></body>
</html>"""


class FakeRenderer:
    """Renderer double returning canned HTML, optionally after a delay."""

    method = "static"

    def __init__(self, html: str = "", delay: float = 0.0, result: Optional[FetchResult] = None):
        self.html = html
        self.delay = delay
        self.result = result
        self.calls = 0

    async def render(self, url: str, timeout: float) -> FetchResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.result is not None:
            return self.result
        return FetchResult(
            html=self.html,
            final_url=url,
            method=self.method,
            http_status=200,
            content_type="text/html; charset=utf-8",
        )


@pytest.fixture
def fake_renderer():
    return FakeRenderer


@pytest.fixture
def event_json_ld() -> dict:
    return copy.deepcopy(EVENT_JSON_LD)


@pytest.fixture
def make_event_page():
    return event_page
