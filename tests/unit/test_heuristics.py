"""Tests for HTML heuristics."""

import pytest
from event_scraper.extractors.heuristics import (
    extract_heuristic_candidates,
    find_address,
    find_city,
    find_dates,
    find_organizer,
    find_price_fragments,
    find_ticket_url,
    find_times,
)
from event_scraper.normalizers.location import fold
from event_scraper.normalizers.price import resolve_price

SOURCE_URL = "https://agenciax.com.br/workshop-seo"


def values(candidates, name: str) -> list[str]:
    return [c.value for c in candidates if c.name == name]


class TestDates:
    """Tests for date and time spotting."""

    @pytest.mark.parametrize("text,expected", [
        ("Data: 15 de março de 2026", ("15 de marco de 2026", None)),
        ("Quando: 15 a 17 de março de 2026", ("15 de marco de 2026", "17 de marco de 2026")),
        ("De 15/03/2026 a 17/03/2026", ("15/03/2026", "17/03/2026")),
        ("Publicado em 01/01/2026. Data do evento: 20/04/2026", ("20/04/2026", None)),
        ("Sem data definida", (None, None)),
    ])
    def test_find_dates(self, text: str, expected):
        assert find_dates(fold(text)) == expected

    @pytest.mark.parametrize("text,expected", [
        ("Horário: 19h às 22h", ("19h", "22h")),
        ("das 9:00 - 18:00", ("9:00", "18:00")),
        ("Abertura às 8h30", ("8h30", None)),
        ("Sem horário", (None, None)),
    ])
    def test_find_times(self, text: str, expected):
        assert find_times(fold(text)) == expected


class TestPrices:
    """Tests for price fragment spotting."""

    def test_currency_fragment_keeps_starting_from_words(self):
        fragments = find_price_fragments("Ingressos a partir de R$ 89,90 no site")
        assert resolve_price(fragments) == ("a_partir_de", pytest.approx(89.9))

    def test_earlier_digits_do_not_become_the_price(self):
        fragments = find_price_fragments("Lote 1 - R$ 50,00")
        assert resolve_price(fragments) == ("unico", pytest.approx(50.0))

    def test_dates_near_ticket_words_are_not_amounts(self):
        fragments = find_price_fragments("Ingressos à venda até 10/03 às 18h")
        assert resolve_price(fragments) == ("nao_informado", None)

    def test_no_price(self):
        assert find_price_fragments("Um texto qualquer") == []


class TestLocation:
    """Tests for address and city spotting."""

    def test_address_with_venue(self):
        text = "Local: Espaço Cultural Vila - Rua Augusta, 1500 - São Paulo - SP"
        assert find_address(text) == ("Rua Augusta, 1500", "São Paulo", "SP", "Espaço Cultural Vila")

    def test_avenue_without_venue(self):
        address, city, uf, venue = find_address("fica na Av. Afonso Pena, 1537, Belo Horizonte/MG")
        assert (city, uf) == ("Belo Horizonte", "MG")
        assert address.startswith("Av. Afonso Pena")
        assert venue is None

    def test_unknown_uf_is_not_an_address(self):
        assert find_address("Rua das Flores, 10 - Lisboa - PT") is None

    @pytest.mark.parametrize("text,expected", [
        ("Meetup em Curitiba - PR", ("Curitiba", "PR")),
        ("Joinville/SC, centro de eventos", ("Joinville", "SC")),
        ("O evento acontece em Recife", ("Recife", "PE")),
        ("Lote - SP esgotado em Salvador", ("Salvador", "BA")),
        ("Nenhuma cidade aqui", None),
    ])
    def test_find_city(self, text: str, expected):
        assert find_city(text, fold(text)) == expected


class TestLinksAndOrganizer:
    def test_ticket_platform_wins(self):
        anchors = [("/inscricao", "Inscreva-se"), ("https://www.sympla.com.br/evento/1", "Sympla")]
        assert find_ticket_url(anchors, SOURCE_URL) == "https://www.sympla.com.br/evento/1"

    def test_ticket_label(self):
        anchors = [("/sobre", "Sobre"), ("/comprar", "Comprar ingresso")]
        assert find_ticket_url(anchors, SOURCE_URL) == "https://agenciax.com.br/comprar"

    @pytest.mark.parametrize("text,expected", [
        ("Realização: Agência X Digital", "Agência X Digital"),
        ("Evento organizado por Growth Brasil em parceria com a comunidade", "Growth Brasil"),
        ("Texto sem organizador", None),
    ])
    def test_find_organizer(self, text: str, expected):
        assert find_organizer(text) == expected


class TestExtractHeuristicCandidates:
    """Tests for the full heuristic pass."""

    def test_social_only_page(self, social_only_html: str):
        c = extract_heuristic_candidates(social_only_html, SOURCE_URL)
        assert values(c, "title") == ["Workshop de SEO Avançado"]
        assert values(c, "start_date") == ["15 de marco de 2026"]
        assert values(c, "start_time") == ["19h"]
        assert values(c, "end_time") == ["22h"]
        assert values(c, "address") == ["Rua Augusta, 1500"]
        assert values(c, "venue_name") == ["Espaço Cultural Vila"]
        assert "São Paulo" in values(c, "city")
        assert "SP" in values(c, "state")
        assert values(c, "category") == ["WORKSHOP"]
        assert "seo" in values(c, "topics")
        assert values(c, "organizer_name") == ["Agenciax"]
        assert values(c, "is_free") == []
        assert resolve_price(values(c, "price_text")) == ("unico", pytest.approx(149.9))
        assert all(candidate.origin == "heuristic" for candidate in c)

    def test_skip_leaves_fields_alone(self, social_only_html: str):
        skip = {"title", "start_date", "start_time", "price_value", "address", "city", "state"}
        c = extract_heuristic_candidates(social_only_html, SOURCE_URL, skip=skip)
        for name in ("title", "start_date", "end_date", "start_time", "price_text", "address", "city"):
            assert values(c, name) == []

    def test_free_event(self):
        html = "<html><body><h1>Meetup de Growth</h1><p>Evento gratuito, vagas limitadas.</p></body></html>"
        c = extract_heuristic_candidates(html, SOURCE_URL)
        assert values(c, "is_free") == ["true"]

    def test_free_word_with_amount_is_not_free(self):
        html = "<html><body><p>Palestra gratuita para alunos. Demais: R$ 40,00</p></body></html>"
        c = extract_heuristic_candidates(html, SOURCE_URL)
        assert values(c, "is_free") == []

    def test_online_event(self):
        html = '<html><body><p>Evento online ao vivo</p><a href="https://zoom.us/j/123">Sala</a></body></html>'
        c = extract_heuristic_candidates(html, SOURCE_URL)
        assert values(c, "online_signal") == ["true"]

    def test_noise_is_ignored(self):
        html = (
            "<html><body><nav>Curitiba - PR</nav>"
            '<div class="cookie-banner">Aceite os cookies em Recife</div>'
            "<p>Conteúdo</p></body></html>"
        )
        c = extract_heuristic_candidates(html, SOURCE_URL)
        assert values(c, "city") == []
