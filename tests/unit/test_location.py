"""Tests for the Brazilian location normalizer."""

import pytest
from event_scraper.normalizers.location import (
    BR_STATES,
    fold,
    normalize_city,
    normalize_state,
    state_for_city,
)


class TestNormalizeState:
    """Tests for UF resolution."""

    @pytest.mark.parametrize("raw,expected", [
        ("SP", "SP"),
        ("sp", "SP"),
        (" RJ. ", "RJ"),
        ("São Paulo", "SP"),
        ("sao paulo", "SP"),
        ("Minas Gerais", "MG"),
        ("Rio Grande do Sul", "RS"),
        ("BR-PE", "PE"),
    ])
    def test_codes_and_names(self, raw: str, expected: str):
        assert normalize_state(raw) == expected

    @pytest.mark.parametrize("raw", ["XX", "California", "", None])
    def test_unknown(self, raw):
        assert normalize_state(raw) is None

    def test_all_states_present(self):
        assert len(BR_STATES) == 27


class TestCities:
    """Tests for city cleanup and main-city lookup."""

    @pytest.mark.parametrize("raw,expected", [
        ("sao paulo", "São Paulo"),
        ("  Florianopolis ", "Florianópolis"),
        ("Ribeirão  Preto", "Ribeirão Preto"),
    ])
    def test_normalize_city(self, raw: str, expected: str):
        assert normalize_city(raw) == expected

    def test_blank_city(self):
        assert normalize_city(" - ") is None

    @pytest.mark.parametrize("city,uf", [
        ("Belo Horizonte", "MG"),
        ("brasilia", "DF"),
        ("Campinas", "SP"),
        ("Ribeirão Preto", None),
        (None, None),
    ])
    def test_state_for_city(self, city, uf):
        assert state_for_city(city) == uf

    def test_fold(self):
        assert fold("Goiânia ") == "goiania"
