"""Tests for the offline price backfill."""

import json

import pytest
from event_scraper.models import RawCandidateField
from event_scraper.normalizers.fields import normalize_fields
from event_scraper.scripts.backfill_prices import backfill_file, backfill_price, backfill_records


class TestBackfillPrice:
    """Tests for per-record backfill rules."""

    def test_free_record_is_skipped(self):
        assert backfill_price({"id": 1, "is_free": True, "price_info": "R$ 50"}) is None

    @pytest.mark.parametrize("price_info", [None, "", "   "])
    def test_missing_text_is_not_informed(self, price_info):
        result = backfill_price({"id": 1, "is_free": False, "price_info": price_info})
        assert result == {"price_type": "nao_informado", "price_value": None}

    @pytest.mark.parametrize("price_info,expected_type,expected_value", [
        ("R$ 1.490,00", "unico", 1490.0),
        ("A partir de R$ 99,90", "a_partir_de", 99.9),
        ("1.300", "unico", 1.3),
    ])
    def test_parses_price_info(self, price_info: str, expected_type: str, expected_value: float):
        result = backfill_price({"id": 1, "is_free": False, "price_info": price_info})
        assert result["price_type"] == expected_type
        assert result["price_value"] == pytest.approx(expected_value)

    def test_text_without_number(self):
        """Text with no numeric token resolves like the live path does."""
        result = backfill_price({"id": 1, "is_free": False, "price_info": "Consulte"})
        assert result == {"price_type": "nao_informado", "price_value": None}

    @pytest.mark.parametrize("text", [
        "R$ 1.490,00",
        "A partir de R$ 99,90",
        "$1,299.50",
        "1.300",
        "Lote promocional: R$ 59,90",
        "Consulte valores",
    ])
    def test_matches_live_extraction(self, text: str):
        """Backfill and live normalization agree on the same text."""
        live = normalize_fields(
            [
                RawCandidateField(name="title", value="Evento", origin="heuristic"),
                RawCandidateField(name="price_text", value=text, origin="heuristic"),
            ],
            source_url="https://example.com/evento",
        )
        stored = backfill_price({"id": 1, "is_free": False, "price_info": text})
        assert (live.values["price_type"], live.values["price_value"]) == (
            stored["price_type"],
            stored["price_value"],
        )


class TestBackfillRecords:
    """Tests for batch backfill over stored records."""

    def test_counts_and_preserves_other_fields(self):
        records = [
            {"id": 1, "is_free": True, "price_info": None, "title": "A"},
            {"id": 2, "is_free": False, "price_info": "R$ 120,00", "title": "B"},
            {"id": 3, "is_free": False, "price_info": None, "title": "C"},
        ]
        result, updated, skipped = backfill_records(records, verbose=False)
        assert (updated, skipped) == (2, 1)
        assert result[0] == records[0]
        assert result[1]["title"] == "B"
        assert result[1]["price_type"] == "unico"
        assert result[1]["price_value"] == pytest.approx(120.0)
        assert result[2]["price_type"] == "nao_informado"

    def test_file_round_trip(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps([
            {"id": "a", "is_free": False, "price_info": "A partir de R$ 49,90"},
        ]))
        assert backfill_file(path, verbose=False) == (1, 0)
        stored = json.loads(path.read_text())
        assert stored[0]["price_type"] == "a_partir_de"
        assert stored[0]["price_value"] == pytest.approx(49.9)

    def test_rejects_non_list(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps({"id": 1}))
        with pytest.raises(ValueError):
            backfill_file(path, verbose=False)
