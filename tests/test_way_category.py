"""
Tests for way category bitmask decoding.
"""
import pytest

from routecause.models.trip import WayCategorySummary
from routecause.services.way_category import category_names, decode_way_category_summary


class TestCategoryNames:

    @pytest.mark.parametrize("value, expected", [
        (0, ["No category"]),
        (1, ["Highway"]),
        (5, ["Highway", "Unpaved road"]),
        (96, ["Tunnel", "Paved road"]),
        (128, ["Ford"]),
        (256, ["Unknown (256)"]),
        (257, ["Highway", "Unknown (256)"]),
    ])
    def test_bits(self, value, expected):
        assert category_names(value) == expected


class TestDecodeSummary:

    def test_multi_bit_value(self):
        result = decode_way_category_summary([{"value": 5, "distance": 1000, "amount": 50}])

        assert result == {
            "Highway": WayCategorySummary(distance_km=1.0, percentage=50),
            "Unpaved road": WayCategorySummary(distance_km=1.0, percentage=50),
        }

    def test_zero_value(self):
        result = decode_way_category_summary([{"value": 0, "distance": 2000, "amount": 100}])

        assert result == {"No category": WayCategorySummary(distance_km=2.0, percentage=100)}

    def test_mixed_rows(self):
        result = decode_way_category_summary([
            {"value": 0, "distance": 600, "amount": 60},
            {"value": 1, "distance": 400, "amount": 40},
        ])

        assert result["No category"].distance_km == pytest.approx(0.6)
        assert result["No category"].percentage == 60
        assert result["Highway"].distance_km == pytest.approx(0.4)
        assert result["Highway"].percentage == 40

    def test_shared_bit_across_rows_is_summed(self):
        result = decode_way_category_summary([
            {"value": 64, "distance": 3000, "amount": 75},
            {"value": 96, "distance": 1000, "amount": 25},
        ])

        assert result["Paved road"].distance_km == pytest.approx(4.0)
        assert result["Paved road"].percentage == pytest.approx(100)
        assert result["Tunnel"].distance_km == pytest.approx(1.0)
        assert result["Tunnel"].percentage == pytest.approx(25)

    def test_empty_summary(self):
        assert decode_way_category_summary([]) == {}

    def test_idempotent(self):
        rows = [{"value": 33, "distance": 1500, "amount": 30}]

        assert decode_way_category_summary(rows) == decode_way_category_summary(rows)
        assert rows == [{"value": 33, "distance": 1500, "amount": 30}]
