"""Tests for numeric parsing, rounding and size unit normalisation."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from cama.core.types import SizeUnit, parse_size_unit
from cama.valuation.numeric import round_dollars, round_half_up, round_to_nearest, to_number


# ---------------------------------------------------------------------------
# to_number
# ---------------------------------------------------------------------------


class TestToNumber:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (3, 3.0),
            (2.5, 2.5),
            (Decimal("1.25"), 1.25),
            ("42", 42.0),
            (" 7.5 ", 7.5),
            ("-3", -3.0),
            (".5", 0.5),
            ("1e3", 1000.0),
        ],
    )
    def test_numeric_input(self, value, expected):
        assert to_number(value) == expected

    def test_absent_values_use_default(self):
        assert to_number(None) == 0.0
        assert to_number("") == 0.0
        assert to_number("   ", default=None) is None
        assert to_number(None, default=50.0) == 50.0

    def test_leading_number_is_parsed(self):
        assert to_number("12.5 AC") == 12.5

    def test_garbage_coerced_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="cama.valuation.numeric"):
            assert to_number("n/a", field="size") == 0.0
        assert "Non-numeric size" in caplog.text

    @pytest.mark.parametrize("value", [True, float("nan"), float("inf"), [1], {"a": 1}])
    def test_malformed_types(self, value):
        assert to_number(value, default=None) is None

    def test_strict_rejects_garbage(self):
        with pytest.raises(ValueError, match="size is not numeric"):
            to_number("abc", strict=True, field="size")

    def test_strict_rejects_trailing_text(self):
        with pytest.raises(ValueError):
            to_number("12.5 AC", strict=True)

    def test_strict_accepts_clean_strings(self):
        assert to_number(" 12.5 ", strict=True) == 12.5

    def test_strict_still_treats_blank_as_absent(self):
        assert to_number("", strict=True, default=None) is None


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


class TestRounding:
    def test_round_dollars_half_up(self):
        assert round_dollars(10.5) == 11
        assert round_dollars(10.49) == 10
        assert round_dollars(0) == 0

    def test_round_to_nearest_hundred(self):
        assert round_to_nearest(103750, 100) == 103800
        assert round_to_nearest(103749.99, 100) == 103700
        assert round_to_nearest(50, 100) == 100
        assert round_to_nearest(49, 100) == 0

    def test_round_half_up_decimals(self):
        assert round_half_up(1.23456, 3) == 1.235
        assert round_half_up(12.5, 0) == 13.0


# ---------------------------------------------------------------------------
# Size units
# ---------------------------------------------------------------------------


class TestParseSizeUnit:
    @pytest.mark.parametrize("label", ["AC", "ac", "Acre", "acres", " AC "])
    def test_acres(self, label):
        assert parse_size_unit(label) == SizeUnit.ACRES

    @pytest.mark.parametrize("label", ["FF", "ff", "front-foot", "Front_Foot", "frontage"])
    def test_front_foot(self, label):
        assert parse_size_unit(label) == SizeUnit.FRONT_FOOT

    def test_unknown_and_missing(self):
        assert parse_size_unit("SQFT") is None
        assert parse_size_unit(None) is None

    def test_enum_passthrough(self):
        assert parse_size_unit(SizeUnit.ACRES) is SizeUnit.ACRES
