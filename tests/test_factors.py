"""Tests for FactorResolver."""

from __future__ import annotations

import pytest

from cama.core.types import FactorKind
from cama.valuation.factors import FactorResolver
from cama.valuation.reference import ReferenceIndex


@pytest.fixture
def resolver(reference) -> FactorResolver:
    return FactorResolver(ReferenceIndex(reference))


class TestFactorResolver:
    def test_rates_are_percentages(self, resolver):
        assert resolver.neighborhood("N-EXC") == pytest.approx(1.2)
        assert resolver.site("S-WET") == pytest.approx(0.8)
        assert resolver.driveway("D-DIRT") == pytest.approx(0.95)
        assert resolver.road("RD-GRAVEL") == pytest.approx(0.9)

    def test_topography_by_description(self, resolver):
        assert resolver.topography("Steep") == pytest.approx(0.85)
        assert resolver.topography("T-STEEP") == pytest.approx(0.85)

    def test_missing_key_is_neutral(self, resolver):
        assert resolver.neighborhood(None) == 1.0
        assert resolver.site("") == 1.0

    def test_unknown_key_is_neutral(self, resolver):
        assert resolver.road("RD-UNKNOWN") == 1.0

    def test_zero_rate_is_neutral(self, resolver):
        assert resolver.road("RD-ZERO") == 1.0

    def test_kinds_are_cached_separately(self, resolver):
        assert resolver.resolve(FactorKind.ROAD, "RD-GRAVEL") == pytest.approx(0.9)
        assert resolver.resolve(FactorKind.SITE, "RD-GRAVEL") == 1.0

    @pytest.mark.parametrize(
        "condition, expected",
        [(None, 1.0), (100, 1.0), (80, 0.8), (0, 0.0), (110, 1.1)],
    )
    def test_condition(self, condition, expected):
        assert FactorResolver.condition(condition) == pytest.approx(expected)
