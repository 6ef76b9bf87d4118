"""Shared test fixtures: a small municipality's reference data."""

from __future__ import annotations

import pytest

from cama.valuation.calculator import LandAssessmentCalculator
from cama.valuation.models import (
    AcreageDiscountSettings,
    CurrentUseCategory,
    FactorAttribute,
    LadderTier,
    LandTaxationCategory,
    ReferenceData,
    WaterfrontLadderTier,
    Zone,
)


def make_reference(**overrides) -> ReferenceData:
    """Reference data with neutral factors unless overridden."""
    data = {
        "zones": [
            Zone(id="RA", name="Rural Agricultural", minimum_acreage=5, excess_land_cost_per_acre=1000),
            Zone(id="R1", name="Residential 1", minimum_acreage=8, excess_land_cost_per_acre=3000),
            Zone(id="NOMIN", name="No minimum", excess_land_cost_per_acre=500),
            Zone(id="BARE", name="Zone without ladder", minimum_acreage=2),
        ],
        "land_ladders": {
            "RA": [
                LadderTier(acreage=1, value=50000),
                LadderTier(acreage=5, value=150000),
                LadderTier(acreage=10, value=200000),
            ],
            "R1": [
                LadderTier(acreage=1, value=40000, frontage_rate=250),
                LadderTier(acreage=4, value=100000),
                LadderTier(acreage=8, value=140000),
            ],
            "NOMIN": [
                LadderTier(acreage=1, value=10000),
                LadderTier(acreage=20, value=100000),
            ],
        },
        "water_body_ladders": {
            "LAKE": [
                WaterfrontLadderTier(frontage=50, factor=0.8),
                WaterfrontLadderTier(frontage=100, factor=1.0),
                WaterfrontLadderTier(frontage=300, factor=1.5),
            ],
        },
        "neighborhoods": [
            FactorAttribute(id="N-AVG", code="A", rate=100),
            FactorAttribute(id="N-EXC", code="E", rate=120),
        ],
        "site_attributes": [FactorAttribute(id="S-WET", display_text="Wet", rate=80)],
        "driveway_attributes": [FactorAttribute(id="D-DIRT", display_text="Dirt", rate=95)],
        "road_attributes": [
            FactorAttribute(id="RD-GRAVEL", display_text="Gravel", rate=90),
            FactorAttribute(id="RD-ZERO", display_text="Unrated", rate=0),
        ],
        "topography_attributes": [
            FactorAttribute(id="T-LEVEL", display_text="Level", rate=100),
            FactorAttribute(id="T-STEEP", display_text="Steep", rate=85),
        ],
        "current_use_categories": [
            CurrentUseCategory(code="FARM", display_text="Farmland", min_rate=50, max_rate=200),
        ],
        "land_taxation_categories": [
            LandTaxationCategory(id="TAX-HALF", name="Half", tax_percentage=50),
        ],
        "acreage_discount_settings": AcreageDiscountSettings(
            minimum_qualifying_acreage=10,
            maximum_qualifying_acreage=50,
            maximum_discount_percentage=20,
        ),
    }
    data.update(overrides)
    return ReferenceData(**data)


@pytest.fixture
def reference() -> ReferenceData:
    return make_reference()


@pytest.fixture
def calculator(reference) -> LandAssessmentCalculator:
    return LandAssessmentCalculator(reference)
