"""Tests for batch recalculation and stored-total validation."""

from __future__ import annotations

import pytest

from cama.valuation.batch import (
    PropertyRecord,
    compare_totals,
    recalculate_properties,
    validate_calculations,
)
from cama.valuation.calculator import LandAssessmentCalculator
from cama.valuation.models import AssessmentTotals


def acres(size, **fields) -> dict:
    return {"size": size, "size_unit": "AC", **fields}


def record(property_id: str, *lines, **extra) -> dict:
    return {
        "property_id": property_id,
        "assessment": {"property_id": property_id, "zone": "RA", "land_use_details": list(lines)},
        **extra,
    }


class TestRecalculateProperties:
    def test_processes_every_property(self, calculator):
        summary = recalculate_properties(
            calculator,
            [
                record("P-1", acres(3)),
                record("P-2", acres(5), views=[{"calculated_value": 1000}]),
            ],
        )
        assert summary.processed == 2
        assert summary.failed == 0
        assert summary.results["P-1"].calculated_totals.total_market_value == 103800
        assert summary.results["P-2"].calculated_totals.total_market_value == 151000

    def test_unreadable_record_is_skipped(self, calculator):
        summary = recalculate_properties(calculator, [{"assessment": {}}, record("P-1", acres(3))])
        assert summary.failed == 1
        assert summary.processed == 1
        assert list(summary.results) == ["P-1"]

    def test_unreadable_view_does_not_skip_property(self, calculator):
        summary = recalculate_properties(
            calculator,
            [record("P-1", acres(3), views=[{"calculated_value": 900, "current_use": "maybe"}])],
        )
        assert summary.failed == 0
        assert summary.results["P-1"].calculated_totals.total_market_value == 103800

    def test_line_errors_are_counted(self, reference):
        calculator = LandAssessmentCalculator(reference, strict_numeric=True)
        summary = recalculate_properties(
            calculator,
            [record("P-1", acres("lots"), acres("?")), record("P-2", acres(1))],
        )
        assert summary.processed == 2
        assert summary.lines_with_errors == 2
        assert summary.properties_with_errors == ["P-1"]

    def test_zone_adjustments_optional(self, calculator):
        records = [record("P-1", acres(8)), record("P-2", acres(2))]
        plain = recalculate_properties(calculator, records)
        adjusted = recalculate_properties(calculator, records, apply_zone_adjustments=True)

        assert plain.zone_adjustments == 0
        assert adjusted.zone_adjustments == 1
        assert len(adjusted.results["P-1"].land_use_details) == 2
        assert adjusted.results["P-1"].calculated_totals.land_market_value == 153000

    def test_accepts_record_models(self, calculator):
        model = PropertyRecord.model_validate(record("P-1", acres(3)))
        summary = recalculate_properties(calculator, [model])
        assert summary.processed == 1


class TestCompareTotals:
    def test_within_tolerance(self):
        stored = AssessmentTotals(total_market_value=1000, land_market_value=1000)
        calculated = AssessmentTotals(total_market_value=1001, land_market_value=1000)
        assert compare_totals(stored, calculated, tolerance=1.0) == {}

    def test_outside_tolerance(self):
        stored = AssessmentTotals(total_market_value=1000)
        calculated = AssessmentTotals(total_market_value=1500)
        found = compare_totals(stored, calculated)
        assert set(found) == {"total_market_value"}
        assert found["total_market_value"].difference == 500

    def test_missing_stored_totals(self):
        calculated = AssessmentTotals(total_market_value=1500, has_current_use_land=True)
        found = compare_totals(None, calculated)
        assert set(found) == {"total_market_value"}


class TestValidateCalculations:
    @pytest.fixture
    def records(self, calculator) -> list[PropertyRecord]:
        accurate = PropertyRecord.model_validate(record("P-1", acres(3)))
        accurate.assessment = calculator.calculate_property_assessment(accurate.assessment)
        drifted = PropertyRecord.model_validate(
            record("P-2", acres(3))
            | {
                "assessment": {
                    "property_id": "P-2",
                    "zone": "RA",
                    "land_use_details": [acres(3)],
                    "calculated_totals": {"landMarketValue": 100000, "totalMarketValue": 103800},
                }
            }
        )
        return [accurate, drifted]

    def test_reports_drifted_properties(self, calculator, records):
        report = validate_calculations(calculator, records)
        assert report.sample_size == 2
        assert report.properties_with_discrepancies == 1
        flagged = report.discrepancies[0]
        assert flagged.property_id == "P-2"
        assert "land_market_value" in flagged.discrepancies
        assert "total_market_value" not in flagged.discrepancies

    def test_tolerance(self, calculator, records):
        report = validate_calculations(calculator, records, tolerance=200000)
        assert report.properties_with_discrepancies == 0
