"""Municipality-wide recalculation and stored-total validation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, Field, ValidationError

from cama.valuation.calculator import LandAssessmentCalculator
from cama.valuation.models import AssessmentTotals, LandAssessment, ViewEntry, WaterfrontEntry

logger = logging.getLogger(__name__)


class PropertyRecord(BaseModel):
    """One property's land assessment together with its view and waterfront entries."""

    property_id: str
    assessment: LandAssessment
    views: list[Annotated[ViewEntry | Any, Field(union_mode="left_to_right")]] = Field(default_factory=list)
    waterfronts: list[Annotated[WaterfrontEntry | Any, Field(union_mode="left_to_right")]] = Field(
        default_factory=list
    )


class RecalculationSummary(BaseModel):
    processed: int = 0
    failed: int = 0
    lines_with_errors: int = 0
    properties_with_errors: list[str] = Field(default_factory=list)
    zone_adjustments: int = 0
    results: dict[str, LandAssessment] = Field(default_factory=dict)


class Discrepancy(BaseModel):
    stored: float
    calculated: float
    difference: float


class PropertyDiscrepancies(BaseModel):
    property_id: str
    discrepancies: dict[str, Discrepancy] = Field(default_factory=dict)


class ValidationReport(BaseModel):
    """Stored-versus-recalculated totals comparison for a set of properties."""

    sample_size: int = 0
    properties_with_discrepancies: int = 0
    discrepancies: list[PropertyDiscrepancies] = Field(default_factory=list)
    validated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def recalculate_properties(
    calculator: LandAssessmentCalculator,
    records: Iterable[PropertyRecord | Mapping[str, Any]],
    *,
    apply_zone_adjustments: bool = False,
) -> RecalculationSummary:
    """Recalculate properties one after another with a single calculator.

    A property that cannot be read is counted as failed and skipped; land
    lines that fail individually are counted but do not stop the property.
    """
    summary = RecalculationSummary()
    for raw in records:
        try:
            record = raw if isinstance(raw, PropertyRecord) else PropertyRecord.model_validate(
                raw, context={"strict_numeric": calculator.strict_numeric}
            )
        except ValidationError as exc:
            summary.failed += 1
            logger.warning("Skipping unreadable property record: %s", exc.error_count())
            continue

        assessment = record.assessment
        if apply_zone_adjustments:
            assessment, report = calculator.apply_zone_minimum_adjustments(assessment)
            if report.adjusted:
                summary.zone_adjustments += 1

        result = calculator.calculate_property_assessment(assessment, record.views, record.waterfronts)
        errors = sum(1 for line in result.land_use_details if line.calculation_error)
        if errors:
            summary.lines_with_errors += errors
            summary.properties_with_errors.append(record.property_id)
        summary.results[record.property_id] = result
        summary.processed += 1

    logger.info(
        "Recalculated %d properties (%d skipped, %d land lines with errors)",
        summary.processed,
        summary.failed,
        summary.lines_with_errors,
    )
    return summary


def compare_totals(
    stored: AssessmentTotals | None, calculated: AssessmentTotals, tolerance: float = 1.0
) -> dict[str, Discrepancy]:
    """Numeric totals that differ by more than ``tolerance`` dollars."""
    stored_values = stored.model_dump() if stored is not None else {}
    found: dict[str, Discrepancy] = {}
    for name, value in calculated.model_dump().items():
        if isinstance(value, bool):
            continue
        previous = stored_values.get(name) or 0
        difference = abs(previous - value)
        if difference > tolerance:
            found[name] = Discrepancy(stored=previous, calculated=value, difference=difference)
    return found


def validate_calculations(
    calculator: LandAssessmentCalculator,
    records: Iterable[PropertyRecord],
    tolerance: float = 1.0,
) -> ValidationReport:
    """Recalculate each record and report totals that drifted from storage."""
    report = ValidationReport()
    for record in records:
        report.sample_size += 1
        result = calculator.calculate_property_assessment(record.assessment, record.views, record.waterfronts)
        found = compare_totals(record.assessment.calculated_totals, result.calculated_totals, tolerance)
        if found:
            report.discrepancies.append(PropertyDiscrepancies(property_id=record.property_id, discrepancies=found))
    report.properties_with_discrepancies = len(report.discrepancies)
    return report
