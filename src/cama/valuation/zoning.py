"""Zone minimum acreage enforcement.

Non-excess acreage lines larger than the zone minimum are trimmed to the
minimum and the surplus moves onto an excess acreage line, which is then
priced at the zone's flat excess rate.
"""

from __future__ import annotations

import logging
from typing import Any

from cama.core.types import SizeUnit
from cama.valuation.models import LandAssessment, LandLine, ZoneAdjustment, ZoneAdjustmentReport
from cama.valuation.reference import ReferenceIndex

logger = logging.getLogger(__name__)


def apply_zone_minimum_adjustments(
    assessment: LandAssessment, index: ReferenceIndex
) -> tuple[LandAssessment, ZoneAdjustmentReport]:
    """Return a copy of ``assessment`` with zone minimum acreage enforced.

    The input is not modified. Lines that could not be validated (raw
    mappings) are passed through untouched.
    """
    report = ZoneAdjustmentReport()
    zone = index.zone(assessment.zone)
    if zone is None or not zone.minimum_acreage or not assessment.land_use_details:
        return assessment, report

    minimum = zone.minimum_acreage
    surplus = 0.0
    source: LandLine | None = None
    lines: list[LandLine | dict[str, Any]] = []

    for line in assessment.land_use_details:
        if (
            isinstance(line, LandLine)
            and not line.is_excess_acreage
            and line.size_unit == SizeUnit.ACRES
            and line.size > minimum
        ):
            surplus += line.size - minimum
            source = source or line
            report.adjustments.append(
                ZoneAdjustment(
                    kind="trimmed_to_minimum",
                    land_use_type=line.land_use_type,
                    original_size=line.size,
                    adjusted_size=minimum,
                    acreage=line.size - minimum,
                )
            )
            line = line.with_results(size=minimum)
        lines.append(line)

    if not surplus:
        return assessment, report
    report.adjusted = True

    excess_at = next(
        (
            i
            for i, line in enumerate(lines)
            if isinstance(line, LandLine) and line.is_excess_acreage and line.size_unit == SizeUnit.ACRES
        ),
        None,
    )
    if excess_at is not None:
        existing = lines[excess_at]
        lines[excess_at] = existing.with_results(size=existing.size + surplus)
        report.adjustments.append(
            ZoneAdjustment(
                kind="excess_acreage_updated",
                land_use_type=existing.land_use_type,
                original_size=existing.size,
                adjusted_size=existing.size + surplus,
                acreage=surplus,
            )
        )
    else:
        lines.append(
            LandLine(
                size=surplus,
                size_unit=SizeUnit.ACRES,
                is_excess_acreage=True,
                land_use_type=source.land_use_type if source else None,
                topography=source.topography if source else None,
                condition=100,
                notes=f"Excess acreage from zone minimum adjustment ({surplus:.2f} AC)",
            )
        )
        report.excess_acreage_created = True
        report.adjustments.append(
            ZoneAdjustment(
                kind="excess_acreage_created",
                land_use_type=source.land_use_type if source else None,
                adjusted_size=surplus,
                acreage=surplus,
            )
        )

    logger.info(
        "Zone %s minimum %.3f AC: moved %.3f AC to excess acreage",
        zone.id,
        minimum,
        surplus,
    )
    return assessment.model_copy(update={"land_use_details": lines}), report
