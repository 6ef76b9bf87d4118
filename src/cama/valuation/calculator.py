"""Land assessment calculator.

Turns a property's land lines into base, market, current-use and assessed
values and rolls them up with the property's view and waterfront entries.
The calculator performs no I/O; all reference data is supplied up front.

Failures never escape a calculation call. A land line that cannot be valued
comes back with ``calculation_error`` set, and the remaining lines are still
calculated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from cama.core.config import ValuationConfig
from cama.valuation.current_use import CurrentUseValuator
from cama.valuation.discount import AcreageDiscountCurve
from cama.valuation.factors import FactorResolver
from cama.valuation.ladder import land_value, waterfront_factor
from cama.valuation.models import (
    AssessmentTotals,
    LandAssessment,
    LandLine,
    PropertyContext,
    ReferenceData,
    ViewEntry,
    WaterfrontEntry,
    ZoneAdjustmentReport,
)
from cama.valuation.numeric import round_dollars, round_to_nearest
from cama.valuation.reference import ReferenceIndex, load_reference_data
from cama.valuation.totals import TotalsAggregator
from cama.valuation.zoning import apply_zone_minimum_adjustments

logger = logging.getLogger(__name__)

MARKET_ROUNDING = 100
MISSING_DATA_ERROR = "Missing required data"

RawLine = LandLine | Mapping[str, Any]


class LandAssessmentCalculator:
    """Values land lines and whole land assessments for one municipality.

    Lookups are memoized per instance. Use one instance per municipality and
    per worker; instances are not meant to be shared between threads.
    """

    def __init__(self, reference: ReferenceData | ReferenceIndex, *, strict_numeric: bool = False) -> None:
        self._index = reference if isinstance(reference, ReferenceIndex) else ReferenceIndex(reference)
        self._strict_numeric = strict_numeric
        self._factors = FactorResolver(self._index)
        self._discount = AcreageDiscountCurve(self._index.acreage_discount_settings)
        self._current_use = CurrentUseValuator(self._index)
        self._totals = TotalsAggregator(self._current_use.is_current_use)

    @classmethod
    def from_config(cls, config: ValuationConfig | None = None) -> LandAssessmentCalculator:
        config = config or ValuationConfig()
        return cls(load_reference_data(config.reference_data_path), strict_numeric=config.strict_numeric)

    @property
    def index(self) -> ReferenceIndex:
        return self._index

    @property
    def strict_numeric(self) -> bool:
        return self._strict_numeric

    @property
    def discount(self) -> AcreageDiscountCurve:
        return self._discount

    # ------------------------------------------------------------------
    # Land lines
    # ------------------------------------------------------------------

    def calculate_land_line(
        self,
        line: RawLine,
        context: PropertyContext,
        accumulated_acreage: float = 0.0,
    ) -> LandLine:
        """Calculate one land line given the acreage of the lines before it."""
        parsed, error = self._parse_line(line)
        if error:
            return parsed.with_results(calculation_error=error)
        return self._calculate(parsed, context, accumulated_acreage)

    def calculate_land_lines(
        self,
        lines: Iterable[RawLine],
        context: PropertyContext,
        accumulated_acreage: float = 0.0,
    ) -> tuple[list[LandLine], float]:
        """Calculate lines in order, threading accumulated acreage through.

        Returns the calculated lines and the accumulated non-excess acreage.
        Lines that fail validation contribute no acreage.
        """
        calculated: list[LandLine] = []
        for raw in lines:
            line, error = self._parse_line(raw)
            if error:
                calculated.append(line.with_results(calculation_error=error))
                continue
            calculated.append(self._calculate(line, context, accumulated_acreage))
            if line.acreage > 0 and not line.is_excess_acreage:
                accumulated_acreage += line.acreage
        return calculated, accumulated_acreage

    def _parse_line(self, line: RawLine) -> tuple[LandLine, str | None]:
        if isinstance(line, LandLine):
            return line, None
        try:
            return LandLine.model_validate(line, context={"strict_numeric": self._strict_numeric}), None
        except ValidationError as exc:
            message = _describe(exc)
            logger.warning("Land line failed validation: %s", message)

        # Keep whatever input survives permissive validation for the caller.
        try:
            return LandLine.model_validate(line), message
        except ValidationError:
            raw = {str(key): value for key, value in line.items()} if isinstance(line, Mapping) else {}
            return LandLine.model_construct(**raw), message

    def _calculate(self, line: LandLine, context: PropertyContext, accumulated_acreage: float) -> LandLine:
        zone_id = context.zone_id
        if not zone_id or (self._index.zone(zone_id) is None and not self._index.has_ladder(zone_id)):
            logger.warning("Cannot value land line: zone %r is missing or unknown", zone_id)
            return line.with_results(calculation_error=MISSING_DATA_ERROR)

        try:
            return self._value_line(line, context, accumulated_acreage)
        except Exception as exc:
            logger.exception("Unexpected error calculating land line in zone %s", zone_id)
            return line.with_results(calculation_error=str(exc) or type(exc).__name__)

    def _value_line(self, line: LandLine, context: PropertyContext, accumulated_acreage: float) -> LandLine:
        zone_id = context.zone_id
        acreage = line.acreage
        frontage = line.frontage
        update: dict[str, Any] = {
            "economy_of_scale_factor": self._discount.percentage(acreage),
        }

        if acreage > 0 and line.is_excess_acreage:
            base_rate = self.excess_acreage_rate(zone_id)
            base_value = self._discount.apply(base_rate * acreage, acreage)
        elif acreage > 0:
            effective = self.effective_acreage(zone_id, acreage, accumulated_acreage)
            update["effective_acreage"] = effective
            base_value = self.land_ladder_value(effective, zone_id) if effective > 0 else 0.0
            base_rate = base_value / acreage
            logger.debug(
                "Non-excess line %.3f AC in zone %s: accumulated %.3f, effective %.3f, base %.2f",
                acreage,
                zone_id,
                accumulated_acreage,
                effective,
                base_value,
            )
        elif frontage > 0:
            base_rate = self.frontage_rate(zone_id)
            base_value = base_rate * frontage
        else:
            base_rate = 0.0
            base_value = 0.0

        update["base_rate"] = base_rate
        update["base_value"] = base_value

        if base_value == 0:
            update.update(market_value=0, current_use_value=0, current_use_credit=0, assessed_value=0)
            return line.with_results(**update)

        factors = {
            "neighborhood_factor": self._factors.neighborhood(context.neighborhood_id),
            "site_factor": self._factors.site(context.site_conditions_id),
            "driveway_factor": self._factors.driveway(context.driveway_type_id),
            "road_factor": self._factors.road(context.road_type_id),
            "topography_factor": self._factors.topography(line.topography),
            "condition_factor": self._factors.condition(line.condition),
        }
        update.update(factors)

        raw_market_value = base_value
        for factor in factors.values():
            raw_market_value *= factor
        market_value = round_to_nearest(raw_market_value, MARKET_ROUNDING)
        update["raw_market_value"] = raw_market_value
        update["market_value"] = market_value

        if self._current_use.is_current_use(line.land_use_type):
            current_use_value = self._current_use.value(line)
            update["current_use_value"] = current_use_value
            update["current_use_credit"] = market_value - current_use_value
            update["assessed_value"] = current_use_value
        else:
            update["current_use_value"] = 0
            update["current_use_credit"] = 0
            update["assessed_value"] = market_value

        return line.with_results(**update)

    # ------------------------------------------------------------------
    # Rates and values
    # ------------------------------------------------------------------

    def effective_acreage(self, zone_id: str | None, acreage: float, accumulated_acreage: float) -> float:
        """Portion of ``acreage`` priced on the ladder.

        Capped at what remains of the zone minimum after earlier lines; zones
        without a minimum do not cap.
        """
        zone = self._index.zone(zone_id)
        if zone is None or zone.minimum_acreage <= 0:
            return acreage
        return min(acreage, max(0.0, zone.minimum_acreage - accumulated_acreage))

    def land_ladder_value(self, acreage: float, zone_id: str | None) -> float:
        """Total ladder value for ``acreage``; 0 when the zone has no ladder."""
        tiers = self._index.ladder(zone_id)
        if not tiers:
            logger.warning("No land ladder for zone %s", zone_id)
            return 0.0
        return land_value(tiers, acreage)

    def excess_acreage_rate(self, zone_id: str | None) -> float:
        zone = self._index.zone(zone_id)
        return zone.excess_land_cost_per_acre if zone else 0.0

    def frontage_rate(self, zone_id: str | None) -> float:
        """Flat rate per front foot from the zone's first ladder tier."""
        tiers = self._index.ladder(zone_id)
        if not tiers:
            return 0.0
        return tiers[0].frontage_rate or tiers[0].value

    def calculate_excess_land_value(self, excess_acreage: float, zone_id: str | None) -> float:
        """Value excess acreage at the zone's excess rate.

        Falls back to the highest ladder tier's value per acre when the zone
        has no excess rate.
        """
        rate = self.excess_acreage_rate(zone_id)
        if rate:
            return excess_acreage * rate
        logger.warning("No excess land cost for zone %s, using highest tier rate", zone_id)
        tiers = self._index.ladder(zone_id)
        if not tiers:
            return 0.0
        return excess_acreage * tiers[-1].value

    def waterfront_frontage_factor(self, water_body_id: str | None, frontage: float) -> float:
        """Frontage factor from a water body's ladder; neutral without one."""
        tiers = self._index.water_body_ladder(water_body_id)
        if not tiers:
            return 1.0
        return waterfront_factor(tiers, frontage)

    def calculate_current_use_value(self, line: RawLine) -> int:
        parsed, error = self._parse_line(line)
        if error:
            return 0
        return self._current_use.value(parsed)

    def calculate_current_use_credit(self, lines: Iterable[RawLine], context: PropertyContext) -> float:
        """Sum of market minus current-use value over current-use lines."""
        calculated, _ = self.calculate_land_lines(lines, context)
        return sum(
            line.current_use_credit or 0
            for line in calculated
            if not line.calculation_error and self._current_use.is_current_use(line.land_use_type)
        )

    def calculate_assessed_value(self, market_value: float, taxation_category_id: str | None) -> int:
        """Apply a land taxation category's percentage (100% when unknown)."""
        category = self._index.taxation_category(taxation_category_id)
        percentage = category.tax_percentage / 100 if category else 1.0
        return round_dollars(market_value * percentage)

    def is_current_use_category(self, land_use_type: str | None) -> bool:
        return self._current_use.is_current_use(land_use_type)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def calculate_property_assessment(
        self,
        assessment: LandAssessment | Mapping[str, Any],
        views: Sequence[ViewEntry | Mapping[str, Any]] | None = None,
        waterfronts: Sequence[WaterfrontEntry | Mapping[str, Any]] | None = None,
    ) -> LandAssessment:
        """Calculate every land line and attach ``calculated_totals``.

        ``views`` and ``waterfronts`` default to the entries carried on the
        assessment itself. View and waterfront entries that cannot be read
        are kept as given and contribute nothing to the totals. An
        assessment that cannot be read at all comes back with empty totals
        and ``calculation_error`` set.
        """
        if not isinstance(assessment, LandAssessment):
            try:
                assessment = LandAssessment.model_validate(
                    assessment, context={"strict_numeric": self._strict_numeric}
                )
            except ValidationError as exc:
                return _unreadable_assessment(assessment, _describe(exc))

        property_id = assessment.property_id
        view_entries, valid_views = _read_entries(
            ViewEntry, assessment.views if views is None else views, "view", property_id
        )
        waterfront_entries, valid_waterfronts = _read_entries(
            WaterfrontEntry,
            assessment.waterfronts if waterfronts is None else waterfronts,
            "waterfront",
            property_id,
        )

        context = PropertyContext.from_assessment(assessment)
        lines, _ = self.calculate_land_lines(assessment.land_use_details, context)
        totals = self._totals.aggregate(lines, valid_views, valid_waterfronts)

        failed = sum(1 for line in lines if line.calculation_error)
        if failed:
            logger.warning(
                "Property %s: %d of %d land lines could not be calculated",
                property_id,
                failed,
                len(lines),
            )

        return assessment.model_copy(
            update={
                "land_use_details": lines,
                "views": view_entries,
                "waterfronts": waterfront_entries,
                "calculated_totals": totals,
            }
        )

    def apply_zone_minimum_adjustments(
        self, assessment: LandAssessment
    ) -> tuple[LandAssessment, ZoneAdjustmentReport]:
        return apply_zone_minimum_adjustments(assessment, self._index)


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "line"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def _read_entries(
    model: type[ViewEntry], entries: Iterable[Any], label: str, property_id: str | None
) -> tuple[list[Any], list[ViewEntry]]:
    """Validate view or waterfront entries one at a time.

    Returns every entry (validated where possible) and the valid ones.
    """
    kept: list[Any] = []
    valid: list[ViewEntry] = []
    for entry in entries:
        if not isinstance(entry, model):
            try:
                entry = model.model_validate(entry)
            except ValidationError as exc:
                logger.warning(
                    "Property %s: skipping unreadable %s entry: %s", property_id, label, _describe(exc)
                )
                kept.append(entry)
                continue
        kept.append(entry)
        valid.append(entry)
    return kept, valid


def _unreadable_assessment(raw: Any, error: str) -> LandAssessment:
    logger.warning("Land assessment failed validation: %s", error)
    property_id = raw.get("property_id") if isinstance(raw, Mapping) else None
    return LandAssessment.model_construct(
        property_id=property_id if isinstance(property_id, str) else None,
        calculated_totals=AssessmentTotals.empty(),
        calculation_error=error,
    )
