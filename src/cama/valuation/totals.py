"""Property-level roll-up of calculated land lines, views and waterfronts."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from cama.core.types import SizeUnit
from cama.valuation.models import AssessmentTotals, LandLine, ViewEntry, WaterfrontEntry
from cama.valuation.numeric import round_dollars, round_half_up


def _amount(value: Any) -> float:
    # Lines that failed calculation carry None (or raw input) in numeric fields.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


class TotalsAggregator:
    """Sums land lines, views and waterfronts into ``AssessmentTotals``.

    Land assessed value is recomputed as market minus current-use credit at
    the total level rather than re-summing per-line assessed values. All
    dollar totals are rounded once, here.
    """

    def __init__(self, is_current_use: Callable[[str | None], bool]) -> None:
        self._is_current_use = is_current_use

    def aggregate(
        self,
        lines: Sequence[LandLine],
        views: Iterable[ViewEntry] = (),
        waterfronts: Iterable[WaterfrontEntry] = (),
    ) -> AssessmentTotals:
        views = list(views)
        waterfronts = list(waterfronts)

        total_acreage = sum(_amount(line.size) for line in lines if line.size_unit == SizeUnit.ACRES)
        total_frontage = sum(
            _amount(line.size) for line in lines if line.size_unit == SizeUnit.FRONT_FOOT
        )

        land_market = sum(_amount(line.market_value) for line in lines)
        land_current_use = sum(_amount(line.current_use_value) for line in lines)
        land_credit = sum(_amount(line.current_use_credit) for line in lines)
        land_assessed = land_market - land_credit

        view_market = sum(view.calculated_value for view in views)
        view_assessed = sum(0.0 if view.current_use else view.calculated_value for view in views)

        waterfront_market = sum(entry.calculated_value for entry in waterfronts)
        waterfront_assessed = sum(self._waterfront_assessed(entry) for entry in waterfronts)

        return AssessmentTotals(
            total_acreage=round_half_up(total_acreage, 3),
            total_frontage=round_half_up(total_frontage, 2),
            land_market_value=round_dollars(land_market),
            land_current_use_value=round_dollars(land_current_use),
            land_current_use_credit=round_dollars(land_credit),
            land_assessed_value=round_dollars(land_assessed),
            view_market_value=round_dollars(view_market),
            view_assessed_value=round_dollars(view_assessed),
            waterfront_market_value=round_dollars(waterfront_market),
            waterfront_assessed_value=round_dollars(waterfront_assessed),
            total_market_value=round_dollars(land_market + view_market + waterfront_market),
            total_current_use_value=round_dollars(land_current_use),
            total_current_use_credit=round_dollars(land_credit),
            total_assessed_value=round_dollars(land_assessed + view_assessed + waterfront_assessed),
            has_current_use_land=any(self._is_current_use(line.land_use_type) for line in lines),
        )

    @staticmethod
    def _waterfront_assessed(entry: WaterfrontEntry) -> float:
        if entry.assessed_value is not None:
            return entry.assessed_value
        return 0.0 if entry.current_use else entry.calculated_value
