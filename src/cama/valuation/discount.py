"""Economy-of-scale acreage discount."""

from __future__ import annotations

from cama.valuation.models import AcreageDiscountSettings
from cama.valuation.numeric import round_dollars, round_half_up


class AcreageDiscountCurve:
    """Linear discount ramp between the qualifying acreage thresholds.

    Below the minimum there is no discount; at or above the maximum the full
    ``maximum_discount_percentage`` applies. Without (active) settings every
    acreage gets 0%.
    """

    def __init__(self, settings: AcreageDiscountSettings | None = None) -> None:
        self._settings = settings if settings is not None and settings.is_active else None

    @property
    def settings(self) -> AcreageDiscountSettings | None:
        return self._settings

    def percentage(self, acreage: float) -> float:
        """Discount percentage (0-100) for ``acreage``, to 2 decimal places."""
        settings = self._settings
        if settings is None or acreage < settings.minimum_qualifying_acreage:
            return 0.0
        if acreage >= settings.maximum_qualifying_acreage:
            return settings.maximum_discount_percentage

        span = settings.maximum_qualifying_acreage - settings.minimum_qualifying_acreage
        ratio = (acreage - settings.minimum_qualifying_acreage) / span
        return round_half_up(ratio * settings.maximum_discount_percentage, 2)

    def apply(self, value: float, acreage: float) -> float:
        """Reduce ``value`` by the discount for ``acreage``, rounded to whole dollars."""
        if self._settings is None or not value or not acreage:
            return value
        discount = value * self.percentage(acreage) / 100
        return round_dollars(value - discount)
