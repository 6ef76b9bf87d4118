"""Current-use valuation for agricultural and forestry land."""

from __future__ import annotations

from cama.valuation.models import CurrentUseCategory, LandLine
from cama.valuation.numeric import round_dollars
from cama.valuation.reference import ReferenceIndex

DEFAULT_SPI = 50.0


class CurrentUseValuator:
    """Values current-use land by soil productivity index (SPI).

    The per-acre rate is interpolated linearly between the category's minimum
    and maximum rate by ``spi / 100``. The resulting value is rounded to the
    dollar, not to the $100 used for market values.
    """

    def __init__(self, index: ReferenceIndex) -> None:
        self._index = index

    def is_current_use(self, land_use_type: str | None) -> bool:
        return self._index.current_use_category(land_use_type) is not None

    @staticmethod
    def rate(category: CurrentUseCategory, spi: float | None) -> float:
        spi_ratio = min(max((DEFAULT_SPI if spi is None else spi) / 100, 0.0), 1.0)
        return category.min_rate + (category.max_rate - category.min_rate) * spi_ratio

    def value(self, line: LandLine) -> int:
        category = self._index.current_use_category(line.land_use_type)
        if category is None:
            return 0
        return round_dollars(self.rate(category, line.spi) * line.acreage)
