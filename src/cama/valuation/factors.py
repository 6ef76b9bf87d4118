"""Multiplicative land factor resolution."""

from __future__ import annotations

from cama.core.types import FactorKind
from cama.valuation.reference import ReferenceIndex


class FactorResolver:
    """Resolves adjustment factors (rate / 100) with a per-instance cache.

    Missing keys, unknown attributes and zero rates all resolve to the
    neutral factor 1.0.
    """

    def __init__(self, index: ReferenceIndex) -> None:
        self._index = index
        self._cache: dict[tuple[FactorKind, str], float] = {}

    def resolve(self, kind: FactorKind, key: str | None) -> float:
        if not key:
            return 1.0
        cache_key = (kind, key)
        if cache_key not in self._cache:
            attribute = self._index.attribute(kind, key)
            self._cache[cache_key] = attribute.rate / 100 if attribute and attribute.rate else 1.0
        return self._cache[cache_key]

    def neighborhood(self, neighborhood_id: str | None) -> float:
        return self.resolve(FactorKind.NEIGHBORHOOD, neighborhood_id)

    def site(self, site_conditions_id: str | None) -> float:
        return self.resolve(FactorKind.SITE, site_conditions_id)

    def driveway(self, driveway_type_id: str | None) -> float:
        return self.resolve(FactorKind.DRIVEWAY, driveway_type_id)

    def road(self, road_type_id: str | None) -> float:
        return self.resolve(FactorKind.ROAD, road_type_id)

    def topography(self, topography: str | None) -> float:
        return self.resolve(FactorKind.TOPOGRAPHY, topography)

    @staticmethod
    def condition(condition: float | None) -> float:
        """Condition is a percentage; an absent condition is full value."""
        if condition is None:
            return 1.0
        return condition / 100
