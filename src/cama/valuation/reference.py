"""Reference index: memoized lookups over a municipality's reference data."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from cama.core.types import FactorKind
from cama.valuation.ladder import is_valid_ladder
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

logger = logging.getLogger(__name__)

_DEFAULT_REFERENCE_PATH = Path(__file__).resolve().parents[3] / "config" / "valuation_reference.yml"


class ReferenceIndex:
    """Per-instance lookup maps built lazily from a ``ReferenceData`` bundle.

    Each lookup scans its reference list once per key and remembers the
    result, including misses. Instances must not be shared between
    municipalities.
    """

    def __init__(self, data: ReferenceData) -> None:
        self._data = data
        self._zones: dict[str, Zone | None] = {}
        self._ladders: dict[str, list[LadderTier]] = {}
        self._water_body_ladders: dict[str, list[WaterfrontLadderTier]] = {}
        self._attributes: dict[FactorKind, dict[str, FactorAttribute | None]] = {
            kind: {} for kind in FactorKind
        }
        self._current_use: dict[str, CurrentUseCategory | None] = {}
        self._taxation: dict[str, LandTaxationCategory | None] = {}

    @property
    def data(self) -> ReferenceData:
        return self._data

    @property
    def acreage_discount_settings(self) -> AcreageDiscountSettings | None:
        return self._data.acreage_discount_settings

    def zone(self, zone_id: str | None) -> Zone | None:
        if not zone_id:
            return None
        if zone_id not in self._zones:
            self._zones[zone_id] = next((z for z in self._data.zones if z.id == zone_id), None)
        return self._zones[zone_id]

    def ladder(self, zone_id: str | None) -> list[LadderTier]:
        """Tiers for a zone sorted by acreage; empty when the zone has none."""
        if not zone_id:
            return []
        if zone_id not in self._ladders:
            tiers = self._data.land_ladders.get(zone_id, [])
            self._ladders[zone_id] = sorted(tiers, key=lambda tier: tier.acreage)
        return self._ladders[zone_id]

    def has_ladder(self, zone_id: str | None) -> bool:
        return bool(self.ladder(zone_id))

    def water_body_ladder(self, water_body_id: str | None) -> list[WaterfrontLadderTier]:
        if not water_body_id:
            return []
        if water_body_id not in self._water_body_ladders:
            tiers = self._data.water_body_ladders.get(water_body_id, [])
            self._water_body_ladders[water_body_id] = sorted(tiers, key=lambda tier: tier.frontage)
        return self._water_body_ladders[water_body_id]

    def attribute(self, kind: FactorKind, key: str | None) -> FactorAttribute | None:
        """Resolve a factor attribute by id.

        Topography is recorded on land lines by its description, so those
        lookups also match ``display_text`` case-insensitively.
        """
        if not key:
            return None
        cache = self._attributes[kind]
        if key not in cache:
            cache[key] = self._find_attribute(kind, key)
        return cache[key]

    def _find_attribute(self, kind: FactorKind, key: str) -> FactorAttribute | None:
        rows = self._attribute_rows(kind)
        for row in rows:
            if row.id == key:
                return row
        if kind == FactorKind.TOPOGRAPHY:
            folded = key.casefold()
            for row in rows:
                if row.display_text and row.display_text.casefold() == folded:
                    return row
        return None

    def _attribute_rows(self, kind: FactorKind) -> list[FactorAttribute]:
        if kind == FactorKind.NEIGHBORHOOD:
            return self._data.neighborhoods
        elif kind == FactorKind.SITE:
            return self._data.site_attributes
        elif kind == FactorKind.DRIVEWAY:
            return self._data.driveway_attributes
        elif kind == FactorKind.ROAD:
            return self._data.road_attributes
        return self._data.topography_attributes

    def current_use_category(self, code: str | None) -> CurrentUseCategory | None:
        if not isinstance(code, str) or not code:
            return None
        if code not in self._current_use:
            self._current_use[code] = next(
                (c for c in self._data.current_use_categories if c.code == code), None
            )
        return self._current_use[code]

    def taxation_category(self, category_id: str | None) -> LandTaxationCategory | None:
        if not category_id:
            return None
        if category_id not in self._taxation:
            self._taxation[category_id] = next(
                (c for c in self._data.land_taxation_categories if c.id == category_id), None
            )
        return self._taxation[category_id]


def load_reference_data(path: str | Path | None = None) -> ReferenceData:
    """Build a ``ReferenceData`` bundle from a YAML document.

    Ladders whose rows are not all numeric are dropped with a warning; the
    zones they belong to then value to 0 instead of failing the load.
    """
    config_path = Path(path) if path else _DEFAULT_REFERENCE_PATH
    with open(config_path) as fh:
        raw = yaml.safe_load(fh) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Reference data in {config_path} must be a mapping, got {type(raw).__name__}")

    raw = dict(raw)
    raw["land_ladders"] = _valid_ladders(raw.get("land_ladders"), "acreage", "value")
    raw["water_body_ladders"] = _valid_ladders(raw.get("water_body_ladders"), "frontage", "factor")
    return ReferenceData.model_validate(raw)


def _valid_ladders(ladders: Any, x_key: str, y_key: str) -> dict[str, Any]:
    valid: dict[str, Any] = {}
    for key, rows in (ladders or {}).items():
        if is_valid_ladder(rows, x_key, y_key):
            valid[str(key)] = rows
        else:
            logger.warning("Dropping invalid ladder for %s: rows need numeric %r and %r", key, x_key, y_key)
    return valid
