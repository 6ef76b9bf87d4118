"""Core type definitions shared across the CAMA modules."""

from __future__ import annotations

from enum import StrEnum


class SizeUnit(StrEnum):
    """Unit a land line's size is measured in."""

    ACRES = "AC"
    FRONT_FOOT = "FF"


class FactorKind(StrEnum):
    """Reference tables that contribute a multiplicative land factor."""

    NEIGHBORHOOD = "neighborhood"
    SITE = "site"
    DRIVEWAY = "driveway"
    ROAD = "road"
    TOPOGRAPHY = "topography"


_SIZE_UNIT_ALIASES: dict[str, SizeUnit] = {
    "ac": SizeUnit.ACRES,
    "acre": SizeUnit.ACRES,
    "acres": SizeUnit.ACRES,
    "ff": SizeUnit.FRONT_FOOT,
    "front-foot": SizeUnit.FRONT_FOOT,
    "front_foot": SizeUnit.FRONT_FOOT,
    "frontage": SizeUnit.FRONT_FOOT,
}


def parse_size_unit(value: object) -> SizeUnit | None:
    """Normalise a size unit label; unknown labels return None."""
    if isinstance(value, SizeUnit):
        return value
    if value is None:
        return None
    return _SIZE_UNIT_ALIASES.get(str(value).strip().lower())
