"""Land valuation data models: reference entities, land lines and totals."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from cama.core.types import SizeUnit, parse_size_unit
from cama.valuation.numeric import to_number


def _strict_numeric(info: ValidationInfo) -> bool:
    return bool(info.context and info.context.get("strict_numeric"))


def _as_code(value: Any) -> Any:
    # Codes and ids are stored as numbers in some municipalities' data.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


class ReferenceEntity(BaseModel):
    """Base for reference rows identified by ``id`` (or a stored ``_id``)."""

    id: str = Field(validation_alias=AliasChoices("id", "_id"))

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return _as_code(value)


class Zone(ReferenceEntity):
    """A land-use zoning area."""

    name: str = ""
    minimum_acreage: float = 0.0
    minimum_frontage: float = 0.0
    excess_land_cost_per_acre: float = 0.0

    @field_validator("minimum_acreage", "minimum_frontage", "excess_land_cost_per_acre", mode="before")
    @classmethod
    def _coerce_numeric(cls, value: Any, info: ValidationInfo) -> Any:
        return to_number(value, 0.0, field=info.field_name)


class LadderTier(BaseModel):
    """An (acreage, total value) anchor on a zone's land ladder."""

    acreage: float
    value: float
    frontage_rate: float | None = None


class WaterfrontLadderTier(BaseModel):
    """A (frontage, factor) anchor on a water body's frontage ladder."""

    frontage: float
    factor: float


class FactorAttribute(ReferenceEntity):
    """Neighborhood, site, driveway, road or topography attribute.

    ``rate`` is an integer percentage; 100 is neutral. Neighborhood codes are
    stored with a ``factor`` key, which is accepted as an alias.
    """

    code: str = ""
    display_text: str = ""
    rate: float = Field(0.0, validation_alias=AliasChoices("rate", "factor"))

    @field_validator("rate", mode="before")
    @classmethod
    def _coerce_rate(cls, value: Any) -> Any:
        return to_number(value, 0.0, field="rate")


class CurrentUseCategory(BaseModel):
    """Current-use classification with a per-acre rate range."""

    code: str
    display_text: str = ""
    min_rate: float = 0.0
    max_rate: float = 0.0

    @field_validator("code", mode="before")
    @classmethod
    def _stringify_code(cls, value: Any) -> Any:
        return _as_code(value)


class LandTaxationCategory(ReferenceEntity):
    name: str = ""
    tax_percentage: float = 100.0


class AcreageDiscountSettings(BaseModel):
    """Linear economy-of-scale discount ramp for large parcels."""

    minimum_qualifying_acreage: float = 10.0
    maximum_qualifying_acreage: float = 200.0
    maximum_discount_percentage: float = 75.0
    is_active: bool = True

    @model_validator(mode="after")
    def _check_range(self) -> AcreageDiscountSettings:
        if self.maximum_qualifying_acreage <= self.minimum_qualifying_acreage:
            raise ValueError(
                "Maximum qualifying acreage must be greater than minimum qualifying acreage"
            )
        return self


class ReferenceData(BaseModel):
    """Read-only reference bundle for one municipality and year."""

    zones: list[Zone] = Field(default_factory=list)
    land_ladders: dict[str, list[LadderTier]] = Field(default_factory=dict)
    water_body_ladders: dict[str, list[WaterfrontLadderTier]] = Field(default_factory=dict)
    neighborhoods: list[FactorAttribute] = Field(default_factory=list)
    site_attributes: list[FactorAttribute] = Field(default_factory=list)
    driveway_attributes: list[FactorAttribute] = Field(default_factory=list)
    road_attributes: list[FactorAttribute] = Field(default_factory=list)
    topography_attributes: list[FactorAttribute] = Field(default_factory=list)
    current_use_categories: list[CurrentUseCategory] = Field(default_factory=list)
    land_taxation_categories: list[LandTaxationCategory] = Field(default_factory=list)
    acreage_discount_settings: AcreageDiscountSettings | None = None

    @field_validator("land_ladders", "water_body_ladders", mode="before")
    @classmethod
    def _stringify_keys(cls, value: Any) -> Any:
        # YAML parses numeric zone ids as int
        if isinstance(value, dict):
            return {str(key): rows for key, rows in value.items()}
        return value


# ---------------------------------------------------------------------------
# Land lines and property inputs
# ---------------------------------------------------------------------------


CALCULATED_FIELDS = (
    "effective_acreage",
    "base_rate",
    "base_value",
    "neighborhood_factor",
    "economy_of_scale_factor",
    "site_factor",
    "driveway_factor",
    "road_factor",
    "topography_factor",
    "condition_factor",
    "raw_market_value",
    "market_value",
    "current_use_value",
    "current_use_credit",
    "assessed_value",
    "calculation_error",
)


class LandLine(BaseModel):
    """One line item of a property's land assessment.

    Input fields are validated leniently: numeric fields go through
    ``to_number`` and honour a ``strict_numeric`` validation context. All
    calculated fields are ``None`` until the line has been through the
    calculator. Unknown keys are preserved.
    """

    model_config = {"extra": "allow"}

    size: float = 0.0
    size_unit: SizeUnit | None = None
    is_excess_acreage: bool = False
    land_use_type: str | None = None
    topography: str | None = None
    condition: float | None = None
    spi: float | None = None

    effective_acreage: float | None = None
    base_rate: float | None = None
    base_value: float | None = None
    neighborhood_factor: float | None = None
    economy_of_scale_factor: float | None = None
    site_factor: float | None = None
    driveway_factor: float | None = None
    road_factor: float | None = None
    topography_factor: float | None = None
    condition_factor: float | None = None
    raw_market_value: float | None = None
    market_value: float | None = None
    current_use_value: float | None = None
    current_use_credit: float | None = None
    assessed_value: float | None = None
    calculation_error: str | None = None

    @field_validator("size", mode="before")
    @classmethod
    def _coerce_size(cls, value: Any, info: ValidationInfo) -> Any:
        return to_number(value, 0.0, strict=_strict_numeric(info), field="size")

    @field_validator("condition", "spi", mode="before")
    @classmethod
    def _coerce_optional(cls, value: Any, info: ValidationInfo) -> Any:
        return to_number(value, None, strict=_strict_numeric(info), field=info.field_name)

    @field_validator("size_unit", mode="before")
    @classmethod
    def _normalise_unit(cls, value: Any) -> Any:
        return parse_size_unit(value)

    @field_validator("land_use_type", "topography", mode="before")
    @classmethod
    def _stringify_codes(cls, value: Any) -> Any:
        return _as_code(value)

    def with_results(self, **values: Any) -> LandLine:
        """Copy with every calculated field reset, then set to ``values``."""
        update: dict[str, Any] = dict.fromkeys(CALCULATED_FIELDS)
        update.update(values)
        return self.model_copy(update=update)

    @property
    def acreage(self) -> float:
        return self.size if self.size_unit == SizeUnit.ACRES else 0.0

    @property
    def frontage(self) -> float:
        return self.size if self.size_unit == SizeUnit.FRONT_FOOT else 0.0


class ViewEntry(BaseModel):
    """A view contribution with a pre-computed value."""

    model_config = {"extra": "allow"}

    calculated_value: float = Field(
        0.0, validation_alias=AliasChoices("calculated_value", "calculatedValue")
    )
    current_use: bool = False

    @field_validator("calculated_value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Any:
        return to_number(value, 0.0, field="calculated_value")


class WaterfrontEntry(ViewEntry):
    """A waterfront contribution; ``assessed_value`` overrides the current-use rule."""

    assessed_value: float | None = None

    @field_validator("assessed_value", mode="before")
    @classmethod
    def _coerce_assessed(cls, value: Any) -> Any:
        return to_number(value, None, field="assessed_value")


class AssessmentTotals(BaseModel):
    """Property-level totals produced by the totals aggregator."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    total_acreage: float = 0.0
    total_frontage: float = 0.0

    land_market_value: int = 0
    land_current_use_value: int = 0
    land_current_use_credit: int = 0
    land_assessed_value: int = 0

    view_market_value: int = 0
    view_assessed_value: int = 0

    waterfront_market_value: int = 0
    waterfront_assessed_value: int = 0

    total_market_value: int = 0
    total_current_use_value: int = 0
    total_current_use_credit: int = 0
    total_assessed_value: int = 0

    has_current_use_land: bool = False

    @classmethod
    def empty(cls) -> AssessmentTotals:
        """Totals for a property with no land assessment."""
        return cls()

    def as_legacy_dict(self) -> dict[str, Any]:
        """camelCase totals including the legacy field names older records use."""
        data = self.model_dump(by_alias=True)
        data.update(
            {
                "landDetailsMarketValue": self.land_market_value,
                "landDetailsAssessedValue": self.land_assessed_value,
                "landTaxableValue": self.land_assessed_value,
                "viewTaxableValue": self.view_assessed_value,
                "waterfrontTaxableValue": self.waterfront_assessed_value,
                "totalTaxableValue": self.total_assessed_value,
                "totalLNICU": self.total_current_use_value,
                "totalCUValue": self.total_current_use_value,
                "totalViewValue": self.view_market_value,
            }
        )
        return data


class LandAssessment(BaseModel):
    """A property's land assessment: identifiers plus ordered land lines.

    Lines, views and waterfronts that fail validation are kept as given so
    that the calculator can report or skip them individually.
    """

    model_config = {"extra": "allow"}

    property_id: str | None = None
    zone: str | None = None
    neighborhood: str | None = None
    site_conditions: str | None = None
    driveway_type: str | None = None
    road_type: str | None = None
    land_use_details: list[Annotated[LandLine | Any, Field(union_mode="left_to_right")]] = Field(
        default_factory=list
    )
    views: list[Annotated[ViewEntry | Any, Field(union_mode="left_to_right")]] = Field(
        default_factory=list
    )
    waterfronts: list[Annotated[WaterfrontEntry | Any, Field(union_mode="left_to_right")]] = Field(
        default_factory=list
    )
    calculated_totals: AssessmentTotals | None = None

    @field_validator(
        "property_id", "zone", "neighborhood", "site_conditions", "driveway_type", "road_type",
        mode="before",
    )
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        return _as_code(value)


class PropertyContext(BaseModel):
    """Property-level identifiers every land line is valued against."""

    zone_id: str | None = None
    neighborhood_id: str | None = None
    site_conditions_id: str | None = None
    driveway_type_id: str | None = None
    road_type_id: str | None = None

    @classmethod
    def from_assessment(cls, assessment: LandAssessment) -> PropertyContext:
        return cls(
            zone_id=assessment.zone,
            neighborhood_id=assessment.neighborhood,
            site_conditions_id=assessment.site_conditions,
            driveway_type_id=assessment.driveway_type,
            road_type_id=assessment.road_type,
        )


# ---------------------------------------------------------------------------
# Zone minimum adjustments and batch reports
# ---------------------------------------------------------------------------


class ZoneAdjustment(BaseModel):
    """One change made while enforcing a zone's minimum acreage."""

    kind: str
    land_use_type: str | None = None
    original_size: float = 0.0
    adjusted_size: float = 0.0
    acreage: float = 0.0


class ZoneAdjustmentReport(BaseModel):
    adjusted: bool = False
    excess_acreage_created: bool = False
    adjustments: list[ZoneAdjustment] = Field(default_factory=list)
