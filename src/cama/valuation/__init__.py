"""Land valuation engine.

Converts land lines (acreage, frontage, zone, neighborhood, site, road,
driveway and current-use classification) into assessed values.
"""

from cama.valuation.batch import recalculate_properties, validate_calculations
from cama.valuation.calculator import LandAssessmentCalculator
from cama.valuation.models import (
    AssessmentTotals,
    LandAssessment,
    LandLine,
    PropertyContext,
    ReferenceData,
    ViewEntry,
    WaterfrontEntry,
)
from cama.valuation.reference import ReferenceIndex, load_reference_data

__all__ = [
    "AssessmentTotals",
    "LandAssessment",
    "LandAssessmentCalculator",
    "LandLine",
    "PropertyContext",
    "ReferenceData",
    "ReferenceIndex",
    "ViewEntry",
    "WaterfrontEntry",
    "load_reference_data",
    "recalculate_properties",
    "validate_calculations",
]
