"""Engine configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class ValuationConfig(BaseSettings):
    """Land valuation engine configuration."""

    model_config = {"env_prefix": "MUNICIPAL_CAMA_VALUATION_"}

    # None loads the bundled config/valuation_reference.yml.
    reference_data_path: str | None = None
    # When enabled, non-numeric size/rate/SPI input fails the land line
    # instead of being coerced to 0.
    strict_numeric: bool = False
    validation_tolerance: float = 1.0


class Settings(BaseSettings):
    """Root settings."""

    model_config = {"env_prefix": "MUNICIPAL_CAMA_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    valuation: ValuationConfig = Field(default_factory=ValuationConfig)
