"""
Duplicate Detection Configuration

Thresholds, algorithm weights and concurrency limits for a detection run.
Validated once at construction time; an invalid configuration is the one
error allowed to abort a run.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from ..errors import ConfigurationError, ErrorContext

logger = logging.getLogger(__name__)


class AlgorithmWeights(BaseModel):
    """Weights of the sub-metrics in the combined duplicate score."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True
    )

    jaro_winkler: float = Field(default=0.2, ge=0.0)
    token_sort: float = Field(default=0.4, ge=0.0)
    token_set: float = Field(default=0.4, ge=0.0)

    @model_validator(mode="after")
    def check_total(self) -> "AlgorithmWeights":
        if self.jaro_winkler + self.token_sort + self.token_set <= 0:
            raise ValueError("algorithm weights must not all be zero")
        return self


class DuplicateDetectionConfig(BaseModel):
    """Configuration for one duplicate detection run."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True
    )

    high_confidence_threshold: float = Field(default=85.0, ge=0.0, le=100.0)
    low_confidence_threshold: float = Field(default=60.0, ge=0.0, le=100.0)
    enable_ai_judgment: bool = True
    algorithm_weights: AlgorithmWeights = Field(default_factory=AlgorithmWeights)

    # Score forced onto pairs the entity heuristic calls obviously identical
    obvious_match_floor: float = Field(default=95.0, ge=0.0, le=100.0)
    max_concurrent_ai_requests: int = Field(default=5, ge=1)
    large_batch_warning: int = Field(default=2000, ge=1)

    @model_validator(mode="after")
    def check_thresholds(self) -> "DuplicateDetectionConfig":
        if self.low_confidence_threshold >= self.high_confidence_threshold:
            raise ValueError(
                f"lowConfidenceThreshold ({self.low_confidence_threshold}) must be "
                f"below highConfidenceThreshold ({self.high_confidence_threshold})"
            )
        return self


ConfigInput = Union[DuplicateDetectionConfig, Mapping[str, Any], None]


def _field_name(key: str) -> str:
    """Map a camelCase boundary key onto its field name; unknown keys pass through."""
    for name, field in DuplicateDetectionConfig.model_fields.items():
        if key == field.alias:
            return name
    return key


def build_config(config: ConfigInput = None, **overrides) -> DuplicateDetectionConfig:
    """
    Build a validated configuration from a partial mapping and overrides.

    Args:
        config: Existing config, partial mapping (camelCase or snake_case) or None
        **overrides: Individual fields to override

    Returns:
        Validated DuplicateDetectionConfig

    Raises:
        ConfigurationError: If any field is invalid or unknown
    """
    if isinstance(config, DuplicateDetectionConfig):
        if not overrides:
            return config
        values: Dict[str, Any] = config.model_dump()
    else:
        values = {_field_name(key): value for key, value in (config or {}).items()}
    values.update({_field_name(key): value for key, value in overrides.items()})

    try:
        return DuplicateDetectionConfig.model_validate(values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(
            f"Invalid duplicate detection configuration: {problems}",
            context=ErrorContext(operation="build_config", metadata={"values": values}),
            cause=e,
        ) from e


def load_config(config_path: Optional[str] = None, **overrides) -> DuplicateDetectionConfig:
    """Load configuration overrides from a JSON file on top of the defaults."""
    values: Dict[str, Any] = {}

    if config_path and Path(config_path).exists():
        with open(config_path, "r") as f:
            try:
                values = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Config file {config_path} is not valid JSON: {e}", cause=e
                ) from e
        logger.info(f"Loaded duplicate detection config from {config_path}")
    elif config_path:
        logger.warning(f"Config file {config_path} not found - using defaults")

    if not isinstance(values, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a JSON object")

    return build_config(values, **overrides)
