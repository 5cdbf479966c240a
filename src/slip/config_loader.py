"""Configuration loader with Pydantic validation for slip verification.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values. Every policy constant of
the pipeline (grammar bounds, repair rules, risk thresholds, scoring weights)
lives here so that other issuers or weightings need no code change.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class GrammarConfig(BaseModel):
    """Transaction identifier grammar.

    Attributes:
        prefix: Literal issuing-system prefix (positions 1-4)
        min_length: Minimum canonical length
        max_length: Maximum canonical length
        year_epoch: Offset added to the 2-digit year code (98 -> 2568 BE)
        calendar_offset: Gregorian -> Buddhist-era offset
        years_back: Oldest accepted year, relative to the current year
        years_ahead: Newest accepted year, relative to the current year
    """

    prefix: str = "0152"
    min_length: int = Field(default=20, gt=0)
    max_length: int = Field(default=21, gt=0)
    year_epoch: int = 2470
    calendar_offset: int = 543
    years_back: int = Field(default=5, ge=0)
    years_ahead: int = Field(default=1, ge=0)

    @field_validator("prefix")
    @classmethod
    def _prefix_is_digits(cls, value: str) -> str:
        if len(value) != 4 or not value.isdigit():
            raise ValueError(f"prefix must be 4 digits, got {value!r}")
        return value

    @model_validator(mode="after")
    def _length_range(self) -> "GrammarConfig":
        if self.min_length > self.max_length:
            raise ValueError(
                f"min_length {self.min_length} > max_length {self.max_length}"
            )
        return self


class RepairRuleConfig(BaseModel):
    """One known middle-segment misreading.

    Attributes:
        pattern: Regex for the misread type-code segment
        code: Type code the segment is rewritten to
    """

    pattern: str
    code: str

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid repair pattern {value!r}: {e}") from e
        return value


class RepairConfig(BaseModel):
    """Identifier repair configuration.

    Attributes:
        enabled: Enable type-code repair
        min_length: Shortest candidate eligible for repair
        rules: Ordered misreading table, first match wins
        digit_to_letter: Fallback substitution for all-digit type codes
    """

    enabled: bool = True
    min_length: int = 20
    rules: List[RepairRuleConfig] = [
        RepairRuleConfig(pattern=r"8QR[08]0?", code="BQR0"),
        RepairRuleConfig(pattern=r"8(?:16|TF|T6)0?", code="ATF0"),
        RepairRuleConfig(pattern=r"8PM0?|8P\d", code="APM0"),
        RepairRuleConfig(pattern=r"8\d{2}[08]", code="BQR0"),
    ]
    digit_to_letter: Dict[str, str] = {
        "0": "O",
        "1": "I",
        "2": "Z",
        "3": "B",
        "4": "A",
        "5": "S",
        "6": "F",
        "7": "T",
        "8": "B",
    }


class RiskConfig(BaseModel):
    """Risk scorer thresholds.

    Attributes:
        stale_after_years: Years before the current year after which an identifier is stale
        future_tolerance_years: Years after the current year still considered plausible
        escalate_after_reasons: Number of reasons that forces HIGH
    """

    stale_after_years: int = Field(default=2, ge=0)
    future_tolerance_years: int = Field(default=1, ge=0)
    escalate_after_reasons: int = Field(default=3, ge=1)


class CrossCheckConfig(BaseModel):
    """Timestamp cross-verification configuration.

    Attributes:
        minute_tolerance: Maximum accepted minute difference
    """

    minute_tolerance: int = Field(default=2, ge=0)


class ScoringWeights(BaseModel):
    """Point budgets of the orchestrator checks."""

    authenticity: int = Field(default=25, ge=0)
    authenticity_partial: int = Field(default=15, ge=0)
    time: int = Field(default=25, ge=0)
    amount_present: int = Field(default=20, ge=0)
    amount_match: int = Field(default=15, ge=0)
    recipient: int = Field(default=10, ge=0)
    type_match: int = Field(default=10, ge=0)
    ocr_confidence: int = Field(default=15, ge=0)
    ocr_confidence_partial: int = Field(default=10, ge=0)


class ScoringConfig(BaseModel):
    """Orchestrator policy.

    Attributes:
        weights: Point budget per check
        accept_ratio: Minimum score / max_score to accept (0.0-1.0)
        amount_tolerance: Absolute tolerance for amount equality
        ocr_good_confidence: Lower bound of the GOOD band (0-100)
        ocr_fair_confidence: Lower bound of the FAIR band (0-100)
    """

    weights: ScoringWeights = ScoringWeights()
    accept_ratio: float = Field(default=0.70, ge=0.0, le=1.0)
    amount_tolerance: float = Field(default=0.01, ge=0.0)
    ocr_good_confidence: float = Field(default=70.0, ge=0.0, le=100.0)
    ocr_fair_confidence: float = Field(default=50.0, ge=0.0, le=100.0)


class SlipModuleConfig(BaseModel):
    """Complete slip verification configuration.

    Attributes:
        grammar: Identifier grammar
        repair: Identifier repair
        risk: Risk scorer thresholds
        cross_check: Timestamp cross-verification
        scoring: Orchestrator weights and threshold
    """

    grammar: GrammarConfig = GrammarConfig()
    repair: RepairConfig = RepairConfig()
    risk: RiskConfig = RiskConfig()
    cross_check: CrossCheckConfig = CrossCheckConfig()
    scoring: ScoringConfig = ScoringConfig()


class Config(BaseModel):
    """Root configuration container.

    Attributes:
        slip: Slip verification configuration
    """

    slip: SlipModuleConfig = SlipModuleConfig()


def load_config(config_path: Path) -> Config:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated Config object with all settings

    Raises:
        FileNotFoundError: If config file does not exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails

    Example:
        >>> config = load_config(Path("src/slip/config.yaml"))
        >>> print(config.slip.scoring.accept_ratio)
        0.7
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading slip config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    # Accept both a flat file and one nested under a top-level 'slip' key
    if "slip" in config_dict:
        config_dict = config_dict["slip"] or {}

    return Config(slip=SlipModuleConfig(**config_dict))


def get_default_config() -> Config:
    """Get default configuration from bundled config.yaml file.

    Returns:
        Config object loaded from src/slip/config.yaml
    """
    default_config_path = Path(__file__).parent / "config.yaml"
    if default_config_path.exists():
        return load_config(default_config_path)
    else:
        # Fallback to hardcoded defaults if config file is missing
        return Config()
