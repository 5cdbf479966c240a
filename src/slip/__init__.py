"""K PLUS transaction slip verification.

This module recovers the transaction identifier from noisy OCR text of a
Thai bank transfer slip, validates it against the K PLUS identifier grammar,
scores its forgery risk and cross-checks it against the other slip fields.

Core Components:
    - types: Data structures (ParsedIdentifier, RiskAssessment, ValidationResult, etc.)
    - config_loader: Configuration loading with Pydantic validation
    - normalizer: Thai phonetic / digit-glyph substitution
    - extractor: Identifier candidate extraction from OCR text
    - repair: Type-code misreading repair
    - validator: Identifier grammar parsing and validation
    - risk: Forgery-risk heuristics
    - cross_check: Identifier time vs. slip time
    - fields: Amount, date/time and party extraction
    - processor: Weighted slip validation

Example:
    >>> from src.slip import SlipValidator
    >>> validator = SlipValidator()
    >>> result = validator.process_text(ocr_text, ocr_confidence=85.0)
    >>> print(result.valid, result.score_percentage)
"""

from .config_loader import (
    Config,
    CrossCheckConfig,
    GrammarConfig,
    RepairConfig,
    RepairRuleConfig,
    RiskConfig,
    ScoringConfig,
    ScoringWeights,
    SlipModuleConfig,
    get_default_config,
    load_config,
)
from .cross_check import compare_times, read_hour_minute, verify_date_time, verify_time
from .extractor import IdentifierExtractor, extract_identifier, score_candidate
from .fields import extract_amount, extract_date_time, extract_parties, parse_slip_text
from .normalizer import OCR_FIXES, normalize, strip_non_alnum
from .processor import SlipValidator, validate_slip
from .repair import IdentifierRepairer, repair
from .risk import assess, recommend
from .types import (
    AmountCheck,
    DateTimeVerification,
    ErrorKind,
    ExpectedValues,
    ExtractedSlip,
    IdentifierCandidate,
    IdentifierValidation,
    OCRLine,
    OCRQuality,
    ParsedIdentifier,
    QuickValidation,
    RecipientCheck,
    Recommendation,
    RejectionReason,
    RepairResult,
    RiskAssessment,
    RiskLevel,
    SlipDateTime,
    TimeCheck,
    TypeCheck,
    ValidationResult,
)
from .validator import (
    TRANSACTION_TYPES,
    extract_year,
    get_transaction_type,
    is_valid,
    parse,
    validate,
)

__all__ = [
    # Types
    "RiskLevel",
    "Recommendation",
    "ErrorKind",
    "OCRQuality",
    "RejectionReason",
    "ParsedIdentifier",
    "IdentifierValidation",
    "IdentifierCandidate",
    "RepairResult",
    "RiskAssessment",
    "DateTimeVerification",
    "TimeCheck",
    "AmountCheck",
    "RecipientCheck",
    "TypeCheck",
    "OCRLine",
    "SlipDateTime",
    "ExtractedSlip",
    "ExpectedValues",
    "QuickValidation",
    "ValidationResult",
    # Configuration
    "Config",
    "SlipModuleConfig",
    "GrammarConfig",
    "RepairConfig",
    "RepairRuleConfig",
    "RiskConfig",
    "CrossCheckConfig",
    "ScoringConfig",
    "ScoringWeights",
    "load_config",
    "get_default_config",
    # Normalization and extraction
    "OCR_FIXES",
    "normalize",
    "strip_non_alnum",
    "IdentifierExtractor",
    "extract_identifier",
    "score_candidate",
    "IdentifierRepairer",
    "repair",
    # Grammar
    "TRANSACTION_TYPES",
    "parse",
    "validate",
    "is_valid",
    "extract_year",
    "get_transaction_type",
    # Risk and cross-check
    "assess",
    "recommend",
    "verify_date_time",
    "verify_time",
    "compare_times",
    "read_hour_minute",
    # Slip fields and orchestration
    "extract_amount",
    "extract_date_time",
    "extract_parties",
    "parse_slip_text",
    "SlipValidator",
    "validate_slip",
]
