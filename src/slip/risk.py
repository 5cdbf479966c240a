"""Heuristic forgery-risk scoring of transaction identifiers.

A structurally valid identifier can still be fabricated. The scorer runs
independent checks, each adding a reason and possibly raising the risk
level; levels only escalate within one assessment:

    unknown type code              -> at least MEDIUM
    sequence is one repeated digit -> at least MEDIUM
    year older than current - 2    -> at least MEDIUM
    year newer than current + 1    -> HIGH
    time exactly 00:00:00          -> at least MEDIUM
    3 or more reasons              -> HIGH

An identifier that fails the grammar is HIGH risk with an "invalid format"
reason, without running the checks.
"""

import logging
import re
from typing import List, Optional, Union

from .config_loader import GrammarConfig, RiskConfig
from .types import ParsedIdentifier, Recommendation, RiskAssessment, RiskLevel
from .validator import current_buddhist_year, validate

logger = logging.getLogger(__name__)

_REPEATED_DIGIT = re.compile(r"^(\d)\1+$")

_RECOMMENDATIONS = {
    RiskLevel.LOW: Recommendation.ACCEPT,
    RiskLevel.MEDIUM: Recommendation.MANUAL_REVIEW,
    RiskLevel.HIGH: Recommendation.REJECT,
}


def recommend(level: RiskLevel) -> Recommendation:
    """Map a risk level to its recommendation."""
    return _RECOMMENDATIONS[level]


def assess(
    identifier: Union[str, ParsedIdentifier],
    current_year: Optional[int] = None,
    config: Optional[RiskConfig] = None,
    grammar: Optional[GrammarConfig] = None,
) -> RiskAssessment:
    """Assess an identifier for signs of fabrication.

    Args:
        identifier: Raw identifier string or an already parsed identifier
        current_year: Buddhist-era reference year, defaults to the clock
        config: Risk thresholds
        grammar: Grammar used to validate string input

    Returns:
        RiskAssessment with level, reasons and recommendation

    Example:
        >>> assess("015298170819BQR01111", current_year=2568).risk_level
        <RiskLevel.MEDIUM: 'MEDIUM'>
    """
    config = config or RiskConfig()
    grammar = grammar or GrammarConfig()
    if current_year is None:
        current_year = current_buddhist_year(offset=grammar.calendar_offset)

    if isinstance(identifier, ParsedIdentifier):
        parsed = identifier
    else:
        validation = validate(identifier, current_year, grammar)
        if not validation.valid:
            return RiskAssessment(
                risk_level=RiskLevel.HIGH,
                reasons=(f"Invalid format: {validation.reason}",),
                recommendation=Recommendation.REJECT,
            )
        parsed = validation.parsed

    reasons: List[str] = []
    level = RiskLevel.LOW

    # Check 1: unknown transaction type
    if not parsed.is_known_type:
        reasons.append(f"Unknown transaction type code: {parsed.type_code}")
        level = level.escalate(RiskLevel.MEDIUM)

    # Check 2: repetitive sequence number (e.g. 1111, 22222)
    if _REPEATED_DIGIT.match(parsed.sequence):
        reasons.append(
            f"Sequence number {parsed.sequence} is repetitive (e.g., 1111, 2222)"
        )
        level = level.escalate(RiskLevel.MEDIUM)

    # Check 3: stale or future year
    if parsed.year < current_year - config.stale_after_years:
        reasons.append(f"Transaction year {parsed.year} is older than expected")
        level = level.escalate(RiskLevel.MEDIUM)
    elif parsed.year > current_year + config.future_tolerance_years:
        reasons.append(f"Transaction year {parsed.year} is in the future")
        level = level.escalate(RiskLevel.HIGH)

    # Check 4: midnight timestamp
    if parsed.hour == 0 and parsed.minute == 0 and parsed.second == 0:
        reasons.append("Transaction time is exactly 00:00:00 (unusual)")
        level = level.escalate(RiskLevel.MEDIUM)

    if len(reasons) >= config.escalate_after_reasons:
        level = RiskLevel.HIGH

    if reasons:
        logger.debug(f"Risk {level.value} for {parsed.raw}: {'; '.join(reasons)}")

    return RiskAssessment(
        risk_level=level,
        reasons=tuple(reasons),
        recommendation=recommend(level),
        parsed=parsed,
    )
