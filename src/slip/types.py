"""Type definitions for slip verification.

This module defines the core data structures used throughout the slip
verification pipeline: parsed transaction identifiers, risk assessments,
cross-check results and the aggregated validation result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union


class RiskLevel(Enum):
    """Ordered forgery-risk classification (LOW < MEDIUM < HIGH)."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)

    def escalate(self, other: "RiskLevel") -> "RiskLevel":
        """Return the higher of the two levels."""
        return other if other.rank > self.rank else self

    def __lt__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank


_RISK_ORDER = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH]


class Recommendation(Enum):
    """Action recommended for a given risk level."""

    ACCEPT = "accept"
    MANUAL_REVIEW = "manual_review"
    REJECT = "reject"


class ErrorKind(Enum):
    """Hard-failure category of an invalid identifier."""

    FORMAT = "format"  # prefix / length / grammar mismatch
    SEMANTIC = "semantic"  # impossible time or implausible year


class OCRQuality(Enum):
    """OCR confidence band."""

    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


@dataclass(frozen=True)
class RejectionReason:
    """Structured rejection reason with error code and context.

    Attributes:
        code: Error code (e.g., "TXN-E002")
        constant: String constant for programmatic checking (e.g., "INVALID_PREFIX")
        message: Human-readable explanation
        kind: Failure category (format or semantic)
        severity: Error severity level ("ERROR" or "WARNING")
    """

    code: str
    constant: str
    message: str
    kind: ErrorKind
    severity: str = "ERROR"


@dataclass(frozen=True)
class ParsedIdentifier:
    """Decoded K PLUS transaction identifier.

    Only constructed for strings that satisfy the full grammar.

    Attributes:
        raw: Canonical identifier (20-21 characters)
        year_code: 2-digit year code (positions 5-6)
        year: Buddhist-era year derived from year_code
        hour: Hour of day (0-23)
        minute: Minute (0-59)
        second: Second (0-59)
        type_code: 4-character alphanumeric transaction type code
        type_description: Human label, or "Unknown Transaction Type"
        is_known_type: Whether type_code is in the type dictionary
        sequence: 3-5 digit sequence number
        length: Length of raw (20 or 21)
    """

    raw: str
    year_code: str
    year: int
    hour: int
    minute: int
    second: int
    type_code: str
    type_description: str
    is_known_type: bool
    sequence: str
    length: int

    @property
    def prefix(self) -> str:
        return self.raw[:4]

    @property
    def time(self) -> str:
        """Embedded time as HH:MM:SS."""
        return f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"


@dataclass(frozen=True)
class IdentifierValidation:
    """Outcome of grammar validation with the first failing check.

    Attributes:
        valid: Whether the identifier satisfies the grammar
        reason: Human-readable explanation
        parsed: Decoded identifier if valid
        error: Structured rejection reason if invalid
    """

    valid: bool
    reason: str
    parsed: Optional[ParsedIdentifier] = None
    error: Optional[RejectionReason] = None


@dataclass(frozen=True)
class RiskAssessment:
    """Graded authenticity assessment of an identifier.

    Attributes:
        risk_level: Final risk level after all checks
        reasons: Triggered heuristics, in evaluation order
        recommendation: Action derived from risk_level
        parsed: The assessed identifier, None on the invalid-format path
    """

    risk_level: RiskLevel
    reasons: Tuple[str, ...]
    recommendation: Recommendation
    parsed: Optional[ParsedIdentifier] = None

    @property
    def is_suspicious(self) -> bool:
        return len(self.reasons) > 0


@dataclass(frozen=True)
class DateTimeVerification:
    """Identifier timestamp vs. independently OCR-extracted timestamp.

    Attributes:
        valid: Overall match (date_match and time_match)
        date_match: Always True when a time was compared; year codes are not compared
        time_match: Hour equal and minute within tolerance
        message: Human-readable explanation
        transaction_time: Embedded HH:MM:SS, None if the identifier did not parse
        ocr_hour: Hour read from the secondary text
        ocr_minute: Minute read from the secondary text
        ocr_year_code: 2-digit year read from the secondary text, informational
        raw: Secondary text as given
    """

    valid: bool
    date_match: bool
    time_match: bool
    message: str
    transaction_time: Optional[str] = None
    ocr_hour: Optional[int] = None
    ocr_minute: Optional[int] = None
    ocr_year_code: Optional[int] = None
    raw: Optional[str] = None


@dataclass(frozen=True)
class TimeCheck:
    """Hour/minute comparison against a pre-parsed slip time."""

    valid: bool
    message: str
    slip_time: Optional[str] = None
    transaction_time: Optional[str] = None
    hour_match: bool = False
    minute_diff: Optional[int] = None


@dataclass(frozen=True)
class AmountCheck:
    """Amount on the slip vs. expected amount."""

    valid: bool
    actual: float
    expected: float
    difference: float
    message: str


@dataclass(frozen=True)
class RecipientCheck:
    """Counterparty name on the slip vs. expected name."""

    valid: bool
    actual: str
    expected: str
    message: str


@dataclass(frozen=True)
class TypeCheck:
    """Transaction type code vs. expected type code."""

    valid: bool
    message: str
    actual: Optional[str] = None
    actual_description: Optional[str] = None
    expected: Optional[str] = None


@dataclass(frozen=True)
class OCRLine:
    """One OCR line fragment with its confidence (0-100)."""

    text: str
    confidence: float


@dataclass(frozen=True)
class SlipDateTime:
    """Date/time read from the slip body.

    Attributes:
        time: HH:MM
        raw_ocr: Raw OCR fragment that contained the time (secondary timestamp text)
        ocr_confidence: Confidence of the line the fragment came from
        day: Day of month when a full date was found
        year: Buddhist-era year when a full date was found
        year_code: 2-digit year when a full date was found
    """

    time: str
    raw_ocr: Optional[str] = None
    ocr_confidence: float = 0.0
    day: Optional[int] = None
    year: Optional[int] = None
    year_code: Optional[int] = None


@dataclass(frozen=True)
class ExtractedSlip:
    """Fields extracted from one slip by the OCR layer.

    Attributes:
        success: Whether extraction succeeded at all
        transaction_id: Recovered identifier, if any
        amount: Transfer amount, if found
        date_time: Slip date/time, if found
        sender: Best-effort payer name
        receiver: Best-effort payee name
        ocr_confidence: Whole-document OCR confidence (0-100)
        raw_text: Full OCR text
        lines: OCR line fragments
        error: Failure message when success is False
    """

    success: bool
    transaction_id: Optional[str] = None
    amount: Optional[float] = None
    date_time: Optional[SlipDateTime] = None
    sender: Optional[str] = None
    receiver: Optional[str] = None
    ocr_confidence: float = 0.0
    raw_text: str = ""
    lines: Tuple[OCRLine, ...] = ()
    error: Optional[str] = None

    @property
    def recipient(self) -> Optional[str]:
        return self.receiver or self.sender


@dataclass(frozen=True)
class ExpectedValues:
    """Caller-supplied values to validate the slip against."""

    amount: Optional[float] = None
    recipient: Optional[str] = None
    type_code: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """Aggregated slip validation result.

    Attributes:
        valid: Final verdict (no errors and score ratio above threshold)
        score: Points earned
        max_score: Points available for the checks that ran
        errors: Hard failures
        warnings: Soft concerns
        parsed: Decoded identifier, if it parsed
        risk: Risk assessment, if the identifier parsed
        time_check: Cross-verification or fallback time comparison
        amount_check: Expected-amount comparison
        recipient_check: Expected-recipient comparison
        type_check: Expected-type comparison
        ocr_quality: OCR confidence band
        authenticity: Short authenticity label
    """

    valid: bool
    score: int = 0
    max_score: int = 0
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    parsed: Optional[ParsedIdentifier] = None
    risk: Optional[RiskAssessment] = None
    time_check: Optional[Union[DateTimeVerification, TimeCheck]] = None
    amount_check: Optional[AmountCheck] = None
    recipient_check: Optional[RecipientCheck] = None
    type_check: Optional[TypeCheck] = None
    ocr_quality: Optional[OCRQuality] = None
    authenticity: Optional[str] = None

    @property
    def score_percentage(self) -> int:
        if self.max_score == 0:
            return 0
        return round(self.score / self.max_score * 100)


@dataclass
class IdentifierCandidate:
    """Substring of normalized text suspected to be an identifier.

    Attributes:
        text: Cleaned candidate (upper-case alphanumerics)
        score: Length-proximity score, higher is better
        strategy: Name of the extraction strategy that produced it
    """

    text: str
    score: int
    strategy: str


@dataclass
class RepairResult:
    """Result of identifier repair.

    Attributes:
        repaired_text: Candidate after repair (unchanged if no rule fired)
        repair_applied: Whether a rule changed the candidate
        rule: Name or pattern of the rule that fired
        original_text: Candidate as given
    """

    repaired_text: str
    repair_applied: bool
    rule: Optional[str]
    original_text: str


@dataclass
class ScoreSheet:
    """Mutable accumulator used while building a ValidationResult."""

    score: int = 0
    max_score: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def award(self, budget: int, earned: int) -> None:
        self.max_score += budget
        self.score += earned


@dataclass(frozen=True)
class QuickValidation:
    """Grammar validation plus risk assessment of a bare identifier.

    Attributes:
        valid: Whether the identifier satisfies the grammar
        transaction_id: Identifier as given
        reason: Validation reason
        parsed: Decoded identifier if valid
        risk: Risk assessment if valid
        recommendation: REJECT for invalid identifiers, else the risk recommendation
    """

    valid: bool
    transaction_id: str
    reason: str
    recommendation: Recommendation
    parsed: Optional[ParsedIdentifier] = None
    risk: Optional[RiskAssessment] = None
