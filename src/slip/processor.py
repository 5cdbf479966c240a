"""Slip validation orchestrator.

Combines the identifier grammar, risk scorer and timestamp cross-check with
the other slip fields into one weighted verdict:

    1. EXTRACTION: slip parsed, identifier present and grammatical
       (any failure here short-circuits with a hard error)
    2. AUTHENTICITY: risk scorer (LOW full points, MEDIUM partial, HIGH error)
    3. TIME: identifier time vs. slip time
    4. AMOUNT: present, and equal to the expected amount if given
    5. RECIPIENT / TYPE: optional comparisons against expected values
    6. OCR QUALITY: confidence band

The slip is accepted when there are no errors and the score ratio reaches
``scoring.accept_ratio``. Cross-check, recipient and type mismatches are
warnings; an amount mismatch and HIGH risk are errors.

Example:
    >>> from src.slip import SlipValidator
    >>> validator = SlipValidator()
    >>> result = validator.process_text(ocr_text, ocr_confidence=85.0)
    >>> if result.valid:
    ...     print(f"Accepted: {result.parsed.raw}")
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from .config_loader import Config, get_default_config, load_config
from .cross_check import compare_times, verify_date_time
from .fields import parse_slip_text
from .risk import assess
from .types import (
    AmountCheck,
    DateTimeVerification,
    ExpectedValues,
    ExtractedSlip,
    OCRLine,
    OCRQuality,
    ParsedIdentifier,
    QuickValidation,
    RecipientCheck,
    Recommendation,
    RiskLevel,
    ScoreSheet,
    TimeCheck,
    TypeCheck,
    ValidationResult,
)
from .validator import TYPE_CODE_ALIASES, clean_identifier, parse, validate

logger = logging.getLogger(__name__)

_AUTHENTICITY = {
    RiskLevel.LOW: "Likely authentic",
    RiskLevel.MEDIUM: "Review required",
    RiskLevel.HIGH: "High risk of fake",
}


def resolve_type_code(type_code: str) -> str:
    """Upper-case a caller-supplied type code and expand 3-character aliases."""
    code = clean_identifier(type_code)
    return TYPE_CODE_ALIASES.get(code, code)


class SlipValidator:
    """Weighted validation of extracted slip fields.

    Args:
        config_path: Optional path to config YAML file. If None, uses default config.
        config: Already loaded configuration, takes precedence over config_path.

    Attributes:
        config: Full configuration object
    """

    def __init__(
        self, config_path: Optional[Path] = None, config: Optional[Config] = None
    ):
        if config is not None:
            self.config: Config = config
        elif config_path is None:
            self.config = get_default_config()
        else:
            self.config = load_config(config_path)

        self.grammar = self.config.slip.grammar
        self.scoring = self.config.slip.scoring
        self.weights = self.scoring.weights

    def validate_slip(
        self,
        fields: ExtractedSlip,
        expected: Optional[ExpectedValues] = None,
        current_year: Optional[int] = None,
    ) -> ValidationResult:
        """Validate extracted slip fields.

        Args:
            fields: Output of the OCR field extraction
            expected: Values the slip must match (amount, recipient, type code)
            current_year: Buddhist-era reference year, defaults to the clock

        Returns:
            ValidationResult with score, errors, warnings and sub-checks
        """
        expected = expected or ExpectedValues()

        # Stage 1: extraction
        if not fields.success:
            return self._reject("Failed to parse slip image")
        if not fields.transaction_id:
            return self._reject("Transaction ID not found in slip")

        validation = validate(fields.transaction_id, current_year, self.grammar)
        if not validation.valid:
            return self._reject(f"Invalid transaction ID: {validation.reason}")

        parsed = validation.parsed
        sheet = ScoreSheet()

        # Stage 2: authenticity
        risk = assess(parsed, current_year, self.config.slip.risk, self.grammar)
        if risk.risk_level == RiskLevel.LOW:
            sheet.award(self.weights.authenticity, self.weights.authenticity)
        elif risk.risk_level == RiskLevel.MEDIUM:
            sheet.award(self.weights.authenticity, self.weights.authenticity_partial)
            sheet.warnings.append(f"Suspicious indicators: {', '.join(risk.reasons)}")
        else:
            sheet.award(self.weights.authenticity, 0)
            sheet.errors.append(f"High risk fake slip: {', '.join(risk.reasons)}")

        # Stage 3: time consistency
        time_check = self._check_time(fields, parsed, current_year)
        sheet.award(self.weights.time, self.weights.time if time_check.valid else 0)
        if not time_check.valid:
            sheet.warnings.append(time_check.message)

        # Stage 4: amount
        amount_check = None
        if fields.amount is not None and fields.amount > 0:
            sheet.award(self.weights.amount_present, self.weights.amount_present)
            if expected.amount is not None:
                amount_check = self.validate_amount(fields.amount, expected.amount)
                sheet.award(
                    self.weights.amount_match,
                    self.weights.amount_match if amount_check.valid else 0,
                )
                if not amount_check.valid:
                    sheet.errors.append(amount_check.message)
        else:
            sheet.award(self.weights.amount_present, 0)
            sheet.warnings.append("Amount not found or invalid in slip")

        # Stage 5: recipient and type
        recipient_check = None
        if expected.recipient and fields.recipient:
            recipient_check = self.validate_recipient(fields.recipient, expected.recipient)
            sheet.award(
                self.weights.recipient,
                self.weights.recipient if recipient_check.valid else 0,
            )
            if not recipient_check.valid:
                sheet.warnings.append(recipient_check.message)

        type_check = None
        if expected.type_code:
            type_check = self._compare_type(parsed, expected.type_code)
            sheet.award(
                self.weights.type_match,
                self.weights.type_match if type_check.valid else 0,
            )
            if not type_check.valid:
                sheet.warnings.append(type_check.message)

        # Stage 6: OCR quality
        ocr_quality = self._grade_ocr(fields.ocr_confidence, sheet)

        accepted = (
            not sheet.errors
            and sheet.max_score > 0
            and sheet.score / sheet.max_score >= self.scoring.accept_ratio
        )
        result = ValidationResult(
            valid=accepted,
            score=sheet.score,
            max_score=sheet.max_score,
            errors=tuple(sheet.errors),
            warnings=tuple(sheet.warnings),
            parsed=parsed,
            risk=risk,
            time_check=time_check,
            amount_check=amount_check,
            recipient_check=recipient_check,
            type_check=type_check,
            ocr_quality=ocr_quality,
            authenticity=_AUTHENTICITY[risk.risk_level],
        )

        if accepted:
            logger.info(
                f"Slip {parsed.raw} accepted "
                f"({result.score}/{result.max_score}, {result.score_percentage}%)"
            )
        else:
            logger.warning(
                f"Slip {parsed.raw} rejected "
                f"({result.score}/{result.max_score}): {'; '.join(result.errors) or 'low score'}"
            )
        return result

    def process_text(
        self,
        text: Optional[str],
        lines: Sequence[OCRLine] = (),
        ocr_confidence: float = 0.0,
        expected: Optional[ExpectedValues] = None,
        current_year: Optional[int] = None,
    ) -> ValidationResult:
        """Extract slip fields from OCR text and validate them."""
        fields = parse_slip_text(text, lines, ocr_confidence, self.config)
        return self.validate_slip(fields, expected, current_year)

    def quick_validate(
        self, transaction_id: str, current_year: Optional[int] = None
    ) -> QuickValidation:
        """Validate and risk-score a bare identifier.

        Example:
            >>> SlipValidator().quick_validate("0153981708190BQR02651").recommendation
            <Recommendation.REJECT: 'reject'>
        """
        validation = validate(transaction_id, current_year, self.grammar)
        if not validation.valid:
            return QuickValidation(
                valid=False,
                transaction_id=transaction_id,
                reason=validation.reason,
                recommendation=Recommendation.REJECT,
            )

        risk = assess(
            validation.parsed, current_year, self.config.slip.risk, self.grammar
        )
        return QuickValidation(
            valid=True,
            transaction_id=transaction_id,
            reason=validation.reason,
            recommendation=risk.recommendation,
            parsed=validation.parsed,
            risk=risk,
        )

    def validate_amount(self, actual: float, expected: float) -> AmountCheck:
        """Compare amounts within ``scoring.amount_tolerance``."""
        difference = abs(actual - expected)
        valid = difference <= self.scoring.amount_tolerance
        return AmountCheck(
            valid=valid,
            actual=actual,
            expected=expected,
            difference=difference,
            message=(
                "Amount matches expected value"
                if valid
                else f"Amount mismatch: Expected {expected} but found {actual}"
            ),
        )

    def validate_recipient(self, actual: str, expected: str) -> RecipientCheck:
        """Case- and whitespace-insensitive containment in either direction."""
        actual_norm = "".join(actual.lower().split())
        expected_norm = "".join(expected.lower().split())
        valid = bool(actual_norm and expected_norm) and (
            expected_norm in actual_norm or actual_norm in expected_norm
        )
        return RecipientCheck(
            valid=valid,
            actual=actual,
            expected=expected,
            message=(
                "Recipient name matches"
                if valid
                else f'Recipient mismatch: Expected "{expected}" but found "{actual}"'
            ),
        )

    def validate_transaction_type(
        self,
        transaction_id: str,
        expected_type: str,
        current_year: Optional[int] = None,
    ) -> TypeCheck:
        """Compare the identifier's type code with an expected code."""
        parsed = parse(transaction_id, current_year, self.grammar)
        if parsed is None:
            return TypeCheck(
                valid=False,
                message="Invalid transaction ID",
                expected=resolve_type_code(expected_type),
            )
        return self._compare_type(parsed, expected_type)

    def _compare_type(self, parsed: ParsedIdentifier, expected_type: str) -> TypeCheck:
        expected_code = resolve_type_code(expected_type)
        valid = parsed.type_code == expected_code
        return TypeCheck(
            valid=valid,
            message=(
                f"Transaction type matches: {parsed.type_description}"
                if valid
                else f"Transaction type mismatch: Expected {expected_code} "
                f"but found {parsed.type_code}"
            ),
            actual=parsed.type_code,
            actual_description=parsed.type_description,
            expected=expected_code,
        )

    def _check_time(
        self,
        fields: ExtractedSlip,
        parsed: ParsedIdentifier,
        current_year: Optional[int],
    ) -> Union[DateTimeVerification, TimeCheck]:
        cross_check = self.config.slip.cross_check
        date_time = fields.date_time
        if date_time is not None and date_time.raw_ocr:
            return verify_date_time(
                parsed.raw, date_time.raw_ocr, current_year, cross_check, self.grammar
            )
        return compare_times(parsed, date_time.time if date_time else None, cross_check)

    def _grade_ocr(self, confidence: float, sheet: ScoreSheet) -> OCRQuality:
        if confidence >= self.scoring.ocr_good_confidence:
            sheet.award(self.weights.ocr_confidence, self.weights.ocr_confidence)
            return OCRQuality.GOOD
        if confidence >= self.scoring.ocr_fair_confidence:
            sheet.award(self.weights.ocr_confidence, self.weights.ocr_confidence_partial)
            sheet.warnings.append("OCR confidence is below optimal level")
            return OCRQuality.FAIR
        sheet.award(self.weights.ocr_confidence, 0)
        sheet.warnings.append("Low OCR confidence - results may be unreliable")
        return OCRQuality.POOR

    @staticmethod
    def _reject(error: str) -> ValidationResult:
        logger.warning(f"Slip rejected: {error}")
        return ValidationResult(valid=False, errors=(error,))


def validate_slip(
    fields: ExtractedSlip,
    expected: Optional[ExpectedValues] = None,
    current_year: Optional[int] = None,
) -> ValidationResult:
    """Validate extracted slip fields with the built-in configuration."""
    return SlipValidator(config=Config()).validate_slip(fields, expected, current_year)
