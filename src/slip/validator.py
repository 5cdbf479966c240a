"""K PLUS transaction identifier grammar: parsing and validation.

Canonical layout (20-21 characters)::

    position 1-4    literal prefix "0152" (K PLUS system identifier)
    position 5-6    2-digit year code (98 = 2568 BE)
    position 7-12   HHMMSS
    position 13-16  4-char alphanumeric transaction type code (BQR0, ATF0, BPMO ...)
    position 17-21  3-5 digit sequence number

Examples:
    - 015298170819BQR02651 -> QR payment at 17:08:19
    - 015298181623BPMO4591 -> Bill payment at 18:16:23
    - 015297131932ATF05812 -> Account transfer at 13:19:32

The year is checked against a window around the current Buddhist-era year.
Callers may pin ``current_year``; when omitted it is read from the clock on
every call.
"""

import re
from datetime import date
from typing import Dict, Optional, Tuple

from .config_loader import GrammarConfig
from .types import ErrorKind, IdentifierValidation, ParsedIdentifier, RejectionReason

# Transaction type dictionary. Codes are always 4 characters; the grammar
# has no 3-character form. B-prefix = bill/QR payments, A-prefix = transfers.
TRANSACTION_TYPES: Dict[str, str] = {
    # Bill payments
    "BPMO": "Bill Payment Mobile Online",
    "BQR0": "Bill QR Payment",
    "BPAY": "Bill Payment",
    # Account transfers
    "ATF0": "Account Transfer via Mobile",
    "ATMO": "Account Transfer Mobile Online",
    "ATMB": "ATM Transfer",
    # App/mobile payments
    "APM0": "App Payment",
    "APAY": "App Payment",
    # QR payments
    "QRP0": "QR Payment",
    "QRPM": "QR PromptPay",
    # Other
    "TFMO": "Transfer Mobile",
}

# 3-character spellings seen in OCR output, mapped to their 4-character code
TYPE_CODE_ALIASES: Dict[str, str] = {
    "BQR": "BQR0",
    "ATF": "ATF0",
    "APM": "APM0",
}

UNKNOWN_TYPE = "Unknown Transaction Type"

_DEFAULT_GRAMMAR = GrammarConfig()


def clean_identifier(transaction_id: str) -> str:
    """Trim, remove all whitespace and upper-case.

    Example:
        >>> clean_identifier(" 0152 9817 0819 bqr0 2651 ")
        '015298170819BQR02651'
    """
    return "".join(transaction_id.split()).upper()


def current_buddhist_year(today: Optional[date] = None, offset: int = 543) -> int:
    """Return the Buddhist-era year for ``today`` (defaults to the clock)."""
    today = today or date.today()
    return today.year + offset


def strict_pattern(config: GrammarConfig = _DEFAULT_GRAMMAR) -> "re.Pattern[str]":
    """Full grammar regex with one group per field."""
    return re.compile(
        rf"^{re.escape(config.prefix)}(\d{{2}})(\d{{2}})(\d{{2}})(\d{{2}})"
        r"([A-Z0-9]{4})(\d{3,5})$"
    )


def _reject(code: str, constant: str, message: str, kind: ErrorKind) -> IdentifierValidation:
    return IdentifierValidation(
        valid=False,
        reason=message,
        error=RejectionReason(code=code, constant=constant, message=message, kind=kind),
    )


def _decode(
    transaction_id: str,
    current_year: Optional[int],
    config: GrammarConfig,
) -> Tuple[Optional[ParsedIdentifier], IdentifierValidation]:
    """Run every grammar check in priority order.

    Returns the parsed identifier (or None) together with the validation
    outcome so that ``parse`` and ``validate`` can never disagree.
    """
    if not isinstance(transaction_id, str):
        raise TypeError(
            f"Transaction ID must be a string, got {type(transaction_id).__name__}"
        )

    clean_id = clean_identifier(transaction_id)
    if not clean_id:
        return None, _reject(
            "TXN-E001", "MISSING_ID", "Transaction ID is required", ErrorKind.FORMAT
        )

    # Check 1: prefix
    if not clean_id.startswith(config.prefix):
        return None, _reject(
            "TXN-E002",
            "INVALID_PREFIX",
            f'Invalid prefix. Expected "{config.prefix}" (K PLUS), '
            f'got "{clean_id[:4]}"',
            ErrorKind.FORMAT,
        )

    # Check 2: length
    if not config.min_length <= len(clean_id) <= config.max_length:
        return None, _reject(
            "TXN-E003",
            "INVALID_LENGTH",
            f"Invalid length. Expected {config.min_length}-{config.max_length} "
            f"characters, got {len(clean_id)}",
            ErrorKind.FORMAT,
        )

    # Check 3: pattern
    match = strict_pattern(config).match(clean_id)
    if not match:
        return None, _reject(
            "TXN-E004",
            "INVALID_FORMAT",
            f"Invalid format. Expected pattern: {config.prefix} + 8 digits + "
            f"4 alphanumeric type code + 3-5 digits",
            ErrorKind.FORMAT,
        )

    yy, hh, mm, ss, type_code, sequence = match.groups()
    hour, minute, second = int(hh), int(mm), int(ss)

    # Check 4: semantic bounds
    if hour > 23 or minute > 59 or second > 59:
        return None, _reject(
            "TXN-E005",
            "INVALID_TIME",
            f"Invalid time {hh}:{mm}:{ss} in transaction ID",
            ErrorKind.SEMANTIC,
        )

    year = config.year_epoch + int(yy)
    if current_year is None:
        current_year = current_buddhist_year(offset=config.calendar_offset)
    earliest = current_year - config.years_back
    latest = current_year + config.years_ahead
    if not earliest <= year <= latest:
        return None, _reject(
            "TXN-E006",
            "YEAR_OUT_OF_RANGE",
            f"Transaction year {year} out of range [{earliest}, {latest}]",
            ErrorKind.SEMANTIC,
        )

    parsed = ParsedIdentifier(
        raw=clean_id,
        year_code=yy,
        year=year,
        hour=hour,
        minute=minute,
        second=second,
        type_code=type_code,
        type_description=TRANSACTION_TYPES.get(type_code, UNKNOWN_TYPE),
        is_known_type=type_code in TRANSACTION_TYPES,
        sequence=sequence,
        length=len(clean_id),
    )
    return parsed, IdentifierValidation(
        valid=True, reason="Valid K PLUS transaction ID", parsed=parsed
    )


def parse(
    transaction_id: str,
    current_year: Optional[int] = None,
    config: GrammarConfig = _DEFAULT_GRAMMAR,
) -> Optional[ParsedIdentifier]:
    """Decode a transaction identifier into its fields.

    Args:
        transaction_id: Identifier, possibly with spaces or lower case
        current_year: Buddhist-era reference year, defaults to the clock
        config: Grammar configuration

    Returns:
        ParsedIdentifier, or None if any grammar check fails

    Raises:
        TypeError: If transaction_id is not a string

    Example:
        >>> parsed = parse("015298170819BQR02651", current_year=2568)
        >>> parsed.year, parsed.time, parsed.type_description
        (2568, '17:08:19', 'Bill QR Payment')
    """
    parsed, _ = _decode(transaction_id, current_year, config)
    return parsed


def validate(
    transaction_id: str,
    current_year: Optional[int] = None,
    config: GrammarConfig = _DEFAULT_GRAMMAR,
) -> IdentifierValidation:
    """Validate a transaction identifier and report the first failing check.

    Checks run in order prefix -> length -> pattern -> time -> year.

    Example:
        >>> validate("015398170819BQR02651").reason
        'Invalid prefix. Expected "0152" (K PLUS), got "0153"'
    """
    _, validation = _decode(transaction_id, current_year, config)
    return validation


def is_valid(transaction_id: str, current_year: Optional[int] = None) -> bool:
    """Boolean shortcut for ``validate(...).valid``."""
    return validate(transaction_id, current_year).valid


def extract_year(transaction_id: str, current_year: Optional[int] = None) -> Optional[int]:
    """Buddhist-era year of a valid identifier, else None."""
    parsed = parse(transaction_id, current_year)
    return parsed.year if parsed else None


def get_transaction_type(
    transaction_id: str, current_year: Optional[int] = None
) -> Optional[str]:
    """Type description of a valid identifier, else None."""
    parsed = parse(transaction_id, current_year)
    return parsed.type_description if parsed else None
