"""Cross-check the identifier's embedded time against the slip's printed time.

The slip body prints the transfer time separately from the identifier
(e.g. ``25 ต.ค. 68 17:08 น.``). Both come from the same transaction, so
the hour must agree exactly and the minute within a small tolerance that
absorbs processing latency.

Years are deliberately not compared: for some transaction families
positions 5-6 of the identifier carry a system batch number (97 for ATF,
98 for BQR/BPMO) rather than the calendar year printed on the slip.
"""

import logging
import re
from typing import Optional, Tuple

from .config_loader import CrossCheckConfig, GrammarConfig
from .types import DateTimeVerification, ParsedIdentifier, TimeCheck
from .validator import parse

logger = logging.getLogger(__name__)

_COLON_TIME = re.compile(r"(\d{1,2}):(\d{2})")
# OCR sometimes reads the colon as "." or ";"
_LOOSE_TIME = re.compile(r"(?<!\d)(\d{1,2})\s?[.;]\s?(\d{2})(?!\d)")
_YEAR_BEFORE_TIME = re.compile(r"\s(\d{2})\s+\d{1,2}[:.;]\d{2}")
_THAI_TIME_SUFFIX = re.compile(r"น\.|น$")


def read_hour_minute(text: str) -> Optional[Tuple[int, int]]:
    """Find the first plausible HH:MM in free text.

    Example:
        >>> read_hour_minute("25 ต.ค. 68 17:08 น.")
        (17, 8)
    """
    for pattern in (_COLON_TIME, _LOOSE_TIME):
        for match in pattern.finditer(text):
            hour, minute = int(match.group(1)), int(match.group(2))
            if hour <= 23 and minute <= 59:
                return hour, minute
    return None


def _times_match(
    parsed: ParsedIdentifier, hour: int, minute: int, tolerance: int
) -> Tuple[bool, int]:
    """Hour must be equal; the minute gap must be within tolerance.

    The slip prints HH:MM only, so it stands for the whole minute
    HH:MM:00-HH:MM:59. The gap is the distance in whole minutes from the
    identifier's HH:MM:SS to that window (0 when inside it).
    """
    instant = parsed.minute * 60 + parsed.second
    window_start = minute * 60
    window_end = window_start + 59
    if instant < window_start:
        gap_seconds = window_start - instant
    elif instant > window_end:
        gap_seconds = instant - window_end
    else:
        gap_seconds = 0
    minute_gap = gap_seconds // 60
    return parsed.hour == hour and minute_gap <= tolerance, minute_gap


def verify_date_time(
    transaction_id: str,
    ocr_date_time: Optional[str],
    current_year: Optional[int] = None,
    config: Optional[CrossCheckConfig] = None,
    grammar: Optional[GrammarConfig] = None,
) -> DateTimeVerification:
    """Compare the identifier's time with an OCR-extracted timestamp.

    Args:
        transaction_id: Identifier to parse
        ocr_date_time: Secondary timestamp text, e.g. "25 ต.ค. 68 17:08 น."
        current_year: Buddhist-era reference year for parsing
        config: Minute tolerance
        grammar: Grammar used to parse the identifier

    Returns:
        DateTimeVerification; non-matching with a message when the
        identifier does not parse or no time can be read.
    """
    config = config or CrossCheckConfig()
    parsed = parse(transaction_id, current_year, grammar or GrammarConfig())

    if parsed is None:
        return DateTimeVerification(
            valid=False,
            date_match=False,
            time_match=False,
            message="Invalid transaction ID format",
            raw=ocr_date_time,
        )

    if not ocr_date_time:
        return DateTimeVerification(
            valid=False,
            date_match=False,
            time_match=False,
            message="OCR date/time not provided",
            transaction_time=parsed.time,
        )

    year_match = _YEAR_BEFORE_TIME.search(ocr_date_time)
    ocr_year_code = int(year_match.group(1)) if year_match else None

    hour_minute = read_hour_minute(ocr_date_time)
    if hour_minute is None:
        return DateTimeVerification(
            valid=False,
            date_match=True,
            time_match=False,
            message=f"No time found in OCR date/time {ocr_date_time!r}",
            transaction_time=parsed.time,
            ocr_year_code=ocr_year_code,
            raw=ocr_date_time,
        )

    ocr_hour, ocr_minute = hour_minute
    time_match, minute_diff = _times_match(
        parsed, ocr_hour, ocr_minute, config.minute_tolerance
    )

    if time_match:
        message = "Date and time match between transaction ID and OCR"
    else:
        message = (
            f"Mismatch - Transaction: Time {parsed.hour:02d}:{parsed.minute:02d} | "
            f"OCR: Time {ocr_hour:02d}:{ocr_minute:02d} "
            f"(difference {minute_diff} min)"
        )
        logger.debug(message)

    return DateTimeVerification(
        valid=time_match,
        date_match=True,
        time_match=time_match,
        message=message,
        transaction_time=parsed.time,
        ocr_hour=ocr_hour,
        ocr_minute=ocr_minute,
        ocr_year_code=ocr_year_code,
        raw=ocr_date_time,
    )


def compare_times(
    parsed: ParsedIdentifier,
    slip_time: Optional[str],
    config: Optional[CrossCheckConfig] = None,
) -> TimeCheck:
    """Compare a parsed identifier with a pre-parsed "HH:MM" slip time."""
    config = config or CrossCheckConfig()

    if not slip_time:
        return TimeCheck(valid=False, message="Time not found in slip")

    cleaned = _THAI_TIME_SUFFIX.sub("", slip_time.strip()).strip()
    parts = cleaned.split(":")
    if len(parts) < 2 or not parts[0].strip().isdigit() or not parts[1].strip().isdigit():
        return TimeCheck(
            valid=False,
            message=f"Invalid slip time format: {slip_time!r}",
            slip_time=slip_time,
            transaction_time=parsed.time,
        )

    slip_hour, slip_minute = int(parts[0]), int(parts[1])
    valid, minute_diff = _times_match(
        parsed, slip_hour, slip_minute, config.minute_tolerance
    )
    normalized = f"{slip_hour:02d}:{slip_minute:02d}"

    return TimeCheck(
        valid=valid,
        message=(
            "Time matches between slip and transaction ID"
            if valid
            else f"Time mismatch: Slip shows {normalized}, "
            f"transaction ID indicates {parsed.time}"
        ),
        slip_time=normalized,
        transaction_time=parsed.time,
        hour_match=parsed.hour == slip_hour,
        minute_diff=minute_diff,
    )


def verify_time(
    transaction_id: str,
    slip_time: Optional[str],
    current_year: Optional[int] = None,
    config: Optional[CrossCheckConfig] = None,
) -> TimeCheck:
    """Parse the identifier, then compare it with an "HH:MM [น.]" slip time."""
    parsed = parse(transaction_id, current_year)
    if parsed is None:
        return TimeCheck(valid=False, message="Invalid transaction ID format")
    return compare_times(parsed, slip_time, config)
