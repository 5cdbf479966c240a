"""Best-effort extraction of slip fields from raw OCR text.

Besides the transaction identifier, a K PLUS slip prints the amount
(``40.00 บาท``), the transfer date and time (``25 ต.ค. 68 17:08 น.``) and
the two parties. These heuristics are advisory: party names in particular
are low confidence and are only used for loose containment matching.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from .config_loader import Config
from .extractor import IdentifierExtractor
from .types import ExtractedSlip, OCRLine, SlipDateTime

logger = logging.getLogger(__name__)

MAX_AMOUNT = 10_000_000
MAX_FALLBACK_AMOUNT = 1_000_000

_AMOUNT_PATTERNS = [
    # "จำนวน" label, possibly with the value on the next line
    re.compile(r"จำนวน[:\s]*\n*\s*([\d,]+\.?\d*)\s*บาท", re.IGNORECASE),
    re.compile(r"([\d,]+\.\d{2})\s*บาท"),
    re.compile(r"(\d{1,3}(?:,\d{3})*\.\d{2})\s+บาท"),
    # "บาท" before the amount
    re.compile(r"บาท\s*[\n\s]*([\d,]+\.\d{2})", re.IGNORECASE),
    re.compile(r"\n\s*([\d,]+\.\d{2})\s*บาท"),
    re.compile(r"([1-9]\d{0,2}(?:,\d{3})*\.\d{2})"),
]
_DECIMAL = re.compile(r"(\d+\.\d{2})")

_THAI_MONTHS = (
    r"ม\.ค\.|ก\.พ\.|มี\.ค\.|เม\.ย\.|พ\.ค\.|มิ\.ย\.|"
    r"ก\.ค\.|ส\.ค\.|ก\.ย\.|ต\.ค\.|พ\.ย\.|ธ\.ค\."
)
_DATE_TIME = re.compile(
    rf"(\d{{1,2}})\s*(?:{_THAI_MONTHS})\s*(\d{{2}})\s*(\d{{1,2}}):(\d{{2}})",
    re.IGNORECASE,
)
_TIME_WITH_SUFFIX = re.compile(r"(\d{1,2}):(\d{2})\s*น\.")
_ANY_TIME = re.compile(r"\d{1,2}:\d{2}")
SLIP_YEAR_BASE = 2500

_SENDER_PATTERNS = [
    re.compile(r"จาก[:\s]*([^\n]+)", re.IGNORECASE),
    re.compile(r"ผู้โอน[:\s]*([^\n]+)", re.IGNORECASE),
    re.compile(r"from[:\s]*([^\n]+)", re.IGNORECASE),
]
_RECEIVER_PATTERNS = [
    re.compile(r"ถึง[:\s]*([^\n]+)", re.IGNORECASE),
    re.compile(r"ผู้รับ[:\s]*([^\n]+)", re.IGNORECASE),
    re.compile(r"to[:\s]*([^\n]+)", re.IGNORECASE),
    re.compile(r"บริษัท[:\s]*([^\n]+)", re.IGNORECASE),
    re.compile(r"บจก\.[:\s]*([^\n]+)", re.IGNORECASE),
    re.compile(r"ห้างหุ้นส่วน[:\s]*([^\n]+)", re.IGNORECASE),
]
_BUSINESS = re.compile(r"(?:บริษัท|บจก\.|ห้าง)\s*([^\n]+)")
_PERSON = re.compile(r"(?:นางสาว|นาย|นาง)\s*([^\n]+)")


def _to_amount(raw: str) -> Optional[float]:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return None


def extract_amount(ocr_text: Optional[str]) -> Optional[float]:
    """Find the transfer amount.

    Amounts with thousands separators or of at least 1000 are preferred,
    otherwise the largest amount wins (fees are printed as small values).

    Example:
        >>> extract_amount("จํานวน:\\n40.00 บาท\\nค่าธรรมเนียม:\\n0.00 บาท")
        40.0
    """
    if not ocr_text:
        return None

    found = []
    for pattern in _AMOUNT_PATTERNS:
        for match in pattern.finditer(ocr_text):
            value = _to_amount(match.group(1))
            if value is not None and 0 < value < MAX_AMOUNT:
                found.append((value, match.group(1)))

    if found:
        found.sort(key=lambda item: item[0], reverse=True)
        for value, raw in found:
            if "," in raw or value >= 1000:
                return value
        return found[0][0]

    amounts = [
        value
        for value in (_to_amount(m.group(1)) for m in _DECIMAL.finditer(ocr_text))
        if value is not None and 0 < value < MAX_FALLBACK_AMOUNT
    ]
    return max(amounts) if amounts else None


def _time_line(lines: Iterable[OCRLine]) -> Optional[OCRLine]:
    for line in lines:
        if line.text and _ANY_TIME.search(line.text):
            return line
    return None


def extract_date_time(
    ocr_text: Optional[str], lines: Sequence[OCRLine] = ()
) -> Optional[SlipDateTime]:
    """Find the slip date/time and the raw OCR fragment it came from.

    The raw fragment (first OCR line containing HH:MM) is what the
    cross-verifier compares against the identifier.
    """
    if not ocr_text:
        return None

    line = _time_line(lines)
    raw_ocr = line.text.strip() if line else None
    confidence = line.confidence if line else 0.0

    match = _DATE_TIME.search(ocr_text)
    if match:
        year_code = int(match.group(2))
        return SlipDateTime(
            time=f"{int(match.group(3)):02d}:{match.group(4)}",
            raw_ocr=raw_ocr or match.group(0),
            ocr_confidence=confidence,
            day=int(match.group(1)),
            year=SLIP_YEAR_BASE + year_code,
            year_code=year_code,
        )

    match = _TIME_WITH_SUFFIX.search(ocr_text)
    if match:
        return SlipDateTime(
            time=f"{int(match.group(1)):02d}:{match.group(2)}",
            raw_ocr=raw_ocr or match.group(0),
            ocr_confidence=confidence,
        )

    return None


def _first_group(patterns: Iterable["re.Pattern[str]"], text: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def extract_parties(ocr_text: Optional[str]) -> Dict[str, Optional[str]]:
    """Guess sender and receiver names.

    Labelled names ("จาก", "ถึง", "from", "to" ...) win. Otherwise business
    and personal titles are collected in reading order: the first name is
    taken as the sender, the second as the receiver, and a lone name as the
    receiver (merchant).

    Returns:
        Dict with "sender", "receiver" and "confidence" ("medium" or "low").
    """
    if not ocr_text:
        return {"sender": None, "receiver": None, "confidence": "low"}

    sender = _first_group(_SENDER_PATTERNS, ocr_text)
    receiver = _first_group(_RECEIVER_PATTERNS, ocr_text)
    found: List[str] = []

    if not sender and not receiver:
        matches = list(_BUSINESS.finditer(ocr_text)) + list(_PERSON.finditer(ocr_text))
        matches.sort(key=lambda m: m.start())
        found = [m.group(1).strip() for m in matches if m.group(1).strip()]
        if len(found) >= 2:
            sender, receiver = found[0], found[1]
        elif len(found) == 1:
            receiver = found[0]

    return {
        "sender": sender,
        "receiver": receiver,
        "confidence": "medium" if found else "low",
    }


def parse_slip_text(
    text: Optional[str],
    lines: Sequence[OCRLine] = (),
    ocr_confidence: float = 0.0,
    config: Optional[Config] = None,
) -> ExtractedSlip:
    """Build an ExtractedSlip from OCR output.

    Args:
        text: Full OCR text of the slip
        lines: OCR line fragments with confidences
        ocr_confidence: Whole-document OCR confidence (0-100)
        config: Configuration for identifier extraction

    Returns:
        ExtractedSlip; success is False only when there is no text at all.
    """
    if not text:
        return ExtractedSlip(success=False, error="OCR returned no text")

    parties = extract_parties(text)
    slip = ExtractedSlip(
        success=True,
        transaction_id=IdentifierExtractor(config).extract(text),
        amount=extract_amount(text),
        date_time=extract_date_time(text, lines),
        sender=parties["sender"],
        receiver=parties["receiver"],
        ocr_confidence=ocr_confidence,
        raw_text=text,
        lines=tuple(lines),
    )
    logger.debug(
        f"Extracted slip fields: id={slip.transaction_id}, amount={slip.amount}, "
        f"time={slip.date_time.time if slip.date_time else None}"
    )
    return slip
