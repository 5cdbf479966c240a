"""Table-driven normalization of Thai OCR output.

Tesseract's ``tha+eng`` model reads the Latin type code of a K PLUS
transaction ID as Thai: letters come out as their Thai phonetic names
("บี" for B, "คิว" for Q), digits as Thai numerals, and some codes as
slash-prefixed syllables ("/เว" for APM). This module rewrites those back to
ASCII with one ordered pass over a fixed replacement table.

Order is part of the contract: when one pattern is a substring of another,
the longer one must come first ("บีคิวอาร์" before "บีคิว" before "บี"),
otherwise the short fix pre-empts the long one.

Example:
    >>> normalize("0152981708198ดู802651")
    '0152981708198QR802651'
"""

import re
from functools import reduce
from typing import Optional, Tuple

OCRFix = Tuple[str, str]

# Slash-prefixed mis-segmentations of type codes
SEPARATOR_FIXES: Tuple[OCRFix, ...] = (
    ("/เอที", "ATF"),
    ("/เว", "APM"),
    ("/เอ", "A"),
    ("/บี", "B"),
)

# Multi-syllable readings of whole type codes or code fragments
TYPE_CODE_FIXES: Tuple[OCRFix, ...] = (
    ("บีคิวอาร์", "BQR"),
    ("บีคิว", "BQ"),
    ("บีพี", "BP"),
    ("ดูอาร์", "QR"),
    ("ดู", "QR"),
    ("เอที", "ATF"),
    ("เวม", "APM"),
    ("เว", "APM"),
)

# Thai phonetic names of Latin letters
LETTER_NAME_FIXES: Tuple[OCRFix, ...] = (
    ("ดับเบิลยู", "W"),
    ("เอ็กซ์", "X"),
    ("เอ็ม", "M"),
    ("เอ็น", "N"),
    ("เอฟ", "F"),
    ("เอช", "H"),
    ("เอส", "S"),
    ("เเอ", "A"),
    ("อาร์", "R"),
    ("แอล", "L"),
    ("แซด", "Z"),
    ("วาย", "Y"),
    ("คิว", "Q"),
    ("เอ", "A"),
    ("บี", "B"),
    ("ซี", "C"),
    ("ดี", "D"),
    ("อี", "E"),
    ("จี", "G"),
    ("ไอ", "I"),
    ("เจ", "J"),
    ("เค", "K"),
    ("โอ", "O"),
    ("พี", "P"),
    ("ที", "T"),
    ("ยู", "U"),
    ("วี", "V"),
)

THAI_DIGIT_FIXES: Tuple[OCRFix, ...] = tuple(
    (thai, str(i)) for i, thai in enumerate("๐๑๒๓๔๕๖๗๘๙")
)

OCR_FIXES: Tuple[OCRFix, ...] = (
    SEPARATOR_FIXES + TYPE_CODE_FIXES + LETTER_NAME_FIXES + THAI_DIGIT_FIXES
)

_NON_ALNUM = re.compile(r"[^0-9A-Z]")


def _apply_fix(text: str, fix: OCRFix) -> str:
    wrong, correct = fix
    return text.replace(wrong, correct)


def normalize(text: Optional[str], table: Tuple[OCRFix, ...] = OCR_FIXES) -> str:
    """Rewrite known OCR misreadings to canonical ASCII.

    Args:
        text: Raw OCR text. None is treated as empty.
        table: Ordered (pattern, replacement) pairs, applied left to right.

    Returns:
        Normalized text. Characters without a fix are left in place.

    Raises:
        TypeError: If text is neither a string nor None.
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        raise TypeError(f"Expected str, got {type(text).__name__}")
    return reduce(_apply_fix, table, text)


def strip_non_alnum(text: str) -> str:
    """Upper-case text and drop everything outside [0-9A-Z]."""
    return _NON_ALNUM.sub("", text.upper())
