"""
Command-line slip verification.

Usage:
    slip-verify --id 015298170819BQR02651 --current-year 2568
    slip-verify --text slip_ocr.txt --expected-amount 40 --ocr-confidence 85
"""

import argparse
import dataclasses
import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from .config_loader import get_default_config, load_config
from .processor import SlipValidator
from .types import ExpectedValues


def to_jsonable(value: Any) -> Any:
    """Convert result dataclasses and enums into JSON-serializable values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
        if hasattr(value, "score_percentage"):
            data["score_percentage"] = value.score_percentage
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate K PLUS transaction slips",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--id", type=str, help="Transaction ID to validate")
    source.add_argument("--text", type=Path, help="File with the slip's OCR text")
    parser.add_argument("--expected-amount", type=float, default=None, help="Expected amount")
    parser.add_argument("--expected-recipient", type=str, default=None, help="Expected recipient")
    parser.add_argument("--expected-type", type=str, default=None, help="Expected type code")
    parser.add_argument(
        "--ocr-confidence", type=float, default=0.0, help="OCR confidence of --text (0-100)"
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration file (YAML)")
    parser.add_argument(
        "--current-year", type=int, default=None, help="Buddhist-era reference year"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = load_config(args.config) if args.config else get_default_config()
    validator = SlipValidator(config=config)

    if args.id:
        result = validator.quick_validate(args.id, args.current_year)
    else:
        expected = ExpectedValues(
            amount=args.expected_amount,
            recipient=args.expected_recipient,
            type_code=args.expected_type,
        )
        text = args.text.read_text(encoding="utf-8")
        result = validator.process_text(
            text,
            ocr_confidence=args.ocr_confidence,
            expected=expected,
            current_year=args.current_year,
        )

    print(json.dumps(to_jsonable(result), indent=2, ensure_ascii=False))
    return 0 if result.valid else 1


if __name__ == "__main__":
    sys.exit(main())
