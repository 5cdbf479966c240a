"""Repair of misread transaction type codes.

The 4-character type code (positions 13-16) is where OCR fails most: a
leading "B" is read as the digit "8" and the interior is filled with
numerals, e.g. ``0152981708198QR802651`` for ``015298170819BQR02651``.

Repair works on ``prefix(12) + middle + sequence(3-5 digits)``:

1. **Known misreadings**: an ordered table of middle-segment patterns
   (``8QR8``, ``816``, ``8XX0`` ...) mapped to type codes, tried once, first
   match wins. The table lives in ``RepairConfig`` so it can grow without
   code changes.
2. **Fallback**: a non-greedy split of the middle; all-digit middles are
   rebuilt with a digit->letter table and kept only if they land on a known
   type code (or are 4 characters ending in "0"); mixed middles of the form
   ``8XX8``/``8XX0`` become ``BXX0``.

Candidates that no rule touches pass through unchanged. Final acceptance is
left to the grammar parser.

Example:
    >>> repair("0152981708198QR802651")
    '015298170819BQR02651'
"""

import logging
import re
from typing import Optional

from .config_loader import GrammarConfig, RepairConfig
from .normalizer import normalize, strip_non_alnum
from .types import RepairResult
from .validator import TRANSACTION_TYPES

logger = logging.getLogger(__name__)

_DEFAULT_PREFIX = GrammarConfig().prefix


class IdentifierRepairer:
    """Coerces near-miss identifiers toward a known type code.

    Args:
        config: Repair configuration with the misreading table.
        prefix: Issuing-system prefix of the grammar.

    Example:
        >>> repairer = IdentifierRepairer(RepairConfig())
        >>> repairer.repair_with_details("01529713193281605812").repaired_text
        '015297131932ATF05812'
    """

    def __init__(self, config: RepairConfig, prefix: str = _DEFAULT_PREFIX):
        self.config = config
        self.prefix = prefix
        self.digit_to_letter = config.digit_to_letter
        self._head = re.compile(rf"^({re.escape(prefix)}\d{{8}})(.*)$")
        self._rules = [
            (rule, re.compile(rf"^(?:{rule.pattern})(\d{{3,5}})$"))
            for rule in config.rules
        ]
        self._split = re.compile(r"^(.{2,7}?)(\d{3,5})$")
        self._known_tail = re.compile(r"^([A-Z0-9]{4})(\d{3,5})$")

    def repair_with_details(self, candidate: str) -> RepairResult:
        """Repair a candidate and report which rule fired.

        Args:
            candidate: Extracted identifier candidate.

        Returns:
            RepairResult; repaired_text equals candidate when no rule fired.
        """
        unchanged = RepairResult(
            repaired_text=candidate,
            repair_applied=False,
            rule=None,
            original_text=candidate,
        )

        if not self.config.enabled or len(candidate) < self.config.min_length:
            return unchanged

        cleaned = strip_non_alnum(normalize(candidate))
        head = self._head.match(cleaned)
        if not head:
            return unchanged

        prefix, tail = head.groups()

        # Already a known type code followed by a sequence: nothing to fix
        known = self._known_tail.match(tail)
        if known and known.group(1) in TRANSACTION_TYPES:
            return self._result(candidate, prefix + tail, "known_type")

        for rule, pattern in self._rules:
            match = pattern.match(tail)
            if match:
                return self._result(
                    candidate, prefix + rule.code + match.group(1), rule.pattern
                )

        split = self._split.match(tail)
        if split:
            middle, sequence = split.groups()
            fixed = self._rebuild_middle(middle)
            if fixed is not None:
                return self._result(candidate, prefix + fixed + sequence, "fallback")

        return unchanged

    def repair(self, candidate: str) -> str:
        """Return the repaired candidate (unchanged if no rule fired)."""
        return self.repair_with_details(candidate).repaired_text

    def _rebuild_middle(self, middle: str) -> Optional[str]:
        if middle.isdigit() and 2 <= len(middle) <= 4:
            rebuilt = "".join(self.digit_to_letter.get(c, c) for c in middle)
            for code in TRANSACTION_TYPES:
                if rebuilt == code or rebuilt.startswith(code[:3]):
                    return code
            if len(middle) == 4 and middle.endswith("0"):
                return rebuilt[:3] + "0"
            return None

        if 3 <= len(middle) <= 4 and re.search(r"[A-Z]", middle):
            if re.fullmatch(r"8[A-Z]+[08]", middle):
                return "B" + middle[1:-1] + "0"
            return middle

        return None

    def _result(self, original: str, repaired: str, rule: str) -> RepairResult:
        applied = repaired != original
        if applied:
            logger.info(f"Repaired transaction ID {original!r} -> {repaired!r} ({rule})")
        return RepairResult(
            repaired_text=repaired,
            repair_applied=applied,
            rule=rule if applied else None,
            original_text=original,
        )


_DEFAULT_REPAIRER = IdentifierRepairer(RepairConfig())


def repair(candidate: str) -> str:
    """Repair a candidate with the default rule table."""
    return _DEFAULT_REPAIRER.repair(candidate)
