"""Locate the transaction identifier in full-page OCR text.

Extraction runs an ordered list of strategies over the normalized text,
from strictest to loosest:

    strict       prefix + 8 digits + 2-4 letters + 3-5 digits
    separated    same, allowing "/" or a space around the letters
    labelled     the line after a "เลขที่รายการ" / "reference" label
    relaxed      prefix + 8 digits + 3-7 alphanumerics + 3-5 digits
    digits_only  prefix + 12-18 digits (letters fully misread as digits)

Every match is re-normalized, stripped to [0-9A-Z] and scored by how close
its length is to the canonical 20-21 characters. The best candidate wins
(ties go to the stricter strategy) and is handed to the repair engine.
Text without the prefix yields no identifier.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config_loader import Config
from .normalizer import normalize, strip_non_alnum
from .repair import IdentifierRepairer
from .types import IdentifierCandidate

logger = logging.getLogger(__name__)

# Labels printed before the identifier on K PLUS slips
ID_LABELS: Tuple[str, ...] = ("เลขที่รายการ", "reference")

PERFECT_SCORE = 100
NEAR_MISS_PENALTY = 20
MAX_LENGTH_DISTANCE = 2


@dataclass(frozen=True)
class ExtractionStrategy:
    """One structural pattern; ``group`` selects the candidate text."""

    name: str
    pattern: str
    group: int = 0


def build_strategies(prefix: str) -> Tuple[ExtractionStrategy, ...]:
    """Ordered extraction strategies for an issuing-system prefix."""
    p = rf"(?<!\d){re.escape(prefix)}\d{{8}}"
    labels = "|".join(re.escape(normalize(label)) for label in ID_LABELS)
    return (
        ExtractionStrategy("strict", rf"{p}[A-Z]{{2,4}}\d{{3,5}}(?!\d)"),
        ExtractionStrategy("separated", rf"{p}[/\s]?[A-Z]{{2,4}}[/\s]?\d{{3,5}}(?!\d)"),
        ExtractionStrategy("labelled", rf"(?:{labels})[:：\s]*([^\n]+)", group=1),
        ExtractionStrategy("relaxed", rf"{p}[A-Z0-9]{{3,7}}\d{{3,5}}(?!\d)"),
        ExtractionStrategy("digits_only", rf"(?<!\d){re.escape(prefix)}\d{{12,18}}(?!\d)"),
    )


def score_candidate(text: str, min_length: int = 20, max_length: int = 21) -> int:
    """Score a candidate by length proximity to the canonical range.

    Exact-length candidates score 100; each character outside the range
    costs 20 points, and anything more than 2 characters off scores 0.
    """
    length = len(text)
    if min_length <= length <= max_length:
        return PERFECT_SCORE
    distance = min_length - length if length < min_length else length - max_length
    if distance > MAX_LENGTH_DISTANCE:
        return 0
    return PERFECT_SCORE - NEAR_MISS_PENALTY * distance


class IdentifierExtractor:
    """Finds the most probable identifier in OCR text.

    Args:
        config: Full configuration; grammar and repair sections are used.
            Defaults to the built-in settings.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        grammar = self.config.slip.grammar
        self.prefix = grammar.prefix
        self.min_length = grammar.min_length
        self.max_length = grammar.max_length
        self.strategies = build_strategies(self.prefix)
        self.repairer = IdentifierRepairer(self.config.slip.repair, prefix=self.prefix)

    def find_candidates(self, raw_text: Optional[str]) -> List[IdentifierCandidate]:
        """Run every strategy and return the scored candidates in order."""
        normalized = normalize(raw_text)
        if not normalized:
            return []

        candidates: List[IdentifierCandidate] = []
        for strategy in self.strategies:
            for match in re.finditer(strategy.pattern, normalized, re.IGNORECASE):
                text = strip_non_alnum(normalize(match.group(strategy.group)))
                if not text.startswith(self.prefix):
                    continue
                score = score_candidate(text, self.min_length, self.max_length)
                logger.debug(f"Candidate {text!r} via {strategy.name}: score={score}")
                if score > 0:
                    candidates.append(IdentifierCandidate(text, score, strategy.name))
        return candidates

    def best_candidate(self, raw_text: Optional[str]) -> Optional[IdentifierCandidate]:
        """Highest-scoring candidate; the earliest (strictest) wins ties."""
        best: Optional[IdentifierCandidate] = None
        for candidate in self.find_candidates(raw_text):
            if best is None or candidate.score > best.score:
                best = candidate
        return best

    def extract(self, raw_text: Optional[str]) -> Optional[str]:
        """Extract and repair the transaction identifier.

        Args:
            raw_text: Full OCR text of one slip.

        Returns:
            Identifier string, or None when no prefixed candidate exists.
        """
        best = self.best_candidate(raw_text)
        if best is None:
            logger.debug("No transaction ID candidate found")
            return None
        return self.repairer.repair(best.text)


def extract_identifier(
    raw_text: Optional[str], config: Optional[Config] = None
) -> Optional[str]:
    """Extract the transaction identifier from raw OCR text.

    Example:
        >>> extract_identifier("เลขที่รายการ:\\n0152981708198ดู802651")
        '015298170819BQR02651'
    """
    return IdentifierExtractor(config).extract(raw_text)
