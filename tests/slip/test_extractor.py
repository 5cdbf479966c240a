"""Unit tests for identifier extraction from OCR text."""

import pytest

from src.slip.config_loader import Config, GrammarConfig, SlipModuleConfig
from src.slip.extractor import (
    IdentifierExtractor,
    build_strategies,
    extract_identifier,
    score_candidate,
)


class TestScoreCandidate:
    """Test length-proximity scoring."""

    @pytest.mark.parametrize(
        "length,expected",
        [(20, 100), (21, 100), (19, 80), (22, 80), (18, 60), (23, 60), (17, 0), (30, 0)],
    )
    def test_scores(self, length, expected):
        """Test exact lengths beat near misses, far misses score 0."""
        assert score_candidate("0" * length) == expected


class TestStrategies:
    """Test strategy construction."""

    def test_order(self):
        """Test strategies run from strictest to loosest."""
        names = [s.name for s in build_strategies("0152")]
        assert names == ["strict", "separated", "labelled", "relaxed", "digits_only"]

    def test_prefix_is_escaped(self):
        """Test the prefix appears literally in the patterns."""
        assert all("0999" in s.pattern for s in build_strategies("0999") if s.name != "labelled")


class TestExtractIdentifier:
    """Test end-to-end extraction."""

    def test_clean_identifier_round_trip(self):
        """Test a canonical identifier embedded in text is returned as is."""
        text = "ชำระเงินสำเร็จ\nเลขที่รายการ: 015298170819BQR02651\n40.00 บาท"
        assert extract_identifier(text) == "015298170819BQR02651"

    def test_noisy_slip(self, sample_slip_text):
        """Test the real slip with "8ดู8" in place of "BQR0"."""
        assert extract_identifier(sample_slip_text) == "015298170819BQR02651"

    def test_slash_separated_code(self):
        """Test "/เว" read in place of APM."""
        assert extract_identifier("015298175028/เว16903  [m]% ร: [=]") == (
            "015298175028APM16903"
        )

    def test_slash_before_code(self):
        """Test a separator between the timestamp and the type code."""
        assert extract_identifier("ref 015298170819/BQR02651") == "015298170819BQR02651"

    def test_thai_digits(self):
        """Test Thai numerals in the prefix."""
        assert extract_identifier("๐๑๕๒98170819BQR02651") == "015298170819BQR02651"

    def test_labelled_line(self):
        """Test the line after the label is used when letters are spaced out."""
        text = "เลขที่รายการ:\n0152 9817 0819 BQR0 2651\n"
        assert extract_identifier(text) == "015298170819BQR02651"

    def test_no_prefix(self):
        """Test text without the prefix yields None."""
        assert extract_identifier("เลขที่รายการ: 999998170819BQR02651") is None

    def test_empty(self):
        """Test empty and None input."""
        assert extract_identifier("") is None
        assert extract_identifier(None) is None

    def test_custom_prefix(self):
        """Test the grammar prefix drives extraction."""
        config = Config(slip=SlipModuleConfig(grammar=GrammarConfig(prefix="0999")))
        text = "id 099998170819BQR02651 and 015298170819BQR02651"
        assert extract_identifier(text, config) == "099998170819BQR02651"


class TestIdentifierExtractor:
    """Test candidate selection."""

    def test_strict_wins_ties(self):
        """Test the strict strategy wins among equal scores."""
        extractor = IdentifierExtractor()
        candidates = extractor.find_candidates("015298170819BQR02651")

        assert candidates[0].strategy == "strict"
        assert all(c.text == "015298170819BQR02651" for c in candidates)
        assert extractor.best_candidate("015298170819BQR02651").strategy == "strict"

    def test_exact_length_preferred(self):
        """Test an exact-length candidate beats an earlier near miss."""
        extractor = IdentifierExtractor()
        text = "0152981708190265123\nเลขที่รายการ: 015298170819BQR02651"

        best = extractor.best_candidate(text)

        assert best.text == "015298170819BQR02651"
        assert best.score == 100

    def test_no_candidates(self):
        """Test text without identifiers."""
        extractor = IdentifierExtractor()
        assert extractor.find_candidates("จำนวน 40.00 บาท") == []
        assert extractor.best_candidate("จำนวน 40.00 บาท") is None
