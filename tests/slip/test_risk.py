"""Unit tests for forgery-risk scoring."""

import pytest

from src.slip.config_loader import RiskConfig
from src.slip.risk import assess, recommend
from src.slip.types import Recommendation, RiskLevel
from src.slip.validator import parse


class TestRiskLevel:
    """Test risk level ordering."""

    def test_ordering(self):
        """Test LOW < MEDIUM < HIGH."""
        assert RiskLevel.LOW < RiskLevel.MEDIUM < RiskLevel.HIGH
        assert RiskLevel.HIGH <= RiskLevel.HIGH

    def test_escalate_never_lowers(self):
        """Test escalate keeps the higher level."""
        assert RiskLevel.HIGH.escalate(RiskLevel.MEDIUM) == RiskLevel.HIGH
        assert RiskLevel.LOW.escalate(RiskLevel.MEDIUM) == RiskLevel.MEDIUM

    def test_recommendations(self):
        """Test level to recommendation mapping."""
        assert recommend(RiskLevel.LOW) == Recommendation.ACCEPT
        assert recommend(RiskLevel.MEDIUM) == Recommendation.MANUAL_REVIEW
        assert recommend(RiskLevel.HIGH) == Recommendation.REJECT


class TestAssess:
    """Test individual heuristics."""

    def test_clean_identifier(self, current_year):
        """Test a regular identifier is low risk."""
        result = assess("015298170819BQR02651", current_year)

        assert result.risk_level == RiskLevel.LOW
        assert result.reasons == ()
        assert result.recommendation == Recommendation.ACCEPT
        assert not result.is_suspicious
        assert result.parsed.type_code == "BQR0"

    def test_repetitive_sequence(self, current_year):
        """Test a sequence of one repeated digit."""
        result = assess("015298170819BQR01111", current_year)

        assert result.risk_level == RiskLevel.MEDIUM
        assert result.recommendation == Recommendation.MANUAL_REVIEW
        assert len(result.reasons) == 1
        assert "repetitive" in result.reasons[0]

    def test_midnight(self, current_year):
        """Test a timestamp of exactly 00:00:00."""
        result = assess("015298000000BQR02651", current_year)

        assert result.risk_level >= RiskLevel.MEDIUM
        assert any("00:00:00" in reason for reason in result.reasons)

    def test_unknown_type(self, current_year):
        """Test an unknown type code."""
        result = assess("015298170819XXXX2651", current_year)

        assert result.risk_level == RiskLevel.MEDIUM
        assert "XXXX" in result.reasons[0]

    def test_stale_year(self, current_year):
        """Test a year more than two years old."""
        result = assess("015295170819BQR02651", current_year)

        assert result.risk_level == RiskLevel.MEDIUM
        assert "older than expected" in result.reasons[0]

    def test_future_year(self, current_year):
        """Test a year beyond the future tolerance is high risk."""
        config = RiskConfig(future_tolerance_years=0)
        result = assess("015299170819BQR02651", current_year, config)

        assert result.risk_level == RiskLevel.HIGH
        assert "in the future" in result.reasons[0]

    def test_three_reasons_force_high(self, current_year):
        """Test accumulated reasons escalate to HIGH."""
        result = assess("015298000000XXXX1111", current_year)

        assert len(result.reasons) == 3
        assert result.risk_level == RiskLevel.HIGH
        assert result.recommendation == Recommendation.REJECT

    def test_invalid_format(self, current_year):
        """Test an ungrammatical identifier is high risk without further checks."""
        result = assess("015398170819BQR02651", current_year)

        assert result.risk_level == RiskLevel.HIGH
        assert result.recommendation == Recommendation.REJECT
        assert result.reasons[0].startswith("Invalid format:")
        assert result.parsed is None

    def test_parsed_input(self, current_year):
        """Test an already parsed identifier is accepted."""
        parsed = parse("015298170819BQR01111", current_year)
        result = assess(parsed, current_year)

        assert result.risk_level == RiskLevel.MEDIUM
        assert result.parsed is parsed


class TestMonotonicity:
    """Test that more triggered heuristics never lower the level."""

    @pytest.mark.parametrize(
        "weaker,stronger",
        [
            ("015298170819BQR02651", "015298170819BQR01111"),
            ("015298170819BQR01111", "015298170819XXXX1111"),
            ("015298170819XXXX1111", "015298000000XXXX1111"),
            ("015298000000BQR02651", "015298000000BQR01111"),
        ],
    )
    def test_superset_of_reasons(self, weaker, stronger, current_year):
        """Test level(stronger) >= level(weaker) when one more heuristic fires."""
        weak = assess(weaker, current_year)
        strong = assess(stronger, current_year)

        assert len(weak.reasons) < len(strong.reasons)
        assert weak.risk_level <= strong.risk_level
