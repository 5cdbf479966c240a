"""Unit tests for timestamp cross-verification."""

import pytest

from src.slip.config_loader import CrossCheckConfig
from src.slip.cross_check import (
    compare_times,
    read_hour_minute,
    verify_date_time,
    verify_time,
)
from src.slip.validator import parse

TRANSACTION_ID = "015298170819BQR02651"  # 17:08:19


class TestReadHourMinute:
    """Test tolerant time reading."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("25 ต.ค. 68 17:08 น.", (17, 8)),
            ("17.08", (17, 8)),
            ("17;08 น.", (17, 8)),
            ("เวลา 9:05", (9, 5)),
        ],
    )
    def test_formats(self, text, expected):
        """Test colon, dot and semicolon separators."""
        assert read_hour_minute(text) == expected

    def test_skips_impossible_values(self):
        """Test an out-of-range reading is skipped for a later plausible one."""
        assert read_hour_minute("99:99 17:08") == (17, 8)

    def test_no_time(self):
        """Test text without a time."""
        assert read_hour_minute("25 ต.ค. 68") is None


class TestVerifyDateTime:
    """Test identifier vs. OCR timestamp."""

    @pytest.mark.parametrize(
        "ocr_text",
        ["25 ต.ค. 68 17:08 น.", "25 ต.ค. 68 17:11 น.", "17:06", "17.09 น."],
    )
    def test_match_within_tolerance(self, ocr_text, current_year):
        """Test times within two minutes match."""
        result = verify_date_time(TRANSACTION_ID, ocr_text, current_year)

        assert result.valid
        assert result.time_match
        assert result.date_match
        assert result.transaction_time == "17:08:19"
        assert result.message == "Date and time match between transaction ID and OCR"

    def test_mismatch_beyond_tolerance(self, current_year):
        """Test three minutes apart is a mismatch."""
        result = verify_date_time(TRANSACTION_ID, "25 ต.ค. 68 17:12 น.", current_year)

        assert not result.valid
        assert not result.time_match
        assert result.date_match
        assert result.message.startswith("Mismatch")
        assert (result.ocr_hour, result.ocr_minute) == (17, 12)

    def test_hour_mismatch(self, current_year):
        """Test a different hour never matches."""
        result = verify_date_time(TRANSACTION_ID, "18:08", current_year)
        assert not result.time_match

    def test_year_not_compared(self, current_year):
        """Test a differing printed year does not cause a mismatch."""
        result = verify_date_time(TRANSACTION_ID, "25 ต.ค. 67 17:08 น.", current_year)

        assert result.valid
        assert result.ocr_year_code == 67

    def test_invalid_identifier(self, current_year):
        """Test an unparsable identifier."""
        result = verify_date_time("015398170819BQR02651", "17:08", current_year)

        assert not result.valid
        assert result.message == "Invalid transaction ID format"

    def test_missing_ocr_text(self, current_year):
        """Test missing secondary text."""
        result = verify_date_time(TRANSACTION_ID, None, current_year)

        assert not result.valid
        assert result.message == "OCR date/time not provided"

    def test_no_time_in_text(self, current_year):
        """Test secondary text without a time."""
        result = verify_date_time(TRANSACTION_ID, "25 ต.ค. 68", current_year)

        assert not result.valid
        assert not result.time_match

    def test_zero_tolerance(self, current_year):
        """Test tolerance 0 rejects a printed minute a full minute away."""
        config = CrossCheckConfig(minute_tolerance=0)

        assert verify_date_time(TRANSACTION_ID, "17:08", current_year, config).valid
        assert not verify_date_time(TRANSACTION_ID, "17:10", current_year, config).valid


class TestCompareTimes:
    """Test comparison with a pre-parsed slip time."""

    def test_thai_suffix(self, current_year):
        """Test the "น." suffix is ignored."""
        parsed = parse(TRANSACTION_ID, current_year)
        result = compare_times(parsed, "17:08 น.")

        assert result.valid
        assert result.hour_match
        assert result.minute_diff == 0
        assert result.slip_time == "17:08"

    def test_missing(self, current_year):
        """Test missing slip time."""
        parsed = parse(TRANSACTION_ID, current_year)
        result = compare_times(parsed, None)

        assert not result.valid
        assert result.message == "Time not found in slip"

    def test_bad_format(self, current_year):
        """Test a slip time without a colon."""
        parsed = parse(TRANSACTION_ID, current_year)
        assert not compare_times(parsed, "1708").valid

    def test_mismatch_message(self, current_year):
        """Test mismatch names both times."""
        parsed = parse(TRANSACTION_ID, current_year)
        result = compare_times(parsed, "17:20")

        assert not result.valid
        assert "17:20" in result.message
        assert "17:08:19" in result.message


class TestVerifyTime:
    """Test the identifier-string shortcut."""

    def test_valid(self, current_year):
        """Test a matching slip time."""
        assert verify_time(TRANSACTION_ID, "17:10", current_year).valid

    def test_invalid_identifier(self, current_year):
        """Test an invalid identifier."""
        result = verify_time("garbage", "17:10", current_year)
        assert result.message == "Invalid transaction ID format"
