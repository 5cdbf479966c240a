"""Unit tests for slip field extraction."""

from src.slip.fields import (
    extract_amount,
    extract_date_time,
    extract_parties,
    parse_slip_text,
)
from src.slip.types import OCRLine


class TestExtractAmount:
    """Test amount heuristics."""

    def test_sample_slip(self, sample_slip_text):
        """Test the transfer amount wins over the zero fee."""
        assert extract_amount(sample_slip_text) == 40.0

    def test_thousands_separator_preferred(self):
        """Test a comma-grouped amount beats smaller amounts."""
        text = "จำนวน:\n1,250.50 บาท\nค่าธรรมเนียม: 15.00 บาท"
        assert extract_amount(text) == 1250.50

    def test_largest_small_amount(self):
        """Test the largest amount wins when none is comma-grouped."""
        assert extract_amount("99.00 บาท\n5.00 บาท") == 99.0

    def test_baht_before_amount(self):
        """Test "บาท" printed before the value."""
        assert extract_amount("บาท\n350.00") == 350.0

    def test_no_amount(self):
        """Test text without amounts."""
        assert extract_amount("ชำระเงินสำเร็จ") is None
        assert extract_amount("") is None
        assert extract_amount(None) is None


class TestExtractDateTime:
    """Test date/time heuristics."""

    def test_full_thai_date(self):
        """Test day, Thai month, year and time."""
        result = extract_date_time("25 ต.ค. 68 17:08 น.")

        assert result.time == "17:08"
        assert result.day == 25
        assert result.year_code == 68
        assert result.year == 2568
        assert result.raw_ocr == "25 ต.ค. 68 17:08"

    def test_time_suffix_fallback(self, sample_slip_text):
        """Test the misread month falls back to the "น." time."""
        result = extract_date_time(sample_slip_text)

        assert result.time == "17:08"
        assert result.day is None
        assert result.raw_ocr == "17:08 น."

    def test_raw_line_from_ocr_lines(self, sample_slip_text, sample_slip_lines):
        """Test the raw fragment and confidence come from the first time line."""
        result = extract_date_time(sample_slip_text, sample_slip_lines)

        assert result.raw_ocr == "25 ต.ุค. 68 17:08 น."
        assert result.ocr_confidence == 81.5

    def test_single_digit_hour(self):
        """Test hours are zero-padded."""
        assert extract_date_time("1 ม.ค. 68 9:05 น.").time == "09:05"

    def test_no_time(self):
        """Test text without a time."""
        assert extract_date_time("ชำระเงินสำเร็จ") is None
        assert extract_date_time(None) is None


class TestExtractParties:
    """Test party-name heuristics."""

    def test_sample_slip(self, sample_slip_text):
        """Test the company label is taken as the receiver."""
        parties = extract_parties(sample_slip_text)

        assert parties["receiver"] == "เพย์ โซลูชัน"
        assert parties["sender"] is None

    def test_labelled(self):
        """Test explicit sender and receiver labels."""
        parties = extract_parties("จาก: นาย สมชาย ใจดี\nถึง: ร้าน กาแฟ")

        assert parties["sender"] == "นาย สมชาย ใจดี"
        assert parties["receiver"] == "ร้าน กาแฟ"
        assert parties["confidence"] == "low"

    def test_titles_in_reading_order(self):
        """Test unlabelled names are assigned in reading order."""
        parties = extract_parties("นาย สมชาย ใจดี\nนางสาว สมหญิง รักเรียน")

        assert parties["sender"] == "สมชาย ใจดี"
        assert parties["receiver"] == "สมหญิง รักเรียน"
        assert parties["confidence"] == "medium"

    def test_empty(self):
        """Test empty text."""
        assert extract_parties("") == {"sender": None, "receiver": None, "confidence": "low"}


class TestParseSlipText:
    """Test assembly of ExtractedSlip."""

    def test_sample_slip(self, sample_slip_text, sample_slip_lines):
        """Test all fields of the sample slip."""
        slip = parse_slip_text(sample_slip_text, sample_slip_lines, ocr_confidence=78.0)

        assert slip.success
        assert slip.transaction_id == "015298170819BQR02651"
        assert slip.amount == 40.0
        assert slip.date_time.time == "17:08"
        assert slip.recipient == "เพย์ โซลูชัน"
        assert slip.ocr_confidence == 78.0
        assert slip.lines == sample_slip_lines

    def test_no_text(self):
        """Test empty OCR output."""
        slip = parse_slip_text("")

        assert not slip.success
        assert slip.error == "OCR returned no text"

    def test_lines_as_list(self):
        """Test OCR lines are stored as a tuple."""
        slip = parse_slip_text("17:08 น.", [OCRLine("17:08 น.", 90.0)])
        assert slip.lines == (OCRLine("17:08 น.", 90.0),)
