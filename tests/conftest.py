"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest

from src.slip.config_loader import Config
from src.slip.types import OCRLine

# Buddhist-era year the scenario identifiers (year code 98) belong to
CURRENT_YEAR = 2568


@pytest.fixture
def current_year():
    """Fixture pinning the reference year so tests do not depend on the clock."""
    return CURRENT_YEAR


@pytest.fixture
def default_config():
    """Fixture providing the built-in configuration."""
    return Config()


@pytest.fixture
def sample_slip_text():
    """Fixture providing Tesseract output of a real K PLUS QR payment slip.

    The type code "BQR0" was read as "8ดู8" and the month has a stray vowel mark.
    """
    return """ชําระเงินสําเร็จ
25 ต.ุค. 68 17:08 น.                                I<

นาย ปัณณธร บ

ธ.กสิกรไทย
XXX-X-X8700-x

ชัน

ป.เพย์ โซลูชัน an.

บจก. เพย์ โซลูชัน
202510255360001

เลขที่รายการ:
0152981708198ดู802651

จํานวน:
40.00 บาท

ค่าธรรมเนียม:

0.00 บาท       สแกนตรวจสอบสลิป"""


@pytest.fixture
def sample_slip_lines():
    """Fixture providing the OCR line fragments of the sample slip."""
    return (
        OCRLine(text="ชําระเงินสําเร็จ", confidence=88.0),
        OCRLine(text="25 ต.ุค. 68 17:08 น.", confidence=81.5),
        OCRLine(text="0152981708198ดู802651", confidence=64.0),
        OCRLine(text="40.00 บาท", confidence=92.0),
    )
