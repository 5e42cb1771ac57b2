"""
Amount and date normalization for OCR'd / user-edited receipt fields.

Nothing here raises on bad input: an unusable amount is 0.0 and an
unusable date is None, so one bad receipt never sinks a whole report.
"""

import logging
import re
from typing import Optional

from .report_models import OrdinalDate

logger = logging.getLogger(__name__)

# M/D/YY, MM/DD/YYYY, MM-DD-YY ... whole string
US_DATE_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2}|\d{4})$")
# YYYY-MM-DD, prefix only so "2024-01-05T10:00:00" is accepted
ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
AMOUNT_STRIP_RE = re.compile(r"[^0-9.-]")


def parse_amount(text) -> float:
    """'$1,234.56' -> 1234.56, '$-12.00' -> -12.0, '' / None / junk -> 0.0"""
    if text is None:
        return 0.0
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    s = str(text).strip()
    if not s:
        return 0.0
    cleaned = AMOUNT_STRIP_RE.sub("", s)
    # only a leading minus is a sign; "12-34" style noise drops the dash
    negative = cleaned.startswith("-")
    digits = cleaned.replace("-", "")
    try:
        value = float(digits)
    except ValueError:
        logger.warning("could not parse amount %r, using 0.00", text)
        return 0.0
    return -value if negative else value


def _valid(year: int, month: int, day: int) -> bool:
    return 1 <= month <= 12 and 1 <= day <= 31 and 1900 <= year <= 2100


def parse_date(text: Optional[str]) -> Optional[OrdinalDate]:
    if not text:
        return None
    s = str(text).strip()
    if not s:
        return None

    m = US_DATE_RE.match(s)
    if m:
        month, day, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if year < 100:
            # no century pivot: receipts are always from the 2000s
            year += 2000
        if _valid(year, month, day):
            return OrdinalDate(year, month, day)
        logger.warning("date %r is out of range", text)
        return None

    m = ISO_DATE_RE.match(s)
    if m:
        year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if _valid(year, month, day):
            return OrdinalDate(year, month, day)
        logger.warning("date %r is out of range", text)
        return None

    logger.warning("could not parse date %r", text)
    return None


def format_date_for_display(text: Optional[str]) -> str:
    if not text:
        return ""
    parsed = parse_date(text)
    if parsed is None:
        return text
    return parsed.display()
