#!/usr/bin/env python3
"""
Date helpers shared by the date ranker and the fusion sanitizer.

All helpers return ISO-shaped strings (YYYY, YYYY-MM or YYYY-MM-DD) or None.
They never invent a component that is not present in the input.
"""

import calendar
import re
from datetime import datetime
from typing import Optional

import dateutil.parser


MIN_YEAR = 1900

MONTH_PATTERN = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?"
    r"|Aug(?:ust)?|Sep(?:t|tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)

MONTH_NUMBERS = {
    'jan': 1, 'january': 1, 'feb': 2, 'february': 2,
    'mar': 3, 'march': 3, 'apr': 4, 'april': 4,
    'may': 5, 'jun': 6, 'june': 6, 'jul': 7, 'july': 7,
    'aug': 8, 'august': 8, 'sep': 9, 'sept': 9, 'september': 9,
    'oct': 10, 'october': 10, 'nov': 11, 'november': 11,
    'dec': 12, 'december': 12,
}

ISO_SHAPE = re.compile(r'^\d{4}(?:-\d{2}(?:-\d{2})?)?$')
ISO_DAY = re.compile(r'^\d{4}-\d{2}-\d{2}$')
ISO_MONTH = re.compile(r'^\d{4}-\d{2}$')
ISO_YEAR = re.compile(r'^\d{4}$')

# Numeric shapes, tried in this order by parse_numeric_date
_NUMERIC_YMD = re.compile(r'\b(20\d{2}|19\d{2})[-/.](\d{1,2})[-/.](\d{1,2})\b')
_NUMERIC_ABY = re.compile(r'\b(\d{1,2})[-/.](\d{1,2})[-/.](20\d{2}|19\d{2})\b')
_NUMERIC_YM = re.compile(r'\b(20\d{2}|19\d{2})[-/.](\d{1,2})\b')
_NUMERIC_Y = re.compile(r'\b(20\d{2}|19\d{2})\b')

_LOOSE_YMD = re.compile(r'(20\d{2}|19\d{2})[-/.](\d{1,2})[-/.](\d{1,2})')
_PDF_CREATION = re.compile(r'D:(\d{4})(\d{2})(\d{2})')
_NUMERIC_DAY_MONTH_YEAR = re.compile(r'\b\d{1,2}[/.\-]\d{1,2}[/.\-]\d{4}\b')


def max_year() -> int:
    """Latest acceptable publication year (next calendar year)."""
    return datetime.now().year + 1


def year_in_range(year: int) -> bool:
    return MIN_YEAR <= year <= max_year()


def month_number(name: str) -> Optional[int]:
    """Map a month name or abbreviation ("Sept", "Dec.") to 1-12."""
    if not name:
        return None
    return MONTH_NUMBERS.get(name.strip().rstrip('.').lower())


def is_valid_ymd(year: int, month: int, day: int) -> bool:
    """Calendar check including days-in-month and leap years."""
    if month < 1 or month > 12:
        return False
    return 1 <= day <= calendar.monthrange(year, month)[1]


def format_iso(year: int, month: Optional[int] = None, day: Optional[int] = None) -> str:
    if month is None:
        return f"{year:04d}"
    if day is None:
        return f"{year:04d}-{month:02d}"
    return f"{year:04d}-{month:02d}-{day:02d}"


def to_iso(year: str, month: Optional[str] = None, day: Optional[str] = None) -> Optional[str]:
    """Build an ISO value from textual year / month-name / day parts.

    Rejects years outside [1900, next year] and impossible calendar days.
    An unknown month name degrades to the bare year.
    """
    try:
        y = int(year)
    except (TypeError, ValueError):
        return None
    if not year_in_range(y):
        return None
    if not month:
        return format_iso(y)
    m = month_number(month)
    if m is None:
        return format_iso(y)
    if not day:
        return format_iso(y, m)
    try:
        d = int(day)
    except ValueError:
        return None
    if not is_valid_ymd(y, m, d):
        return None
    return format_iso(y, m, d)


def parse_numeric_date(text: str) -> Optional[str]:
    """Numeric date forms with safe day/month disambiguation.

    - YYYY-MM-DD (any of - / . as separator), calendar-validated
    - A-B-YYYY: A > 12 means day-month, B > 12 means month-day; when both
      are <= 12 the order is ambiguous and only YYYY-MM (A as month) is kept
    - YYYY-MM
    - bare YYYY
    """
    if not text:
        return None

    m = _NUMERIC_YMD.search(text)
    if m:
        y, mo, d = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if year_in_range(y) and is_valid_ymd(y, mo, d):
            return format_iso(y, mo, d)

    m = _NUMERIC_ABY.search(text)
    if m:
        a, b, y = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if year_in_range(y):
            if a > 12 and is_valid_ymd(y, b, a):
                return format_iso(y, b, a)
            if b > 12 and is_valid_ymd(y, a, b):
                return format_iso(y, a, b)
            if 1 <= a <= 12:
                return format_iso(y, a)

    m = _NUMERIC_YM.search(text)
    if m:
        y, mo = int(m.group(1)), int(m.group(2))
        if year_in_range(y) and 1 <= mo <= 12:
            return format_iso(y, mo)

    for m in _NUMERIC_Y.finditer(text):
        if year_in_range(int(m.group(1))):
            return m.group(1)
    return None


def is_valid_iso(value: str) -> bool:
    """True for a well-formed YYYY, YYYY-MM or YYYY-MM-DD with real calendar values."""
    if not value or not ISO_SHAPE.match(value):
        return False
    parts = [int(p) for p in value.split('-')]
    if len(parts) >= 2 and not 1 <= parts[1] <= 12:
        return False
    if len(parts) == 3 and not is_valid_ymd(*parts):
        return False
    return True


def date_precision(value: Optional[str]) -> Optional[str]:
    """Return 'day', 'month', 'year' or None for an ISO-shaped value."""
    if not value:
        return None
    if ISO_DAY.match(value):
        return 'day'
    if ISO_MONTH.match(value):
        return 'month'
    if ISO_YEAR.match(value):
        return 'year'
    return None


def to_iso_date(text: Optional[str]) -> Optional[str]:
    """Generic string-to-ISO normalization for free-form date strings.

    Components the input does not state are left out rather than defaulted:
    "March 2021" becomes "2021-03", "2019" stays "2019". Numeric
    day/month/year forms go through parse_numeric_date, so "05/06/2023"
    becomes "2023-05".
    """
    if not text or not isinstance(text, str):
        return None
    text = text.strip()

    if _NUMERIC_DAY_MONTH_YEAR.search(text):
        return parse_numeric_date(text)

    m = _LOOSE_YMD.search(text)
    if m:
        return format_iso(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    # Parse twice with different defaults; components that differ were not in the text
    try:
        first = dateutil.parser.parse(text, default=datetime(2000, 1, 1), fuzzy=True)
        second = dateutil.parser.parse(text, default=datetime(2001, 2, 2), fuzzy=True)
    except (ValueError, OverflowError):
        first = second = None

    if first is not None and first.year == second.year:
        if first.month != second.month:
            return format_iso(first.year)
        if first.day != second.day:
            return format_iso(first.year, first.month)
        return format_iso(first.year, first.month, first.day)

    m = _NUMERIC_Y.search(text)
    return m.group(1) if m else None


def parse_pdf_creation_date(value: Optional[str]) -> Optional[str]:
    """Convert a PDF CreationDate ("D:20240101112233Z") to YYYY-MM-DD."""
    if not value:
        return None
    m = _PDF_CREATION.search(value)
    if not m:
        return None
    return f"{m.group(1)}-{m.group(2)}-{m.group(3)}"
