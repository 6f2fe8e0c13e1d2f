"""
Date Normalizer

Converts the date encodings found in carrier rosters into `datetime.date`.

Strategies, first success wins:
1. Spreadsheet serial number: numeric values greater than 59 are days since
   1899-12-30 (the spreadsheet epoch, which absorbs the 1900 leap-year bug)
2. ISO `YYYY-MM-DD`, optionally followed by a time part
3. US `MM/DD/YYYY` (single-digit month and day accepted)
4. Generic parse via dateutil for anything else carrying a date shape

Month arithmetic is coarse on purpose: `months_between` ignores the day of
month, matching how carriers count policy duration.
"""

import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pandas as pd
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


SPREADSHEET_EPOCH = datetime(1899, 12, 30)

# Numbers at or below this are ambiguous (1900-01-00 .. 1900-02-28 in serial terms)
MIN_SPREADSHEET_SERIAL = 59

_ISO_DATE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})(?:[ T].*)?$')
_US_DATE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s.*)?$')
_NUMERIC = re.compile(r'^\d+(?:\.\d+)?$')


class UnparseableDateError(ValueError):
    """Raised when a value cannot be read as a calendar date."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Unparseable date: {value!r}")


def _from_serial(serial: float, value: Any) -> date:
    # Out-of-range serials (e.g. YYYYMMDD exports like 20220101) overflow timedelta
    try:
        return (SPREADSHEET_EPOCH + timedelta(days=serial)).date()
    except OverflowError:
        raise UnparseableDateError(value)


def parse_date(value: Any) -> date:
    """
    Parse a roster cell into a calendar date.

    Args:
        value: Cell value; str, number, date, datetime or pandas Timestamp

    Returns:
        The calendar date

    Raises:
        UnparseableDateError: If the value is empty or matches no strategy
    """
    if value is None:
        raise UnparseableDateError(value)

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if pd.isna(value) or value <= MIN_SPREADSHEET_SERIAL:
            raise UnparseableDateError(value)
        return _from_serial(float(value), value)

    text = str(value).strip()
    if not text:
        raise UnparseableDateError(value)

    if _NUMERIC.match(text):
        serial = float(text)
        if serial <= MIN_SPREADSHEET_SERIAL:
            raise UnparseableDateError(value)
        return _from_serial(serial, value)

    try:
        match = _ISO_DATE.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return date(year, month, day)

        match = _US_DATE.match(text)
        if match:
            month, day, year = (int(part) for part in match.groups())
            return date(year, month, day)
    except ValueError:
        # Shape matched but the calendar rejected it (e.g. 02/30/2024)
        raise UnparseableDateError(value)

    # A bare word like "N/A" or "Pending" must not be read as today's date
    if not any(char.isdigit() for char in text):
        raise UnparseableDateError(value)

    try:
        return date_parser.parse(text, default=datetime(1900, 1, 1)).date()
    except (ValueError, OverflowError):
        raise UnparseableDateError(value)


def parse_optional_date(value: Any) -> Optional[date]:
    """Like parse_date, but returns None instead of raising."""
    try:
        return parse_date(value)
    except UnparseableDateError:
        return None


def months_between(start: date, end: date) -> int:
    """
    Whole calendar months from `start` to `end`, ignoring the day of month.

    Example:
        >>> months_between(date(2020, 1, 15), date(2022, 6, 1))
        29
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def subtract_months(anchor: date, months: int) -> date:
    """
    Calendar-month subtraction; the day is clamped to the target month's length.

    Example:
        >>> subtract_months(date(2026, 5, 31), 3)
        datetime.date(2026, 2, 28)
    """
    return anchor - relativedelta(months=months)


__all__ = [
    'SPREADSHEET_EPOCH',
    'UnparseableDateError',
    'parse_date',
    'parse_optional_date',
    'months_between',
    'subtract_months',
]
