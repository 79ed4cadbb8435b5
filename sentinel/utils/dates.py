"""
Date normalization for heterogeneous order dates.

Spreadsheet imports and hand-edited records carry dates in many shapes:
ISO strings, two-digit-year strings from CSV exports, spreadsheet serial
numbers and free-form text. Everything is resolved to a calendar `date`
and displayed as zero-padded DD-MM-YYYY.

The normalizer is lenient on purpose. Two-vs-four digit years are resolved
by position: "2024-03-05" is year-month-day, "05-03-2024" is
day-month-year and "05-03-24" is day-month-(20)year. Numeric dates are
never read month-first. A genuine "yy-mm-dd" input is read as day-month-year
and silently misparses.
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import pandas as pd


# Spreadsheet serial for 1970-01-01 (1900 date system, including the
# phantom 1900-02-29)
SPREADSHEET_EPOCH_OFFSET = 25569
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DISPLAY_PLACEHOLDER = "-"

_NUMERIC_RE = re.compile(r"^-?\d+(\.\d+)?$")
# Three numeric segments, optionally followed by a time part
_SEGMENTS_RE = re.compile(r"^(\d{1,4})[-/.](\d{1,2})[-/.](\d{2,4})(?:[ T]\S.*)?$")


def _from_segments(text: str) -> Optional[date]:
    """Resolve 'yyyy-mm-dd', 'dd-mm-yyyy' and 'dd-mm-yy' by segment position."""
    match = _SEGMENTS_RE.match(text)
    if match is None:
        return None
    first, middle, last = match.groups()

    try:
        if len(first) == 4:
            return date(int(first), int(middle), int(last))
        if len(last) == 4:
            return date(int(last), int(middle), int(first))
        if len(last) == 2:
            return date(2000 + int(last), int(middle), int(first))
    except ValueError:
        return None
    return None


def from_spreadsheet_serial(serial: float) -> date:
    """Convert a spreadsheet serial day count to a calendar date (UTC)."""
    seconds = (serial - SPREADSHEET_EPOCH_OFFSET) * 86400
    return (UNIX_EPOCH + timedelta(seconds=seconds)).date()


def _generic_parse(text: str) -> Optional[date]:
    try:
        parsed = pd.to_datetime(text, errors="coerce", dayfirst=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def parse_date(value: Any) -> Optional[date]:
    """
    Normalize a date-like value to a calendar date.

    Tried in order:
    1. date / datetime objects (including pandas Timestamps) are used directly
    2. three numeric segments separated by "-", "/" or ".", by position;
       an impossible day or month here is unresolvable
    3. numbers above 25569 as spreadsheet serial day counts
    4. generic calendar-string parsing

    Returns:
        The calendar date, or None when the input is empty or unresolvable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, float) and pd.isna(value):
        return None

    text = str(value).strip()
    if not text:
        return None

    if _SEGMENTS_RE.match(text):
        return _from_segments(text)

    if _NUMERIC_RE.match(text) and float(text) > SPREADSHEET_EPOCH_OFFSET:
        try:
            return from_spreadsheet_serial(float(text))
        except OverflowError:
            return None

    return _generic_parse(text)


def is_blank(value: Any) -> bool:
    """True for None, NaN and whitespace-only strings."""
    if value is None:
        return True
    if not isinstance(value, str) and pd.api.types.is_scalar(value) and pd.isna(value):
        # NaN from empty cells, NaT from empty date cells
        return True
    return str(value).strip() == ""


def format_display_date(value: Any) -> str:
    """
    Render a date-like value as DD-MM-YYYY.

    Empty input renders as a single dash. Unresolvable input is shown
    unchanged.
    """
    if is_blank(value):
        return DISPLAY_PLACEHOLDER

    resolved = parse_date(value)
    if resolved is None:
        return str(value).strip()

    return f"{resolved.day:02d}-{resolved.month:02d}-{resolved.year:04d}"


def to_iso(value: Optional[date]) -> str:
    """Format as YYYY-MM-DD, or an empty string."""
    return value.isoformat() if value else ""


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)
