"""Normalization of loosely formatted statement numbers and dates."""

import math
import re
from datetime import datetime
from typing import Optional, Union

_NON_NUMERIC = re.compile(r"[^0-9.\-]+")
_ISO_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]")

# Tried in order; the first format that parses wins.
DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d-%b-%y",
    "%d-%b-%Y",
    "%d %b %Y",
    "%d %b %y",
    "%d-%B-%Y",
    "%d %B %Y",
    "%m/%d/%Y",
    "%b %d, %Y",
    "%B %d, %Y",
]


def standardize_number(value: Union[str, int, float, None]) -> Optional[float]:
    """Convert a loosely formatted amount to a float.

    Every character other than digits, ``.`` and ``-`` is dropped before
    conversion, so currency symbols, thousands commas and spaces are noise.
    Exponent markers are noise too: ``str()`` of a float below 1e-4 or from
    1e16 up (``"1e-05"``, ``"1e+16"``) does not normalize back to the value.

    Args:
        value: Raw amount, a number, or None.

    Returns:
        The numeric value, or None if absent or not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return None

    try:
        number = float(cleaned)
    except ValueError:
        return None

    return number if math.isfinite(number) else None


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a statement date string into a datetime, or None."""
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    candidates = [text]
    # ISO timestamps: the time part is not needed
    if _ISO_TIMESTAMP.match(text):
        candidates.append(text[:10])

    for candidate in candidates:
        for date_format in DATE_FORMATS:
            try:
                return datetime.strptime(candidate, date_format)
            except ValueError:
                continue
    return None


def format_date(date_value: datetime) -> str:
    """Format a date in the US short form, e.g. 3/15/2025."""
    return f"{date_value.month}/{date_value.day}/{date_value.year}"


def standardize_date(value: Optional[str]) -> Optional[str]:
    """Normalize a statement date to M/D/YYYY.

    Args:
        value: Raw date such as ``2025-03-15`` or ``15-Mar-25``.

    Returns:
        Canonical date string, or None if absent or not a calendar date.
    """
    parsed = parse_date(value)
    if parsed is None:
        return None
    return format_date(parsed)
