"""Utility functions for the EMI calculator.

This module provides the calendar helpers shared by the schedule engine and
the masked date field: adding months with day-of-month clamping, converting
between ``datetime.date`` and ISO / ``DD/MM/YYYY`` strings, and rendering
short display labels. It also holds the money helpers used everywhere a
value is rounded or parsed.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Optional, Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

TWO_PLACES = Decimal("0.01")

# English abbreviations so labels do not depend on the process locale
MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DISPLAY_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")


def round2(value: Decimal) -> Decimal:
    """Round a monetary value to two decimal places, halves away from zero."""
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and a leading rupee sign and handles both
    integer and float-like strings. It raises ``ValueError`` if conversion
    fails.
    """
    try:
        cleaned = str(value).replace(",", "").replace("₹", "").strip()
        return Decimal(cleaned)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def is_real_date(year: int, month: int, day: int) -> bool:
    """Return True when the triple names a day that exists on the calendar."""
    if not 1 <= month <= 12 or year < 1:
        return False
    return 1 <= day <= calendar.monthrange(year, month)[1]


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The month arithmetic is done from the first of the month and the day is
    then clamped to the last valid day of the target month, so adding one
    month to Jan 31 yields Feb 28 or 29 rather than rolling into March.
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def from_iso_date(text: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date``.

    Raises
    ------
    ValueError
        If the string is not in ISO form or names an impossible day.
    """
    match = _ISO_RE.match((text or "").strip())
    if not match:
        raise ValueError(f"Invalid ISO date string: {text}")
    year, month, day = (int(part) for part in match.groups())
    if not is_real_date(year, month, day):
        raise ValueError(f"Invalid ISO date string: {text}")
    return date(year, month, day)


def to_iso_date(value: Union[date, datetime, str, None]) -> str:
    """Return ``value`` as ``YYYY-MM-DD``, or ``""`` if it is not a date."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            return from_iso_date(value).isoformat()
        except ValueError:
            return ""
    return ""


def format_display_date(dt: date) -> str:
    """Render a short label such as ``01 Jan 2024`` for tables and reports."""
    return f"{dt.day:02d} {MONTH_ABBR[dt.month - 1]} {dt.year:04d}"


def iso_to_display(iso_date: str) -> str:
    """Convert ``YYYY-MM-DD`` to ``DD/MM/YYYY``."""
    if not iso_date:
        return ""
    year, month, day = iso_date.split("-")
    return f"{day}/{month}/{year}"


def parse_display_date(display_date: str) -> Optional[str]:
    """Parse a strict ``DD/MM/YYYY`` string into ISO form.

    Returns ``None`` when the text does not match the pattern or the day does
    not exist (e.g. ``30/02/2024``).
    """
    match = _DISPLAY_RE.match(display_date or "")
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    if not is_real_date(year, month, day):
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"
