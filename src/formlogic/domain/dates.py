"""Calendar helpers shared by the interpreter and the date validators.

Pure functions, no clock access: callers pass the evaluation date in.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any


def parse_date(value: Any) -> date | None:
    """Coerce *value* to a :class:`date`, or ``None`` if it is not one.

    Accepts ``date``/``datetime`` objects and ISO 8601 strings, with or
    without a time part (``2024-03-14``, ``2024-03-14T10:30:00.000Z``).

    Examples:
        >>> parse_date("2006-03-15")
        datetime.date(2006, 3, 15)
        >>> parse_date("2023-12-25T10:30:00.000Z")
        datetime.date(2023, 12, 25)
        >>> parse_date("not a date") is None
        True
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def date_diff_years(start: date, end: date) -> int:
    """Whole calendar years from *start* to *end*.

    One less than the plain year difference when the month/day of *end*
    precedes the month/day of *start* (the anniversary has not occurred).

    Examples:
        >>> date_diff_years(date(2006, 3, 15), date(2024, 3, 14))
        17
        >>> date_diff_years(date(2006, 3, 15), date(2024, 3, 15))
        18
    """
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return years
