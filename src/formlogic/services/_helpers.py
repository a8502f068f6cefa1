"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any


def jsonable(value: Any) -> Any:
    """Convert dates (possibly nested) to ISO strings for result payloads.

    Examples:
        >>> jsonable(date(2024, 3, 14))
        '2024-03-14'
        >>> jsonable({"a": [date(2024, 1, 2)], "b": 1})
        {'a': ['2024-01-02'], 'b': 1}
    """
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value

