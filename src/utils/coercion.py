"""
Value coercion utilities for loosely-typed upstream payloads.

Upstream records carry numbers as ints, floats or strings and timestamps
as ISO strings, datetimes or nothing at all. These helpers turn such
values into plain floats and naive UTC datetimes, returning None (or a
default) rather than raising.
"""

import math
from datetime import date, datetime, time, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError

_DATETIME_ADAPTER = TypeAdapter(datetime)


def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def coerce_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce a value to a non-negative finite float.

    Args:
        value: Raw value (int, float, numeric string, or anything else)
        default: Returned when the value is missing, non-numeric,
            NaN/infinite, too large for a float or negative

    Returns:
        The coerced number or the default

    Examples:
        >>> coerce_number("90")
        90.0
        >>> coerce_number("abc")
        0.0
    """
    if value is None or isinstance(value, bool):
        return default

    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default

    if math.isnan(number) or math.isinf(number) or number < 0:
        return default
    return number


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce a value to a naive UTC datetime.

    Accepts datetimes, dates, ISO-8601 strings and unix timestamps.
    Aware values are converted to UTC before the tzinfo is dropped.

    Returns:
        The datetime, or None when the value is empty or unparseable
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        try:
            parsed = _DATETIME_ADAPTER.validate_python(value)
        except ValidationError:
            if not isinstance(value, str):
                return None
            # Date-only strings ("2025-11-17") mean midnight of that day
            try:
                parsed = datetime.combine(date.fromisoformat(value.strip()), time.min)
            except ValueError:
                return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def first_datetime(*values: Any) -> datetime | None:
    """Return the first value that coerces to a datetime."""
    for value in values:
        parsed = coerce_datetime(value)
        if parsed is not None:
            return parsed
    return None
