"""Time utilities for ISO 8601 query formatting."""

from datetime import date, datetime
from typing import Union

DateLike = Union[date, datetime]


def format_iso(value: DateLike) -> str:
    """
    Format a date or datetime as an ISO 8601 string for a query parameter.

    Args:
        value: ``date`` (formatted as YYYY-MM-DD) or timezone-aware ``datetime``

    Returns:
        ISO 8601 string (e.g., '2025-12-23' or '2025-12-23T12:00:00+01:00')

    Raises:
        ValueError: If datetime is naive (not timezone-aware)
        TypeError: If value is neither a date nor a datetime

    Example:
        >>> from datetime import date
        >>> format_iso(date(2025, 12, 23))
        '2025-12-23'
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise ValueError(
                f"Naive datetime not allowed. Got {value}. "
                "Use datetime.now(timezone.utc) or dt.replace(tzinfo=timezone.utc)"
            )
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


def parse_date_like(text: str) -> DateLike:
    """
    Parse a CLI/config string into a date or aware datetime.

    'YYYY-MM-DD' becomes a ``date``; anything with a time part must carry an
    offset (a trailing 'Z' is accepted for UTC).
    """
    text = text.strip()
    if "T" not in text and " " not in text:
        return date.fromisoformat(text)
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        raise ValueError(f"Datetime must include a UTC offset: {text}")
    return parsed
