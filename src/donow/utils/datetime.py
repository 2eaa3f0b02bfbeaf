"""Date utilities for the todo.txt date fields.

todo.txt stores calendar dates only, always in the ``YYYY-MM-DD`` form. This
module keeps the format in one place so that parsing and serialization can
never drift apart.
"""

import re
from datetime import date, datetime
from typing import Optional


DATE_FORMAT = "%Y-%m-%d"

# Shape of a date token. Whether it is a real calendar date is checked by
# parse_date.
DATE_TOKEN_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def today() -> date:
    """Return the current local date.

    Returns:
        Today's date in the local timezone
    """
    return datetime.now().date()


def looks_like_date(token: str) -> bool:
    """Check whether a token has the ``YYYY-MM-DD`` shape."""
    return bool(DATE_TOKEN_RE.match(token))


def parse_date(date_str: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a date.

    Args:
        date_str: Date string to parse

    Returns:
        The parsed date

    Raises:
        ValueError: If the string is not a valid date in the fixed format
    """
    if not looks_like_date(date_str):
        raise ValueError(f"'{date_str}' is not in YYYY-MM-DD form")
    return datetime.strptime(date_str, DATE_FORMAT).date()


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a date as ``YYYY-MM-DD``.

    Args:
        value: Date to format, or None

    Returns:
        The formatted string, or None if input was None
    """
    if value is None:
        return None
    return value.strftime(DATE_FORMAT)
