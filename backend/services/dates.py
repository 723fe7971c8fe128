"""Calendar helpers for the protocol (DD-MM-YYYY) and upstream (YYYY-MM-DD) date forms.

Dates are timezone-naive calendar dates. Conversions only reorder the
day/month/year tokens.
"""

import re
from collections.abc import Iterator
from datetime import date, timedelta

import pandas as pd

from errors import InvalidDateRangeError

_PROTOCOL_DATE = re.compile(r"^(0[1-9]|[12][0-9]|3[01])-(0[1-9]|1[0-2])-([0-9]{4})$")


def previous_day(day: date) -> date:
    return day - timedelta(days=1)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end, inclusive."""
    for ts in pd.date_range(start=start, end=end, freq="D"):
        yield ts.date()


def format_for_protocol(day: date) -> str:
    return day.strftime("%d-%m-%Y")


def format_for_upstream(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def protocol_to_upstream(value: str) -> str:
    """Reorder DD-MM-YYYY into YYYY-MM-DD without interpreting the date."""
    day, month, year = value.split("-")
    return f"{year}-{month}-{day}"


def parse_protocol_date(value: str) -> date:
    """Parse a strict DD-MM-YYYY string into a real calendar date."""
    match = _PROTOCOL_DATE.match(value or "")
    if not match:
        raise InvalidDateRangeError(f"Invalid date '{value}'. Expected DD-MM-YYYY")
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateRangeError(f"Invalid date '{value}': {e}") from e


def today(tz: str | None = None) -> date:
    """Current date in the server's local calendar, or in tz when given."""
    return pd.Timestamp.now(tz=tz).date()


def is_valid_range(start: date, end: date, current: date | None = None) -> bool:
    """start <= end and end strictly before today.

    Ranges ending today are rejected: the upstream history endpoint does not
    include today's figures yet.
    """
    current = current or today()
    return start <= end < current


def parse_range(start: str, end: str, current: date | None = None) -> tuple[date, date]:
    """Parse and validate a protocol date range. Raises InvalidDateRangeError."""
    start_day = parse_protocol_date(start)
    end_day = parse_protocol_date(end)
    if not is_valid_range(start_day, end_day, current):
        raise InvalidDateRangeError(
            f"Invalid date range {start}..{end}: start must not be after end, "
            "and end must be before today"
        )
    return start_day, end_day
