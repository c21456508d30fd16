"""Date parsing utilities for rows returned by the data service"""

from datetime import date, datetime, timezone
from pydantic import TypeAdapter

_datetime_adapter = TypeAdapter(datetime)


def parse_timestamp(value: str) -> datetime:
    """
    Parse a timestamptz or plain date column; naive values are taken as UTC.

    Postgres trims trailing zeros from fractional seconds
    (e.g. "10:00:00.12345+00:00"), which pydantic parses on every
    supported Python version.

    Raises:
        ValueError: value is not an ISO date or timestamp
    """
    if len(value) == 10:
        parsed = datetime.combine(date.fromisoformat(value), datetime.min.time())
    else:
        parsed = _datetime_adapter.validate_python(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_month(value: str) -> date:
    """Budget month column: first day of the period"""
    return date.fromisoformat(value[:10]).replace(day=1)
