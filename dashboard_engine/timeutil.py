"""Timestamp parsing and day arithmetic."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone

SECONDS_PER_DAY = 24 * 60 * 60


def parse_timestamp(value) -> datetime:
    """Parse an ISO date or datetime into an aware UTC datetime.

    Date-only strings mean midnight UTC, naive datetimes are taken as UTC.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_now(now=None) -> datetime:
    """The given moment as aware UTC, or the current time when omitted."""

    if now is None:
        return utc_now()
    return parse_timestamp(now)


def days_between(start: datetime, end: datetime) -> float:
    """Fractional days from `start` to `end` (negative when end is earlier)."""

    return (end - start).total_seconds() / SECONDS_PER_DAY


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves towards positive infinity, as dashboards display them."""

    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def format_number(value: float) -> str:
    """Render 20.0 as '20' and 12.5 as '12.5'."""

    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)
