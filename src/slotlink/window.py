"""Single-day query windows for the available-times lookup."""

from __future__ import annotations

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from .models import parse_timestamp

END_OF_DAY = time(23, 59, 59, 999000)


def resolve_day(value: str, tz: ZoneInfo) -> date:
    """Turn a caller-supplied date string into a calendar day in ``tz``.

    "2025-03-10" is taken literally; full timestamps are converted to ``tz``
    first, so "2025-03-10T23:30:00-05:00" is March 11 in UTC.
    """
    value = value.strip()
    if "T" not in value and " " not in value:
        return date.fromisoformat(value)
    return parse_timestamp(value, tz).astimezone(tz).date()


def day_window(day: date, tz: ZoneInfo, now: datetime) -> tuple[datetime, datetime]:
    """Return (start, end) covering ``day`` in ``tz``.

    If ``day`` is today the window opens at ``now`` so passed slots are never
    offered; otherwise it opens at midnight. It always closes at end of day.
    """
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day, END_OF_DAY, tzinfo=tz)
    if now.astimezone(tz).date() == day:
        start = now.astimezone(tz)
    return start, end
