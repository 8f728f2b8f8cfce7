from __future__ import annotations

import calendar as _calendar
import datetime as dt
from typing import Literal
from zoneinfo import ZoneInfo

from .models import DateValue, GridWindow

Direction = Literal["prev", "next"]
"""Month navigation direction."""


def normalize(value: DateValue, tz: dt.tzinfo | None = None) -> dt.date:
    """
    Strip time-of-day and return the calendar day in the viewing timezone.

    - `date` values are returned unchanged (idempotent).
    - Naive datetimes are taken as wall-clock time already in the viewing timezone.
    - Aware datetimes are converted to `tz` first; with `tz=None` the host's local zone is used.
    """

    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz) if tz is not None else value.astimezone()
        return value.date()
    if isinstance(value, dt.date):
        return value
    raise TypeError(f"expected date or datetime, got {type(value).__name__}")


def resolve_timezone(name: str | None) -> dt.tzinfo | None:
    """Look up an IANA zone name; `None` or empty keeps host-local behaviour."""
    if not name:
        return None
    return ZoneInfo(name)


def today(tz: dt.tzinfo | None = None) -> dt.date:
    return normalize(dt.datetime.now(dt.timezone.utc), tz)


def days_between(a: DateValue, b: DateValue, tz: dt.tzinfo | None = None) -> int:
    """Whole-day difference `b - a` computed on normalized dates only."""
    return (normalize(b, tz) - normalize(a, tz)).days


def add_months(day: dt.date, months: int) -> dt.date:
    """First day of the month `months` away from `day`'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return dt.date(index // 12, index % 12 + 1, 1)


def last_day_of_month(day: dt.date) -> dt.date:
    return day.replace(day=_calendar.monthrange(day.year, day.month)[1])


def month_window(value: DateValue) -> GridWindow:
    """Default two-month horizon: first day of `value`'s month to the last day of the next month."""
    day = normalize(value)
    start = day.replace(day=1)
    return GridWindow(start=start, end=last_day_of_month(add_months(start, 1)))


def shift_window(window: GridWindow, direction: Direction) -> GridWindow:
    """Move the window one calendar month back or forward, recomputed from its start month."""
    if direction == "prev":
        offset = -1
    elif direction == "next":
        offset = 1
    else:
        raise ValueError(f"direction must be 'prev' or 'next', got {direction!r}")
    return month_window(add_months(window.start, offset))


def iter_days(window: GridWindow) -> list[dt.date]:
    """Every day of the window, inclusive, in order."""
    return [window.start + dt.timedelta(days=offset) for offset in range(window.total_days)]
