"""Time helpers shared by the pricing services.

Instants travel through the engine either as timezone-aware ``datetime``
objects or as epoch milliseconds (the transaction log format). Calendar days
are always resolved in the configured timezone.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def from_millis(ms: int | float) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def to_millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(round(moment.timestamp() * 1000))


def floor_seconds(moment: datetime) -> int:
    return math.floor(moment.timestamp())


def ceil_seconds(moment: datetime) -> int:
    return math.ceil(moment.timestamp())


def iso_day(moment: datetime) -> str:
    """Return the UTC calendar date of ``moment`` as ``YYYY-MM-DD``."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date().isoformat()


def resolve_tz(tz: ZoneInfo | str) -> ZoneInfo:
    return tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)


def local_day(ms: int | float, tz: ZoneInfo) -> date:
    return from_millis(ms).astimezone(tz).date()


def day_start_millis(day: date, tz: ZoneInfo) -> int:
    return to_millis(datetime.combine(day, time.min, tzinfo=tz))


def local_midnight_millis(ms: int | float, tz: ZoneInfo) -> int:
    """Truncate an epoch-millisecond instant to the local midnight of its day."""

    return day_start_millis(local_day(ms, tz), tz)


def iter_days(start: date, end: date):
    """Yield every calendar day from ``start`` through ``end`` inclusive."""

    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


__all__ = [
    "Clock",
    "utc_now",
    "from_millis",
    "to_millis",
    "floor_seconds",
    "ceil_seconds",
    "iso_day",
    "resolve_tz",
    "local_day",
    "day_start_millis",
    "local_midnight_millis",
    "iter_days",
]
