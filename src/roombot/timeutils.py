"""
Date/time helpers shared by the services and adapters.

Dates are `YYYY-MM-DD`, times are 24-hour `HH:MM` and timestamps are
ISO-8601 with millisecond precision and an explicit fixed offset suffix,
e.g. `2026-10-17T10:00:00.000+09:00`.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

_TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DEFAULT_UTC_OFFSET_HOURS = 9


def fixed_offset(hours: int) -> tzinfo:
    """Returns a fixed-offset timezone, e.g. UTC+09:00."""
    return timezone(timedelta(hours=hours))


def is_valid_time(value: Optional[str]) -> bool:
    return bool(value) and bool(_TIME_RE.match(value))


def is_valid_date(value: Optional[str]) -> bool:
    if not value or not _DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, DATE_FORMAT)
        return True
    except ValueError:
        return False


def parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def parse_time(value: str) -> time:
    """Parses `HH:MM` (single-digit hours accepted) into a `time`."""
    return datetime.strptime(value, TIME_FORMAT).time()


def time_to_minutes(value: str) -> int:
    """`HH:MM` -> minutes since midnight."""
    t = parse_time(value)
    return t.hour * 60 + t.minute


def minutes_to_time_str(minutes: int) -> str:
    h = (minutes // 60) % 24
    m = minutes % 60
    return f"{h:02d}:{m:02d}"


def normalize_time(value: str) -> str:
    """`9:05` -> `09:05`."""
    return minutes_to_time_str(time_to_minutes(value))


def combine(day: str, hhmm: str, tz: tzinfo) -> datetime:
    """Builds an aware datetime from a booking date and time in the given zone."""
    return datetime.combine(parse_date(day), parse_time(hhmm), tzinfo=tz)


def format_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds")


def now_in(tz: tzinfo) -> datetime:
    return datetime.now(tz)
