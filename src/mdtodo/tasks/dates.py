"""Timestamp helpers: local RFC 3339 stamps and lenient date parsing."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, datetime, time, timedelta

Clock = Callable[[], datetime]

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_END_OF_DAY = time(23, 59, 59)


def local_now() -> datetime:
    """Current timezone-aware local time."""

    return datetime.now().astimezone()


def format_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="microseconds")


def stamp(clock: Clock, previous: str | None = None) -> str:
    """Timestamp for `updated_at`, strictly later than `previous` when it parses."""

    now = clock()
    last = parse_datetime(previous) if previous else None
    if last is not None and now <= last:
        now = last + timedelta(microseconds=1)
    return format_timestamp(now)


def log_date(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def file_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y%m%d%H%M%S")


def parse_datetime(value: str | None) -> datetime | None:
    """Parse RFC 3339 / ISO datetimes or plain `YYYY-MM-DD`.

    A plain date means the end of that day in local time. Naive datetimes are
    taken as local time. Returns None for anything unparsable.
    """

    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if _DATE_ONLY_RE.match(text):
        try:
            day = date.fromisoformat(text)
        except ValueError:
            return None
        return datetime.combine(day, _END_OF_DAY).astimezone()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.astimezone()
    return parsed
