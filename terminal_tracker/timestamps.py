"""Local-time helpers shared by the normalizer, aggregator and today-stats."""

import re
from datetime import date, datetime

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def local_now() -> datetime:
    """Current time as an aware datetime in the host's local zone."""
    return datetime.now().astimezone()


def local_date(date_str: str) -> str:
    """Re-derive a YYYY-MM-DD date by building local midnight for it.

    Raises ValueError if *date_str* is not a real calendar date in
    fixed-width form.
    """
    if not _DATE_RE.match(date_str):
        raise ValueError(f"Not a YYYY-MM-DD date: {date_str!r}")
    day = date.fromisoformat(date_str)
    try:
        midnight = datetime(day.year, day.month, day.day).astimezone()
    except (OverflowError, OSError) as e:
        raise ValueError(f"Date out of range for local time: {date_str!r}") from e
    return midnight.strftime("%Y-%m-%d")


def canonicalize_timestamp(timestamp: str) -> str:
    """Re-derive the date component and re-attach the time-and-offset suffix."""
    return local_date(timestamp[:10]) + timestamp[10:]


def synthesize_timestamp(date_str: str, now: datetime) -> str:
    """Build a full timestamp for a bare date using *now*'s time of day and offset."""
    if now.tzinfo is None:
        now = now.astimezone()
    day = date.fromisoformat(local_date(date_str))
    stamped = datetime.combine(day, now.time().replace(microsecond=0), tzinfo=now.tzinfo)
    return stamped.strftime("%Y-%m-%dT%H:%M:%S%z")


def today_str(now: datetime) -> str:
    return now.strftime("%Y-%m-%d")
