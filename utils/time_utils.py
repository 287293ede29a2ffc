"""
Clock and organisational-timezone helpers.

Every time-dependent decision (event windows, tag expiry, academic periods)
reads "now" from a Clock passed in by the caller, never from the system clock
directly, so the behaviour can be pinned in tests.
"""
from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional, Tuple

from config.settings import settings


class Clock:
    """Wall clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock pinned to a single instant; used by scripts and tests."""

    def __init__(self, instant: datetime):
        self.instant = as_utc(instant)

    def now(self) -> datetime:
        return self.instant


system_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency; overridden in tests."""
    return system_clock


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a datetime to aware UTC. Naive values are taken to be UTC,
    which is how they come back from SQLite.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def local_datetime(day: date, hhmm: str, tz: Optional[tzinfo] = None) -> datetime:
    """Combine an event date and an "HH:MM" string in the organisational timezone."""
    return datetime.combine(day, parse_hhmm(hhmm), tzinfo=tz or settings.org_timezone)


def event_window(event, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    start = local_datetime(event.date, event.start_time, tz)
    end = local_datetime(event.date, event.end_time, tz)
    return start, end


def event_end_utc(event, tz: Optional[tzinfo] = None) -> datetime:
    return event_window(event, tz)[1].astimezone(timezone.utc)


def is_within_event_window(event, now: datetime, tz: Optional[tzinfo] = None) -> bool:
    start, end = event_window(event, tz)
    return start <= as_utc(now) <= end


def event_status(event, now: datetime, tz: Optional[tzinfo] = None) -> str:
    """UPCOMING before start, ONGOING inside [start, end], PAST afterwards."""
    start, end = event_window(event, tz)
    now = as_utc(now)
    if now < start:
        return "UPCOMING"
    if now <= end:
        return "ONGOING"
    return "PAST"
