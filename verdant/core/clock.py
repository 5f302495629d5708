"""Single time source for due-date and needs-care computations."""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from verdant.core.config import get_settings


def get_tzinfo(tz_name: Optional[str] = None) -> tzinfo:
    """Resolve a timezone name, falling back to the configured one."""
    return ZoneInfo(tz_name or get_settings().TIMEZONE)


def as_aware(dt: datetime, tz: tzinfo) -> datetime:
    """Interpret naive datetimes in `tz`; convert aware ones into it."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


class Clock:
    """Returns the current time as an aware datetime in the app timezone."""

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or get_tzinfo()

    def __call__(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock(Clock):
    """Clock pinned to a given instant. Used by tests and scripts."""

    def __init__(self, now: datetime, tz: Optional[tzinfo] = None):
        super().__init__(tz or now.tzinfo or get_tzinfo())
        self.now = as_aware(now, self.tz)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        """Move the pinned time forward by a timedelta's keyword arguments."""
        self.now = self.now + timedelta(**kwargs)


_clock: Optional[Clock] = None


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    global _clock
    if _clock is None:
        _clock = Clock()
    return _clock
