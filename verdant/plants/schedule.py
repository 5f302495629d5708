"""Recurrence schedules and next-due-date policy.

Due dates are anchored to the start of the calendar day of the reference
date, so reminders surface at day granularity regardless of the time the
task was done.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta


class Schedule(str, Enum):
    """Recurrence frequency for a care track."""
    NONE = "None"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    BIWEEKLY = "Every 2 Weeks"
    MONTHLY = "Monthly"

    @property
    def is_enabled(self) -> bool:
        return self is not Schedule.NONE

    def next_date(
        self,
        from_date: Optional[datetime] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> Optional[datetime]:
        return next_date(self, from_date, clock=clock)


_OFFSETS = {
    Schedule.DAILY: relativedelta(days=1),
    Schedule.WEEKLY: relativedelta(weeks=1),
    Schedule.BIWEEKLY: relativedelta(weeks=2),
    # Calendar months: Jan 31 -> Feb 28 (or 29), never a fixed 30 days.
    Schedule.MONTHLY: relativedelta(months=1),
}


def start_of_day(dt: datetime) -> datetime:
    """Midnight of `dt`'s calendar day, keeping its tzinfo."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def next_date(
    schedule: Schedule,
    from_date: Optional[datetime] = None,
    *,
    clock: Optional[Callable[[], datetime]] = None,
) -> Optional[datetime]:
    """
    Next due date for `schedule` counted from `from_date`.

    `from_date` defaults to the clock's current time. Returns None for
    Schedule.NONE. If calendar arithmetic overflows, the start of the
    reference day is returned instead.
    """
    schedule = Schedule(schedule)
    if not schedule.is_enabled:
        return None

    if from_date is None:
        if clock is None:
            from verdant.core.clock import get_clock

            clock = get_clock()
        from_date = clock()

    anchor = start_of_day(from_date)
    try:
        return anchor + _OFFSETS[schedule]
    except (OverflowError, ValueError):
        return anchor


def days_between(a: datetime, b: datetime) -> int:
    """Whole calendar days from `b` to `a` (date-based)."""
    return (a.date() - b.date()).days
