"""
Availability resolution.

Works out the single effective working interval of a doctor on one
calendar date by layering approved overrides over the recurring weekly
schedule.  Precedence, strongest first:

1. approved SHIFT_CHANGE for the date (its window replaces the week's)
2. approved LEAVE for the date (no interval)
3. active weekly entry for the date's weekday
4. nothing: the doctor is unavailable

Where the store holds duplicates (two approved shift changes for one
date, two active entries for one weekday) the most recently inserted
record wins.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Union

from clinic.models import ScheduleOverride
from clinic.services import store
from clinic.services.clock import day_of_week, format_hhmm

SOURCE_SHIFT_CHANGE = 'shift_change'
SOURCE_WEEKLY = 'weekly'

REASON_LEAVE = 'leave'
REASON_OFF_DUTY = 'off_duty'
REASON_DEGENERATE = 'degenerate'


@dataclass(frozen=True)
class WorkingInterval:
    start: time
    end: time
    source: str

    def as_dict(self) -> dict:
        return {'start': format_hhmm(self.start), 'end': format_hhmm(self.end), 'source': self.source}


@dataclass(frozen=True)
class Unavailable:
    """No bookable interval on that date.

    A normal outcome, not a failure: callers present it as "on leave" or
    "not working that day".
    """
    reason: str


Resolution = Union[WorkingInterval, Unavailable]


def _window(start: Optional[time], end: Optional[time], source: str) -> Resolution:
    if start is None or end is None or start >= end:
        return Unavailable(REASON_DEGENERATE)
    return WorkingInterval(start=start, end=end, source=source)


def resolve_working_interval(doctor_id: int, day: date) -> Resolution:
    approved = store.get_overrides(doctor_id, day=day, status=ScheduleOverride.STATUS_APPROVED)

    shift_changes = [o for o in approved if o.kind == ScheduleOverride.KIND_SHIFT_CHANGE]
    if shift_changes:
        latest = shift_changes[-1]
        return _window(latest.start_time, latest.end_time, SOURCE_SHIFT_CHANGE)

    if any(o.kind == ScheduleOverride.KIND_LEAVE for o in approved):
        return Unavailable(REASON_LEAVE)

    entries = [e for e in store.get_weekly_schedule(doctor_id, day_of_week(day)) if e.is_active]
    if not entries:
        return Unavailable(REASON_OFF_DUTY)
    entry = entries[-1]
    return _window(entry.start_time, entry.end_time, SOURCE_WEEKLY)
