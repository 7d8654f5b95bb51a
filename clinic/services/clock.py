"""
Facility-local date and time helpers.

All scheduling values are naive: calendar dates as ``YYYY-MM-DD`` and
wall-clock times as ``HH:MM`` (24-hour).  Slot arithmetic is done in
minutes since midnight so no timezone or DST logic can leak in.
"""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Union

from django.utils import timezone


def parse_hhmm(value: Union[str, time]) -> time:
    """Convert ``'09:30'`` (or a ``time``) to ``datetime.time``."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if isinstance(value, str):
        return datetime.strptime(value.strip(), '%H:%M').time()
    raise ValueError(f"Cannot convert {type(value)} to time")


def format_hhmm(value: time) -> str:
    return value.strftime('%H:%M')


def parse_day(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), '%Y-%m-%d').date()


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    if not 0 <= minutes < 24 * 60:
        raise ValueError(f"{minutes} minutes is outside a single day")
    return time(minutes // 60, minutes % 60)


def add_minutes(value: time, minutes: int) -> time:
    return from_minutes(to_minutes(value) + minutes)


def day_of_week(day: date) -> int:
    """Sunday based weekday: 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


def facility_today() -> date:
    return timezone.localdate()
