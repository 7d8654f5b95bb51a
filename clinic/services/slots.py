"""
Slot generation and conflict filtering.

A working interval is cut into fixed-size slots using the doctor's
``slot_duration_minutes``; only whole slots are produced, so a slot may
end exactly at closing time but never past it.  The conflict filter then
drops every slot that intersects a live (non-cancelled) appointment.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Iterable, Optional

import structlog

from clinic.exceptions import ConfigurationError
from clinic.models import Appointment
from clinic.services import store
from clinic.services.availability import Resolution, Unavailable, WorkingInterval, resolve_working_interval
from clinic.services.clock import format_hhmm, from_minutes, to_minutes

logger = structlog.get_logger(__name__)


@dataclass
class SlotList:
    """Outcome of one availability query for (doctor, date)."""
    doctor_id: int
    day: date
    duration_minutes: int
    resolution: Resolution
    slots: list[time] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return isinstance(self.resolution, WorkingInterval)

    def as_dict(self) -> dict:
        payload = {
            'doctorId': self.doctor_id,
            'date': self.day.isoformat(),
            'durationMinutes': self.duration_minutes,
            'available': self.available,
            'slots': [format_hhmm(s) for s in self.slots],
        }
        if isinstance(self.resolution, WorkingInterval):
            payload['interval'] = self.resolution.as_dict()
        else:
            payload['reason'] = self.resolution.reason
        return payload


def generate_slots(interval: WorkingInterval, duration_minutes: Optional[int]) -> list[time]:
    """Slot start times covering ``interval`` in steps of ``duration_minutes``.

    Emits ``interval.start`` and then every ``duration_minutes`` while the
    slot still fits, i.e. ``current + duration <= interval.end``.
    """
    if not duration_minutes or duration_minutes <= 0:
        raise ConfigurationError(f'slot duration must be positive, got {duration_minutes!r}')

    current = to_minutes(interval.start)
    end = to_minutes(interval.end)
    slots = []
    while current + duration_minutes <= end:
        slots.append(from_minutes(current))
        current += duration_minutes
    return slots


def _occupied_ranges(appointments: Iterable[Appointment]) -> list[tuple[int, int]]:
    ranges = []
    for appt in appointments:
        if appt.status == Appointment.STATUS_CANCELLED:
            continue
        start = to_minutes(appt.start_time)
        end = to_minutes(appt.end_time)
        if end <= start:
            end = start + (appt.duration_minutes or 1)
        ranges.append((start, end))
    return ranges


def filter_available(slots: Iterable[time], doctor_id: int, day: date, duration_minutes: int) -> list[time]:
    """Remove slots colliding with live appointments of the doctor on ``day``.

    A slot ``[s, s+d)`` collides with an appointment ``[a, b)`` when the two
    half-open intervals intersect.  On the regular grid this is the same as
    matching start times; it also catches bookings whose duration no longer
    matches the doctor's current slot size.
    """
    occupied = _occupied_ranges(store.get_appointments(doctor_id, day, include_cancelled=False))
    free = []
    for slot in slots:
        s = to_minutes(slot)
        e = s + duration_minutes
        if any(s < b and a < e for a, b in occupied):
            continue
        free.append(slot)
    return free


def available_slots(doctor_id: int, day: date) -> SlotList:
    """Resolve, generate and filter: the bookable slots for a doctor on a date."""
    doctor = store.get_doctor(doctor_id)
    duration = doctor.slot_duration_minutes
    resolution = resolve_working_interval(doctor_id, day)
    result = SlotList(doctor_id=doctor_id, day=day, duration_minutes=duration, resolution=resolution)
    if isinstance(resolution, Unavailable):
        logger.debug('slots_computed', doctor_id=doctor_id, date=day.isoformat(), reason=resolution.reason)
        return result

    candidates = generate_slots(resolution, duration)
    result.slots = filter_available(candidates, doctor_id, day, duration)
    logger.debug(
        'slots_computed',
        doctor_id=doctor_id,
        date=day.isoformat(),
        generated=len(candidates),
        available=len(result.slots),
    )
    return result
