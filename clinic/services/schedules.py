"""
Recurring weekly schedule maintenance.

The write path upserts one row per (doctor, weekday): an existing entry
is updated in place, a missing one is created from the clinic defaults
(09:00-17:00, inactive) with the submitted fields laid on top.  This
keeps the API from ever creating duplicate weekday entries; the
resolver's last-write-wins rule only matters for imported data.
"""
from __future__ import annotations

from datetime import time
from typing import Optional

import structlog
from django.db import transaction

from clinic.context import Actor
from clinic.exceptions import ActorNotAllowed, ScheduleValidationError
from clinic.models import ScheduleOverride, WeeklyScheduleEntry
from clinic.services import store
from clinic.services.clock import format_hhmm
from clinic.services.overrides import serialize_override
from clinic.services.updates import broadcast_slots_changed

logger = structlog.get_logger(__name__)

DEFAULT_START = time(9, 0)
DEFAULT_END = time(17, 0)


def upsert_weekly_entry(
    actor: Actor,
    doctor_id: int,
    day_of_week: int,
    *,
    start_time: Optional[time] = None,
    end_time: Optional[time] = None,
    is_active: Optional[bool] = None,
) -> WeeklyScheduleEntry:
    if not (actor.is_admin or actor.owns_doctor(doctor_id)):
        raise ActorNotAllowed('only administrators or the doctor can edit this schedule')
    if not 0 <= day_of_week <= 6:
        raise ScheduleValidationError(f'day_of_week must be 0..6, got {day_of_week}')

    with transaction.atomic():
        doctor = store.get_doctor(doctor_id, for_update=True)
        existing = store.get_weekly_schedule(doctor.id, day_of_week)
        entry = existing[-1] if existing else WeeklyScheduleEntry(
            doctor=doctor,
            day_of_week=day_of_week,
            start_time=DEFAULT_START,
            end_time=DEFAULT_END,
            is_active=False,
        )
        if start_time is not None:
            entry.start_time = start_time
        if end_time is not None:
            entry.end_time = end_time
        if is_active is not None:
            entry.is_active = is_active
        if entry.start_time >= entry.end_time:
            raise ScheduleValidationError('weekly entry must end after it starts')
        entry.save()

    logger.info(
        'weekly_schedule_updated',
        doctor_id=doctor.id,
        day_of_week=day_of_week,
        start_time=format_hhmm(entry.start_time),
        end_time=format_hhmm(entry.end_time),
        is_active=entry.is_active,
        created=not existing,
        updated_by=actor.user_id,
    )
    broadcast_slots_changed(doctor.id, cause='weekly_schedule')
    return entry


def serialize_weekly_entry(entry: WeeklyScheduleEntry) -> dict:
    return {
        'id': entry.id,
        'doctorId': entry.doctor_id,
        'dayOfWeek': entry.day_of_week,
        'startTime': format_hhmm(entry.start_time),
        'endTime': format_hhmm(entry.end_time),
        'isActive': entry.is_active,
    }


def doctor_schedule(doctor_id: int) -> dict:
    """Weekly entries and pending or approved overrides of one doctor."""
    doctor = store.get_doctor(doctor_id)
    overrides = [
        o for o in store.get_overrides(doctor.id)
        if o.status != ScheduleOverride.STATUS_DECLINED
    ]
    return {
        'doctorId': doctor.id,
        'slotDurationMinutes': doctor.slot_duration_minutes,
        'weekly': [serialize_weekly_entry(e) for e in store.get_weekly_schedule(doctor.id)],
        'overrides': [serialize_override(o) for o in overrides],
    }
