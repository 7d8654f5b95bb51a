"""
Record access for the slot engine.

Every read the resolver, generator and filter need goes through the
functions below, each an indexed lookup by doctor (and date where it
applies).  Writes are single-row operations; the only atomic guarantee
the engine relies on is :func:`insert_appointment`, backed by the
partial unique constraint on live appointments.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone

from clinic.exceptions import ConflictOnInsert, RecordNotFound
from clinic.models import Appointment, DoctorProfile, ScheduleOverride, User, WeeklyScheduleEntry

logger = structlog.get_logger(__name__)


def get_doctor(doctor_id: int, *, for_update: bool = False) -> DoctorProfile:
    qs = DoctorProfile.objects.select_related('branch', 'user')
    if for_update:
        qs = qs.select_for_update(of=('self',))
    doctor = qs.filter(id=doctor_id).first()
    if doctor is None:
        raise RecordNotFound(f'doctor {doctor_id} not found')
    return doctor


def get_weekly_schedule(doctor_id: int, day_of_week: Optional[int] = None) -> list[WeeklyScheduleEntry]:
    """Weekly entries for a doctor in insertion order."""
    qs = WeeklyScheduleEntry.objects.filter(doctor_id=doctor_id)
    if day_of_week is not None:
        qs = qs.filter(day_of_week=day_of_week)
    return list(qs.order_by('id'))


def get_overrides(doctor_id: int, day: Optional[date] = None, status: Optional[str] = None) -> list[ScheduleOverride]:
    """Overrides for a doctor in insertion order, optionally for one date/status."""
    qs = ScheduleOverride.objects.filter(doctor_id=doctor_id)
    if day is not None:
        qs = qs.filter(date=day)
    if status is not None:
        qs = qs.filter(status=status)
    return list(qs.order_by('id'))


def get_appointments(doctor_id: int, day: date, *, include_cancelled: bool = True) -> list[Appointment]:
    qs = Appointment.objects.filter(doctor_id=doctor_id, date=day)
    if not include_cancelled:
        qs = qs.exclude(status=Appointment.STATUS_CANCELLED)
    return list(qs.order_by('start_time', 'id'))


def insert_appointment(appointment: Appointment) -> Appointment:
    """Insert a new appointment, or raise :class:`ConflictOnInsert`.

    The savepoint keeps an enclosing transaction usable after the
    integrity failure.
    """
    try:
        with transaction.atomic():
            appointment.save(force_insert=True)
    except IntegrityError as exc:
        logger.info(
            'appointment_insert_conflict',
            doctor_id=appointment.doctor_id,
            date=appointment.date.isoformat(),
            start_time=appointment.start_time.strftime('%H:%M'),
        )
        raise ConflictOnInsert('slot already taken') from exc
    return appointment


def confirmation_number_exists(number: str) -> bool:
    return Appointment.objects.filter(confirmation_number=number).exists()


def update_override_status(override_id: int, new_status: str, reviewer: Optional[User] = None) -> ScheduleOverride:
    """Set the approval state of an override and stamp the reviewer."""
    override = ScheduleOverride.objects.filter(id=override_id).first()
    if override is None:
        raise RecordNotFound(f'override {override_id} not found')
    override.status = new_status
    override.reviewed_by = reviewer
    override.reviewed_at = timezone.now()
    override.save(update_fields=['status', 'reviewed_by', 'reviewed_at'])
    return override
