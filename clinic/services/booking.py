"""
Booking commit.

A slot list shown to a patient can be stale by the time they submit, so
the commit re-runs resolve → generate → filter itself, under a row lock
on the doctor, before writing.  The partial unique constraint on live
appointments backs this up for stores where the lock is a no-op.
"""
from __future__ import annotations

import secrets
from datetime import date, time
from typing import Optional

import bleach
import structlog
from django.conf import settings
from django.db import transaction

from clinic.context import Actor
from clinic.exceptions import ActorNotAllowed, BookingValidationError, RecordNotFound, SlotNoLongerAvailable
from clinic.models import Appointment, User
from clinic.services import store
from clinic.services.availability import Unavailable, resolve_working_interval
from clinic.services.clock import add_minutes, facility_today, format_hhmm
from clinic.services.slots import filter_available, generate_slots
from clinic.services.updates import broadcast_slots_changed

logger = structlog.get_logger(__name__)

CONFIRMATION_ATTEMPTS = 5


def new_confirmation_number() -> str:
    """``APP-`` plus a random five digit suffix.

    Uniqueness is best effort: a few draws are checked against the store
    and the last one is used regardless.
    """
    prefix = settings.APPOINTMENT_CONFIRMATION_PREFIX
    number = ''
    for _ in range(CONFIRMATION_ATTEMPTS):
        number = f"{prefix}{secrets.randbelow(90000) + 10000}"
        if not store.confirmation_number_exists(number):
            break
    return number


def _clean_text(value: Optional[str]) -> str:
    text = bleach.clean((value or '').strip(), strip=True)
    if len(text) > settings.BOOKING_TEXT_MAX:
        raise BookingValidationError(f'text longer than {settings.BOOKING_TEXT_MAX} characters')
    return text


def _check_actor(actor: Actor, patient_id: int) -> None:
    if actor.is_patient and actor.user_id != patient_id:
        raise ActorNotAllowed('patients can only book for themselves')
    if actor.is_doctor:
        raise ActorNotAllowed('doctors cannot create bookings')


def commit_booking(
    actor: Actor,
    *,
    patient_id: int,
    doctor_id: int,
    branch_id: int,
    day: date,
    start_time: time,
    reason: str = '',
    notes: str = '',
) -> Appointment:
    """Book ``start_time`` on ``day`` with a doctor, or raise.

    Raises :class:`SlotNoLongerAvailable` when the slot is not free at
    commit time (or :class:`ConflictOnInsert`, a subclass, when a
    concurrent commit won the insert).
    """
    _check_actor(actor, patient_id)
    if day < facility_today():
        raise BookingValidationError('cannot book a date in the past')
    patient = User.objects.filter(id=patient_id, role=User.ROLE_PATIENT).first()
    if patient is None:
        raise BookingValidationError(f'patient {patient_id} not found')
    reason = _clean_text(reason)
    notes = _clean_text(notes)

    with transaction.atomic():
        # Row lock on the doctor serialises commits for that doctor.
        try:
            doctor = store.get_doctor(doctor_id, for_update=True)
        except RecordNotFound as exc:
            raise BookingValidationError(exc.message) from exc
        if doctor.branch_id != branch_id:
            raise BookingValidationError('doctor does not practise at this branch')

        resolution = resolve_working_interval(doctor.id, day)
        if isinstance(resolution, Unavailable):
            free = []
        else:
            free = filter_available(
                generate_slots(resolution, doctor.slot_duration_minutes),
                doctor.id, day, doctor.slot_duration_minutes,
            )
        if start_time not in free:
            logger.info(
                'booking_rejected',
                doctor_id=doctor.id,
                date=day.isoformat(),
                start_time=format_hhmm(start_time),
                patient_id=patient_id,
            )
            raise SlotNoLongerAvailable(f'{format_hhmm(start_time)} on {day.isoformat()} is no longer available')

        appointment = store.insert_appointment(Appointment(
            confirmation_number=new_confirmation_number(),
            patient=patient,
            doctor=doctor,
            branch_id=branch_id,
            date=day,
            start_time=start_time,
            end_time=add_minutes(start_time, doctor.slot_duration_minutes),
            duration_minutes=doctor.slot_duration_minutes,
            status=Appointment.STATUS_PENDING,
            reason=reason,
            notes=notes,
        ))

    logger.info(
        'booking_committed',
        appointment_id=appointment.id,
        confirmation_number=appointment.confirmation_number,
        doctor_id=doctor.id,
        date=day.isoformat(),
        start_time=format_hhmm(start_time),
        booked_by=actor.user_id,
    )
    broadcast_slots_changed(doctor.id, day, cause='booking')
    return appointment
