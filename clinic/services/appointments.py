"""
Appointment lifecycle and actor-scoped listing.

Status transitions::

    PENDING   -> CONFIRMED | CANCELLED
    CONFIRMED -> COMPLETED | CANCELLED
    COMPLETED, CANCELLED: terminal

Only cancellation frees the slot; every other status keeps occupying it.
"""
from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, Optional

import structlog
from django.db import transaction
from django.db.models import Q, QuerySet

from clinic.context import Actor
from clinic.exceptions import ActorNotAllowed, InvalidStatusTransition, RecordNotFound
from clinic.models import Appointment
from clinic.services.clock import format_hhmm
from clinic.services.updates import broadcast_slots_changed

logger = structlog.get_logger(__name__)

TRANSITIONS = {
    Appointment.STATUS_PENDING: {Appointment.STATUS_CONFIRMED, Appointment.STATUS_CANCELLED},
    Appointment.STATUS_CONFIRMED: {Appointment.STATUS_COMPLETED, Appointment.STATUS_CANCELLED},
    Appointment.STATUS_COMPLETED: set(),
    Appointment.STATUS_CANCELLED: set(),
}

EXPORT_COLUMNS = [
    'confirmationNumber', 'date', 'startTime', 'endTime', 'durationMinutes',
    'status', 'patient', 'doctor', 'specialization', 'branch', 'reason',
]


def can_transition(current: str, new: str) -> bool:
    """Return True if an appointment may move from ``current`` to ``new``."""
    return new in TRANSITIONS.get(current, set())


def scoped_appointments(actor: Actor) -> QuerySet:
    """Appointments visible to ``actor``.

    Patients see their own bookings, doctors the bookings made with them,
    staff and administrators everything.
    """
    qs = Appointment.objects.select_related('patient', 'doctor__user', 'branch')
    if actor.is_staff:
        return qs
    if actor.is_doctor:
        return qs.filter(doctor_id=actor.doctor_id)
    if actor.is_patient:
        return qs.filter(patient_id=actor.user_id)
    return qs.none()


def list_appointments(
    actor: Actor,
    *,
    status: Optional[str] = None,
    q: Optional[str] = None,
    day: Optional[date] = None,
    doctor_id: Optional[int] = None,
) -> QuerySet:
    qs = scoped_appointments(actor)
    if status:
        qs = qs.filter(status=status)
    if day:
        qs = qs.filter(date=day)
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)
    if q:
        qs = qs.filter(
            Q(confirmation_number__icontains=q)
            | Q(patient__first_name__icontains=q)
            | Q(patient__last_name__icontains=q)
            | Q(patient__username__icontains=q)
            | Q(doctor__user__first_name__icontains=q)
            | Q(doctor__user__last_name__icontains=q)
        )
    return qs.order_by('-date', '-start_time', '-id')


def get_appointment(actor: Actor, appointment_id: int) -> Appointment:
    appointment = scoped_appointments(actor).filter(id=appointment_id).first()
    if appointment is None:
        raise RecordNotFound(f'appointment {appointment_id} not found')
    return appointment


def _check_transition_actor(actor: Actor, appointment: Appointment, new_status: str) -> None:
    if actor.is_staff:
        return
    if actor.is_doctor and actor.owns_doctor(appointment.doctor_id):
        return
    if actor.is_patient and appointment.patient_id == actor.user_id and new_status == Appointment.STATUS_CANCELLED:
        return
    raise ActorNotAllowed('not allowed to change this appointment')


def transition_status(actor: Actor, appointment_id: int, new_status: str) -> Appointment:
    with transaction.atomic():
        appointment = (
            scoped_appointments(actor).select_for_update(of=('self',)).filter(id=appointment_id).first()
        )
        if appointment is None:
            raise RecordNotFound(f'appointment {appointment_id} not found')
        _check_transition_actor(actor, appointment, new_status)
        previous = appointment.status
        if not can_transition(previous, new_status):
            raise InvalidStatusTransition(f'cannot move appointment from {previous} to {new_status}')
        appointment.status = new_status
        appointment.save(update_fields=['status', 'updated_at'])

    logger.info(
        'appointment_status_changed',
        appointment_id=appointment.id,
        from_status=previous,
        to_status=new_status,
        changed_by=actor.user_id,
    )
    if new_status == Appointment.STATUS_CANCELLED:
        broadcast_slots_changed(appointment.doctor_id, appointment.date, cause='cancellation')
    return appointment


def serialize_appointment(appointment: Appointment) -> dict:
    doctor_user = appointment.doctor.user
    return {
        'id': appointment.id,
        'confirmationNumber': appointment.confirmation_number,
        'patientId': appointment.patient_id,
        'patientName': appointment.patient.get_full_name() or appointment.patient.username,
        'doctorId': appointment.doctor_id,
        'doctorName': doctor_user.get_full_name() or doctor_user.username,
        'branchId': appointment.branch_id,
        'date': appointment.date.isoformat(),
        'startTime': format_hhmm(appointment.start_time),
        'endTime': format_hhmm(appointment.end_time),
        'durationMinutes': appointment.duration_minutes,
        'status': appointment.status,
        'reason': appointment.reason,
        'notes': appointment.notes,
        'createdAt': appointment.created_at.isoformat() if appointment.created_at else None,
    }


def export_csv(appointments: Iterable[Appointment]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(EXPORT_COLUMNS)
    for a in appointments:
        writer.writerow([
            a.confirmation_number,
            a.date.isoformat(),
            format_hhmm(a.start_time),
            format_hhmm(a.end_time),
            a.duration_minutes,
            a.status,
            a.patient.get_full_name() or a.patient.username,
            a.doctor.user.get_full_name() or a.doctor.user.username,
            a.doctor.specialization,
            a.branch.name,
            a.reason,
        ])
    return buf.getvalue()
