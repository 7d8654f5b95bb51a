"""
Schedule override workflow.

A doctor files a LEAVE or SHIFT_CHANGE request for one date; it sits as
PENDING and has no effect on slots until an administrator approves it.
Declined overrides are kept for the record and ignored by the resolver.
"""
from __future__ import annotations

from datetime import date, time
from typing import Optional

import bleach
import structlog
from django.db import transaction
from django.db.models import QuerySet

from clinic.context import Actor
from clinic.exceptions import ActorNotAllowed, InvalidStatusTransition, RecordNotFound, ScheduleValidationError
from clinic.models import ScheduleOverride, User
from clinic.services import store
from clinic.services.clock import format_hhmm
from clinic.services.updates import broadcast_slots_changed

logger = structlog.get_logger(__name__)

REVIEW_OUTCOMES = (ScheduleOverride.STATUS_APPROVED, ScheduleOverride.STATUS_DECLINED)


def request_override(
    actor: Actor,
    *,
    doctor_id: int,
    day: date,
    kind: str,
    start_time: Optional[time] = None,
    end_time: Optional[time] = None,
    reason: str = '',
) -> ScheduleOverride:
    if not (actor.is_admin or actor.owns_doctor(doctor_id)):
        raise ActorNotAllowed('doctors can only request overrides for themselves')
    doctor = store.get_doctor(doctor_id)

    if kind == ScheduleOverride.KIND_SHIFT_CHANGE:
        if start_time is None or end_time is None:
            raise ScheduleValidationError('a shift change needs a start and end time')
        if start_time >= end_time:
            raise ScheduleValidationError('shift change must end after it starts')
    elif kind == ScheduleOverride.KIND_LEAVE:
        start_time = end_time = None
    else:
        raise ScheduleValidationError(f'unknown override kind {kind!r}')

    override = ScheduleOverride.objects.create(
        doctor=doctor,
        date=day,
        kind=kind,
        start_time=start_time,
        end_time=end_time,
        reason=bleach.clean((reason or '').strip(), strip=True),
        status=ScheduleOverride.STATUS_PENDING,
        requested_by_id=actor.user_id,
    )
    logger.info(
        'override_requested',
        override_id=override.id,
        doctor_id=doctor.id,
        date=day.isoformat(),
        kind=kind,
        requested_by=actor.user_id,
    )
    return override


def review_override(actor: Actor, override_id: int, new_status: str) -> ScheduleOverride:
    """Approve or decline a pending override (administrators only)."""
    if not actor.is_admin:
        raise ActorNotAllowed('only administrators can review overrides')
    if new_status not in REVIEW_OUTCOMES:
        raise InvalidStatusTransition(f'cannot review an override as {new_status}')

    reviewer = User.objects.filter(id=actor.user_id).first()
    with transaction.atomic():
        # Row lock so two reviewers cannot both see PENDING.
        current = (
            ScheduleOverride.objects.select_for_update()
            .filter(id=override_id).values_list('status', flat=True).first()
        )
        if current is None:
            raise RecordNotFound(f'override {override_id} not found')
        if current != ScheduleOverride.STATUS_PENDING:
            raise InvalidStatusTransition(f'override already {current}')
        override = store.update_override_status(override_id, new_status, reviewer=reviewer)

    logger.info(
        'override_reviewed',
        override_id=override.id,
        doctor_id=override.doctor_id,
        date=override.date.isoformat(),
        status=new_status,
        reviewed_by=actor.user_id,
    )
    if new_status == ScheduleOverride.STATUS_APPROVED:
        broadcast_slots_changed(override.doctor_id, override.date, cause='override')
    return override


def list_overrides(actor: Actor, *, status: Optional[str] = None, doctor_id: Optional[int] = None) -> QuerySet:
    qs = ScheduleOverride.objects.select_related('doctor__user', 'reviewed_by')
    if actor.is_admin:
        if doctor_id:
            qs = qs.filter(doctor_id=doctor_id)
    elif actor.is_doctor:
        qs = qs.filter(doctor_id=actor.doctor_id)
    else:
        raise ActorNotAllowed('overrides are visible to doctors and administrators only')
    if status:
        qs = qs.filter(status=status)
    return qs.order_by('-date', '-id')


def serialize_override(o: ScheduleOverride) -> dict:
    doctor_user = o.doctor.user
    return {
        'id': o.id,
        'doctorId': o.doctor_id,
        'doctorName': doctor_user.get_full_name() or doctor_user.username,
        'date': o.date.isoformat(),
        'kind': o.kind,
        'startTime': format_hhmm(o.start_time) if o.start_time else None,
        'endTime': format_hhmm(o.end_time) if o.end_time else None,
        'reason': o.reason,
        'status': o.status,
        'reviewedBy': o.reviewed_by_id,
        'reviewedAt': o.reviewed_at.isoformat() if o.reviewed_at else None,
        'createdAt': o.created_at.isoformat() if o.created_at else None,
    }
