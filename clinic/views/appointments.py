"""
Appointment endpoints.

Patients book for themselves and may cancel their own bookings; front
desk staff and administrators book on behalf of a patient and drive the
full status lifecycle; doctors see and progress the appointments made
with them.  Every failure is raised as a scheduling error and rendered
by the unified exception handler.
"""
from __future__ import annotations

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from clinic.context import actor_from_request
from clinic.exceptions import BookingValidationError
from clinic.permissions import IsClinicalRole
from clinic.serializers.appointments import AppointmentListQuerySerializer, BookingSerializer, StatusChangeSerializer
from clinic.services.appointments import (
    export_csv,
    get_appointment,
    list_appointments,
    serialize_appointment,
    transition_status,
)
from clinic.services.booking import commit_booking
from clinic.throttling import BookingRateThrottle


def _list(request):
    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = list_appointments(
        actor_from_request(request),
        status=vd.get('status'),
        q=vd.get('q'),
        day=vd.get('date'),
        doctor_id=vd.get('doctorId'),
    )
    page = vd.get('page', 1)
    page_size = vd.get('pageSize', 20)
    total = qs.count()
    start = (page-1)*page_size
    data = [serialize_appointment(a) for a in qs[start:start + page_size]]
    return Response({'ok': True, 'data': data, 'pagination': {'total': total, 'page': page, 'pageSize': page_size}})


def _book(request):
    actor = actor_from_request(request)
    s = BookingSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    patient_id = vd.get('patientId')
    if patient_id is None:
        if not actor.is_patient:
            raise BookingValidationError('patientId is required when booking on behalf of a patient')
        patient_id = actor.user_id

    appointment = commit_booking(
        actor,
        patient_id=patient_id,
        doctor_id=vd['doctorId'],
        branch_id=vd['branchId'],
        day=vd['date'],
        start_time=vd['startTime'],
        reason=vd.get('reason', ''),
        notes=vd.get('notes', ''),
    )
    return Response({'ok': True, 'data': serialize_appointment(appointment)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([BookingRateThrottle])
def appointments(request):
    """GET: actor-scoped list (``status``, ``q``, ``date``, ``doctorId``).  POST: book a slot."""
    if request.method == 'GET':
        return _list(request)
    return _book(request)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, appointment_id: int):
    appointment = get_appointment(actor_from_request(request), appointment_id)
    return Response({'ok': True, 'data': serialize_appointment(appointment)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def appointment_status(request, appointment_id: int):
    s = StatusChangeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = transition_status(actor_from_request(request), appointment_id, s.validated_data['status'])
    return Response({'ok': True, 'data': serialize_appointment(appointment)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalRole])
def appointment_export(request):
    """CSV of the caller's appointment list, same filters as the list endpoint."""
    actor = actor_from_request(request)
    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = list_appointments(
        actor,
        status=vd.get('status'),
        q=vd.get('q'),
        day=vd.get('date'),
        doctor_id=vd.get('doctorId'),
    )
    filename = f"appointments-{timezone.localdate().isoformat()}.csv"
    resp = HttpResponse(export_csv(qs), content_type='text/csv; charset=utf-8')
    resp['Content-Disposition'] = f'attachment; filename="{filename}"'
    return resp
