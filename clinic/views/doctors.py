"""
Doctor directory and weekly schedule endpoints.
"""
from __future__ import annotations

from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.context import actor_from_request
from clinic.serializers.schedules import DoctorListQuerySerializer, WeeklyEntrySerializer
from clinic.services.doctors import list_doctors
from clinic.services.schedules import doctor_schedule, serialize_weekly_entry, upsert_weekly_entry

DIRECTORY_CACHE_TTL = 300


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def doctor_list(request):
    """Return the doctor directory.
    Query params:
      - branchId: only doctors practising at this branch
      - q: optional search (name/username/specialization contains)
      - page, pageSize: pagination (optional)
    """
    s = DoctorListQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    branch_id = s.validated_data.get('branchId')
    q = (s.validated_data.get('q') or '').strip() or None
    page = s.validated_data.get('page')
    page_size = s.validated_data.get('pageSize')

    cache_key = f"doctors:b={branch_id or ''}:q={q or ''}:p={page}:ps={page_size}"
    cached = cache.get(cache_key)
    if cached:
        return Response(cached)

    doctors, total = list_doctors(branch_id=branch_id, q=q, page=page, page_size=page_size)
    payload = {'ok': True, 'data': doctors, 'pagination': {'total': total, 'page': page or 1, 'pageSize': page_size or total}}
    cache.set(cache_key, payload, DIRECTORY_CACHE_TTL)
    return Response(payload)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def doctor_schedule_view(request, doctor_id: int):
    """GET: weekly entries and overrides.  POST: upsert one weekday entry."""
    if request.method == 'GET':
        return Response({'ok': True, 'data': doctor_schedule(doctor_id)})

    s = WeeklyEntrySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    entry = upsert_weekly_entry(
        actor_from_request(request),
        doctor_id,
        vd['dayOfWeek'],
        start_time=vd.get('startTime'),
        end_time=vd.get('endTime'),
        is_active=vd.get('isActive'),
    )
    return Response({'ok': True, 'data': serialize_weekly_entry(entry)})
