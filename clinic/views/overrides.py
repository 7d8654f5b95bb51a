from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from clinic.context import actor_from_request
from clinic.exceptions import ScheduleValidationError
from clinic.permissions import IsAdminRole
from clinic.serializers.schedules import OverrideListQuerySerializer, OverrideRequestSerializer, OverrideReviewSerializer
from clinic.services.overrides import list_overrides, request_override, review_override, serialize_override


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def overrides(request):
    """GET: overrides (own for doctors, all for admins).  POST: file a PENDING override."""
    actor = actor_from_request(request)
    if request.method == 'GET':
        q = OverrideListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = list_overrides(actor, status=q.validated_data.get('status'), doctor_id=q.validated_data.get('doctorId'))
        return Response({'ok': True, 'data': [serialize_override(o) for o in qs]})

    s = OverrideRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    doctor_id = vd.get('doctorId') or actor.doctor_id
    if doctor_id is None:
        raise ScheduleValidationError('doctorId is required')
    override = request_override(
        actor,
        doctor_id=doctor_id,
        day=vd['date'],
        kind=vd['kind'],
        start_time=vd.get('startTime'),
        end_time=vd.get('endTime'),
        reason=vd.get('reason', ''),
    )
    return Response({'ok': True, 'data': serialize_override(override)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def override_review(request, override_id: int):
    s = OverrideReviewSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    override = review_override(actor_from_request(request), override_id, s.validated_data['status'])
    return Response({'ok': True, 'data': serialize_override(override)})
