from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.serializers.schedules import SlotQuerySerializer
from clinic.services.slots import available_slots
from clinic.services.updates import cached_slot_payload


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def slot_list(request):
    """Bookable slots for ``doctorId`` on ``date``.

    An unavailable day is a normal answer: ``available`` is false and
    ``reason`` says why (leave, off_duty or degenerate).
    """
    s = SlotQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    doctor_id = s.validated_data['doctorId']
    day = s.validated_data['date']
    payload = cached_slot_payload(doctor_id, day, lambda: available_slots(doctor_id, day).as_dict())
    return Response({'ok': True, 'data': payload})
