"""
Scheduling error taxonomy and the unified API exception handler.

Services raise the domain errors below; views let them propagate and
:func:`api_exception_handler` renders every failure with the same
``{'ok': False, 'error': {...}}`` envelope the front-end expects.
"""
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response


class SchedulingError(Exception):
    """Base class for errors raised by the slot engine."""
    status_code = 400
    code = 'scheduling_error'

    def __init__(self, message: str = '', **context):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.context = context


class ConfigurationError(SchedulingError):
    """Doctor profile data is unusable (e.g. non-positive slot duration)."""
    status_code = 500
    code = 'configuration_error'


class BookingValidationError(SchedulingError):
    status_code = 400
    code = 'invalid_booking'


class ScheduleValidationError(SchedulingError):
    """A weekly entry or override request carries an unusable window."""
    status_code = 400
    code = 'invalid_schedule'


class SlotNoLongerAvailable(SchedulingError):
    """The chosen slot was taken or vanished between listing and commit."""
    status_code = 409
    code = 'slot_unavailable'


class ConflictOnInsert(SlotNoLongerAvailable):
    """The store rejected the insert because a live row holds the slot."""
    code = 'slot_conflict'


class InvalidStatusTransition(SchedulingError):
    status_code = 409
    code = 'invalid_transition'


class ActorNotAllowed(SchedulingError):
    status_code = 403
    code = 'forbidden'


class RecordNotFound(SchedulingError):
    status_code = 404
    code = 'not_found'


def api_exception_handler(exc, context):
    if isinstance(exc, SchedulingError):
        return Response({'ok': False, 'error': {'code': exc.code, 'message': exc.message}}, status=exc.status_code)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    return Response({'ok': False, 'error': {'code': 'api_error', 'message': detail}}, status=resp.status_code)
