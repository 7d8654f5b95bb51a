"""
Rate limits for the two endpoints worth protecting.

Function based views cannot carry a ``throttle_scope`` attribute through
``@api_view``, so each scope gets its own throttle class; rates live in
``REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']``.
"""
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


class BookingRateThrottle(UserRateThrottle):
    """Throttle booking commits only; listing on the same path is free."""
    scope = 'booking'

    def allow_request(self, request, view):
        if request.method != 'POST':
            return True
        return super().allow_request(request, view)
