"""
Custom permission classes for role based access control.

Finer, record level checks (a patient's own booking, a doctor's own
schedule) live in the services, which receive an explicit actor.
"""
from rest_framework.permissions import BasePermission

from .models import User

CLINICAL_ROLES = {User.ROLE_DOCTOR, User.ROLE_STAFF, User.ROLE_ADMIN}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsAdminRole(BasePermission):
    """Allow access only to administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == User.ROLE_ADMIN


class IsClinicalRole(BasePermission):
    """Anyone working at the clinic: doctors, staff and administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in CLINICAL_ROLES
