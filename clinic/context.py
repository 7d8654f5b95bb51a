"""
Request-scoped actor passed into every scheduling service.

Services never read the current user from global state; the view layer
builds an :class:`Actor` from ``request.user`` and hands it down, which
keeps the services callable from management commands and tests with an
explicit identity.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .models import User


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: str
    doctor_id: Optional[int] = None
    patient_profile_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == User.ROLE_ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in (User.ROLE_STAFF, User.ROLE_ADMIN)

    @property
    def is_doctor(self) -> bool:
        return self.role == User.ROLE_DOCTOR

    @property
    def is_patient(self) -> bool:
        return self.role == User.ROLE_PATIENT

    def owns_doctor(self, doctor_id: int) -> bool:
        return self.doctor_id is not None and self.doctor_id == doctor_id


def actor_for_user(user: User) -> Actor:
    doctor = getattr(user, 'doctor_profile', None)
    patient = getattr(user, 'patient_profile', None)
    return Actor(
        user_id=user.id,
        role=user.role,
        doctor_id=doctor.id if doctor else None,
        patient_profile_id=patient.id if patient else None,
    )


def actor_from_request(request) -> Actor:
    return actor_for_user(request.user)
