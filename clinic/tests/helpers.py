"""
Small builders shared by the clinic tests.
"""
from __future__ import annotations

from datetime import date, time, timedelta

from django.utils import timezone

from clinic.models import Branch, DoctorProfile, PatientProfile, User, WeeklyScheduleEntry


def next_weekday(weekday: int, after: date | None = None) -> date:
    """First date strictly after ``after`` (default today) with Python ``weekday``, Monday=0."""
    after = after or timezone.localdate()
    days = (weekday - after.weekday()) % 7 or 7
    return after + timedelta(days=days)


def make_branch(code: str = 'SGC01', name: str = 'St. George Central') -> Branch:
    return Branch.objects.create(code=code, name=name, city='London')


def make_doctor(username: str, branch: Branch, *, slot: int = 30, password: str = 'P@ssw0rd1') -> DoctorProfile:
    user = User.objects.create_user(
        username=username, password=password, role=User.ROLE_DOCTOR, first_name='James', last_name='Wilson',
    )
    return DoctorProfile.objects.create(
        user=user, branch=branch, specialization='Cardiology', slot_duration_minutes=slot,
    )


def make_patient(username: str, patient_no: str, *, password: str = 'P@ssw0rd1') -> User:
    user = User.objects.create_user(
        username=username, password=password, role=User.ROLE_PATIENT, first_name='John', last_name='Doe',
    )
    PatientProfile.objects.create(user=user, patient_no=patient_no)
    return user


def make_user(username: str, role: str, *, password: str = 'P@ssw0rd1') -> User:
    return User.objects.create_user(username=username, password=password, role=role)


def add_weekly(doctor: DoctorProfile, day_of_week: int, start: str = '09:00', end: str = '17:00',
               *, is_active: bool = True) -> WeeklyScheduleEntry:
    sh, sm = (int(x) for x in start.split(':'))
    eh, em = (int(x) for x in end.split(':'))
    return WeeklyScheduleEntry.objects.create(
        doctor=doctor, day_of_week=day_of_week, start_time=time(sh, sm), end_time=time(eh, em), is_active=is_active,
    )
