from io import StringIO

import pytest
from django.core.cache import cache
from django.core.management import call_command

from clinic.models import Branch, DoctorProfile, PatientProfile, User, WeeklyScheduleEntry

pytestmark = pytest.mark.django_db


def test_seed_clinic_is_idempotent():
    call_command('seed_clinic', stdout=StringIO())
    call_command('seed_clinic', stdout=StringIO())
    assert Branch.objects.count() == 2
    assert DoctorProfile.objects.count() == 2
    assert WeeklyScheduleEntry.objects.count() == 10
    assert PatientProfile.objects.filter(patient_no='PAT-001').exists()
    assert User.objects.get(username='smitchell').role == User.ROLE_ADMIN


def test_ensure_test_users_resets_password():
    call_command('ensure_test_users', stdout=StringIO())
    u = User.objects.get(username='doctor1')
    u.set_password('changed')
    u.save()
    call_command('ensure_test_users', stdout=StringIO())
    u.refresh_from_db()
    assert u.check_password('123456')
    assert hasattr(u, 'doctor_profile')
    assert User.objects.get(username='patient1').patient_profile.patient_no.startswith('PAT-T')


def test_refresh_slots_warms_every_doctor_day():
    cache.clear()
    call_command('seed_clinic', stdout=StringIO())
    out = StringIO()
    call_command('refresh_slots', '--days', '3', stdout=out)
    assert 'Warmed 6 slot lists' in out.getvalue()
