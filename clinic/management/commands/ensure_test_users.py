# clinic/management/commands/ensure_test_users.py
from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password
from django.db import transaction

from clinic.models import Branch, DoctorProfile, PatientProfile, User

TEST_SET = [
    ("admin1", User.ROLE_ADMIN),
    ("staff1", User.ROLE_STAFF),
    ("doctor1", User.ROLE_DOCTOR),
    ("patient1", User.ROLE_PATIENT),
]


class Command(BaseCommand):
    help = "Ensure one test user per role exists with a known password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="123456")

    @transaction.atomic
    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        branch, _ = Branch.objects.get_or_create(code="TEST01", defaults={"name": "Test Branch"})
        for username, role in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"role": role, "password": password, "is_active": True},
            )
            if not created:
                # reset password, activation and role
                u.password = password
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            if role == User.ROLE_DOCTOR:
                DoctorProfile.objects.get_or_create(
                    user=u, defaults={"branch": branch, "specialization": "General Practice"}
                )
            elif role == User.ROLE_PATIENT:
                PatientProfile.objects.get_or_create(user=u, defaults={"patient_no": f"PAT-T{u.id:04d}"})
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
