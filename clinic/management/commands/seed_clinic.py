"""
Management command to populate the database with demo clinic data.

Creates two branches, the admin and front desk accounts, two doctors
with Monday to Friday hours and a couple of patients.  Safe to run more
than once: existing rows are matched by their natural keys and left in
place.
"""
from datetime import time
from decimal import Decimal

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction

from clinic.models import Branch, DoctorProfile, PatientProfile, User, WeeklyScheduleEntry

BRANCHES = [
    {'code': 'SGC01', 'name': 'St. George Central', 'address': '77 Cathedral Square', 'city': 'London',
     'phone': '555-9000', 'email': 'central@stgeorgehospital.org'},
    {'code': 'SGE02', 'name': 'St. George East Clinic', 'address': '456 Riverside Way', 'city': 'London',
     'phone': '555-8000', 'email': 'east@stgeorgehospital.org'},
]

STAFF = [
    ('smitchell', 'Sarah', 'Mitchell', User.ROLE_ADMIN, '555-0101'),
    ('athompson', 'Alice', 'Thompson', User.ROLE_STAFF, '555-0104'),
    ('cnightingale', 'Clara', 'Nightingale', User.ROLE_STAFF, '555-0106'),
]

DOCTORS = [
    # username, first, last, branch, specialization, licence, fee, slot minutes
    ('jwilson', 'James', 'Wilson', 'SGC01', 'Cardiology', 'LIC-10022', Decimal('150.00'), 30),
    ('epatel', 'Esha', 'Patel', 'SGE02', 'Dermatology', 'LIC-20417', Decimal('120.00'), 20),
]

PATIENTS = [
    ('jdoe', 'John', 'Doe', 'PAT-001', 'Male', 'O+', '555-0102'),
    ('rsmith', 'Robert', 'Smith', 'PAT-002', 'Male', 'A-', '555-0105'),
]

WORKING_DAYS = (1, 2, 3, 4, 5)  # Monday..Friday, Sunday based


class Command(BaseCommand):
    help = 'Populate database with demo branches, doctors, schedules and patients'

    def add_arguments(self, parser):
        parser.add_argument('--password', default='123456', help='password for every seeded account')

    @transaction.atomic
    def handle(self, *args, **options):
        self.password = make_password(options['password'])

        branches = self.create_branches()
        self.stdout.write(f'branches: {len(branches)}')

        for username, first, last, role, phone in STAFF:
            self.ensure_user(username, first, last, role, phone)

        doctors = self.create_doctors(branches)
        self.stdout.write(f'doctors: {len(doctors)}')

        entries = self.create_weekly_schedules(doctors)
        self.stdout.write(f'weekly entries created: {entries}')

        patients = self.create_patients()
        self.stdout.write(f'patients: {len(patients)}')

        self.stdout.write(self.style.SUCCESS('Demo clinic data ready.'))

    def ensure_user(self, username, first, last, role, phone):
        user, _ = User.objects.get_or_create(
            username=username,
            defaults={
                'first_name': first,
                'last_name': last,
                'role': role,
                'phone': phone,
                'email': f'{username}@stgeorgehospital.org',
                'password': self.password,
            },
        )
        return user

    def create_branches(self):
        branches = {}
        for data in BRANCHES:
            fields = dict(data)
            code = fields.pop('code')
            branches[code], _ = Branch.objects.get_or_create(code=code, defaults=fields)
        return branches

    def create_doctors(self, branches):
        doctors = []
        for username, first, last, branch_code, specialty, licence, fee, minutes in DOCTORS:
            user = self.ensure_user(username, first, last, User.ROLE_DOCTOR, '')
            doctor, _ = DoctorProfile.objects.get_or_create(
                user=user,
                defaults={
                    'branch': branches[branch_code],
                    'specialization': specialty,
                    'license_number': licence,
                    'consultation_fee': fee,
                    'slot_duration_minutes': minutes,
                },
            )
            doctors.append(doctor)
        return doctors

    def create_weekly_schedules(self, doctors):
        created = 0
        for doctor in doctors:
            for day in WORKING_DAYS:
                if WeeklyScheduleEntry.objects.filter(doctor=doctor, day_of_week=day).exists():
                    continue
                WeeklyScheduleEntry.objects.create(
                    doctor=doctor, day_of_week=day, start_time=time(9, 0), end_time=time(17, 0), is_active=True,
                )
                created += 1
        return created

    def create_patients(self):
        patients = []
        for username, first, last, patient_no, gender, blood, phone in PATIENTS:
            user = self.ensure_user(username, first, last, User.ROLE_PATIENT, phone)
            PatientProfile.objects.get_or_create(
                user=user, defaults={'patient_no': patient_no, 'gender': gender, 'blood_group': blood},
            )
            patients.append(user)
        return patients
