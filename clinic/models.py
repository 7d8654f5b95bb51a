"""
Database models for the clinic scheduling backend.

These models capture the records the slot engine reads and writes:
doctors with their recurring weekly hours, one-off schedule overrides
and the appointments booked against them.  Users, branches and patient
profiles are kept deliberately small; they exist so appointments have
something to point at and so requests can be scoped to an actor.

No record is edited in place by the booking core.  Appointments move
only through status transitions and are never deleted.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q


class User(AbstractUser):
    """Custom user model carrying the actor role.

    Roles mirror the front-end roles: 'PATIENT', 'DOCTOR', 'STAFF' and
    'ADMIN'.  A doctor or patient additionally owns a profile row which
    holds the domain specific fields.
    """
    ROLE_PATIENT = 'PATIENT'
    ROLE_DOCTOR = 'DOCTOR'
    ROLE_STAFF = 'STAFF'
    ROLE_ADMIN = 'ADMIN'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_STAFF, 'Staff'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT)
    phone = models.CharField(max_length=32, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Branch(models.Model):
    """A hospital branch; doctors practise at exactly one branch."""
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=20, unique=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class PatientProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient_profile')
    patient_no = models.CharField(max_length=20, unique=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, blank=True)
    blood_group = models.CharField(max_length=5, blank=True)

    def __str__(self) -> str:
        return f"{self.patient_no} ({self.user.username})"


class DoctorProfile(models.Model):
    """Bookable doctor.

    ``slot_duration_minutes`` is the single source of truth for how a
    working interval is partitioned into slots for this doctor.
    """
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name='doctors')
    specialization = models.CharField(max_length=255)
    license_number = models.CharField(max_length=50, blank=True)
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    slot_duration_minutes = models.PositiveIntegerField(default=30)

    def __str__(self) -> str:
        return f"Dr. {self.user.get_full_name() or self.user.username} - {self.specialization}"


class WeeklyScheduleEntry(models.Model):
    """Recurring working window for one weekday.

    ``day_of_week`` is Sunday based (0=Sunday .. 6=Saturday).  At most
    one active entry per (doctor, weekday) is expected; the resolver
    picks the most recently inserted one if imported data breaks that.
    """
    DAY_CHOICES = [
        (0, 'Sunday'),
        (1, 'Monday'),
        (2, 'Tuesday'),
        (3, 'Wednesday'),
        (4, 'Thursday'),
        (5, 'Friday'),
        (6, 'Saturday'),
    ]
    doctor = models.ForeignKey(DoctorProfile, on_delete=models.CASCADE, related_name='weekly_schedule')
    day_of_week = models.PositiveSmallIntegerField(choices=DAY_CHOICES)
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'day_of_week'], name='weekly_doctor_day_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.doctor_id}:{self.get_day_of_week_display()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class ScheduleOverride(models.Model):
    """A one-day exception to the weekly schedule.

    Only APPROVED overrides affect slot computation.  LEAVE carries no
    window; SHIFT_CHANGE replaces the weekly window for its date.
    """
    KIND_LEAVE = 'LEAVE'
    KIND_SHIFT_CHANGE = 'SHIFT_CHANGE'
    KIND_CHOICES = ((KIND_LEAVE, 'Leave'), (KIND_SHIFT_CHANGE, 'Shift change'))

    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_DECLINED = 'DECLINED'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_DECLINED, 'Declined'),
    )

    doctor = models.ForeignKey(DoctorProfile, on_delete=models.CASCADE, related_name='overrides')
    date = models.DateField()
    kind = models.CharField(max_length=16, choices=KIND_CHOICES)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    reason = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    requested_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='override_requests'
    )
    reviewed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='override_reviews'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'date'], name='override_doctor_date_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.kind} d={self.doctor_id} {self.date:%Y-%m-%d} ({self.status})"


class Appointment(models.Model):
    STATUS_PENDING = 'PENDING'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    )

    confirmation_number = models.CharField(max_length=20, db_index=True)
    patient = models.ForeignKey(User, on_delete=models.PROTECT, related_name='appointments')
    doctor = models.ForeignKey(DoctorProfile, on_delete=models.PROTECT, related_name='appointments')
    branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name='appointments')
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    duration_minutes = models.PositiveIntegerField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    reason = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'date', 'status'], name='appt_doctor_date_status_idx'),
            models.Index(fields=['patient', 'date'], name='appt_patient_date_idx'),
        ]
        constraints = [
            # Store-side guard against double booking: one live appointment
            # per doctor, date and start time.
            models.UniqueConstraint(
                fields=['doctor', 'date', 'start_time'],
                condition=~Q(status='CANCELLED'),
                name='uniq_live_appointment_slot',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.confirmation_number} d={self.doctor_id} {self.date:%Y-%m-%d} {self.start_time:%H:%M}"
