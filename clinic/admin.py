"""
Django admin registrations for the clinic models.
"""

from django.contrib import admin

from .models import (
    User,
    Branch,
    PatientProfile,
    DoctorProfile,
    WeeklyScheduleEntry,
    ScheduleOverride,
    Appointment,
)
from .services.updates import broadcast_slots_changed


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'first_name', 'last_name', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name', 'phone')


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'code', 'city', 'is_active')
    search_fields = ('name', 'code', 'city')


@admin.register(PatientProfile)
class PatientProfileAdmin(admin.ModelAdmin):
    list_display = ('patient_no', 'user', 'gender', 'blood_group')
    search_fields = ('patient_no', 'user__username', 'user__first_name', 'user__last_name')


class SlotCacheAdminMixin:
    """Drop cached slot lists of the affected doctor on admin writes.

    Status changes still go through the API so the state machine holds;
    only schedule data is editable here.
    """

    doctor_attr = 'doctor_id'

    def _slots_changed(self, obj):
        broadcast_slots_changed(getattr(obj, self.doctor_attr), getattr(obj, 'date', None), cause='admin')

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        self._slots_changed(obj)

    def delete_model(self, request, obj):
        super().delete_model(request, obj)
        self._slots_changed(obj)


class WeeklyScheduleInline(admin.TabularInline):
    model = WeeklyScheduleEntry
    extra = 0


@admin.register(DoctorProfile)
class DoctorProfileAdmin(SlotCacheAdminMixin, admin.ModelAdmin):
    list_display = ('id', 'user', 'branch', 'specialization', 'slot_duration_minutes')
    list_filter = ('branch', 'specialization')
    search_fields = ('user__username', 'user__first_name', 'user__last_name', 'specialization')
    inlines = [WeeklyScheduleInline]
    doctor_attr = 'id'

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        self._slots_changed(form.instance)


@admin.register(WeeklyScheduleEntry)
class WeeklyScheduleEntryAdmin(SlotCacheAdminMixin, admin.ModelAdmin):
    list_display = ('doctor', 'day_of_week', 'start_time', 'end_time', 'is_active')
    list_filter = ('day_of_week', 'is_active')


@admin.register(ScheduleOverride)
class ScheduleOverrideAdmin(SlotCacheAdminMixin, admin.ModelAdmin):
    list_display = ('doctor', 'date', 'kind', 'status', 'start_time', 'end_time', 'reviewed_by')
    list_filter = ('kind', 'status')
    search_fields = ('doctor__user__username', 'reason')
    date_hierarchy = 'date'
    readonly_fields = ('status', 'reviewed_by', 'reviewed_at')


@admin.register(Appointment)
class AppointmentAdmin(SlotCacheAdminMixin, admin.ModelAdmin):
    list_display = ('confirmation_number', 'date', 'start_time', 'doctor', 'patient', 'status')
    list_filter = ('status', 'branch')
    search_fields = ('confirmation_number', 'patient__username', 'doctor__user__username')
    date_hierarchy = 'date'
    readonly_fields = ('status',)
