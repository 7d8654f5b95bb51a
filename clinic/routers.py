"""
URL mappings for the clinic scheduling API.

Trailing slashes are deliberately omitted to match the front-end's
endpoint table.
"""
from django.urls import path, include

from .auth_views import login_view, jwt_refresh_view, jwt_logout_view
from .views import health
from .views.appointments import appointments, appointment_detail, appointment_status, appointment_export
from .views.doctors import doctor_list, doctor_schedule_view
from .views.overrides import overrides, override_review
from .views.slots import slot_list


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout'),
    # Doctors and schedules
    path('api/doctors', doctor_list, name='doctor_list'),
    path('api/doctors/<int:doctor_id>/schedule', doctor_schedule_view, name='doctor_schedule'),
    path('api/overrides', overrides, name='overrides'),
    path('api/overrides/<int:override_id>/review', override_review, name='override_review'),
    # Slots and appointments
    path('api/slots', slot_list, name='slot_list'),
    path('api/appointments', appointments, name='appointments'),
    path('api/appointments/export', appointment_export, name='appointment_export'),
    path('api/appointments/<int:appointment_id>', appointment_detail, name='appointment_detail'),
    path('api/appointments/<int:appointment_id>/status', appointment_status, name='appointment_status'),
]
