from rest_framework import serializers

from clinic.models import Appointment

HHMM = ['%H:%M']


class BookingSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1, required=False)
    doctorId = serializers.IntegerField(min_value=1)
    branchId = serializers.IntegerField(min_value=1)
    date = serializers.DateField(input_formats=['%Y-%m-%d'])
    startTime = serializers.TimeField(input_formats=HHMM)
    reason = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Appointment.STATUS_CHOICES])


class AppointmentListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Appointment.STATUS_CHOICES], required=False)
    q = serializers.CharField(max_length=64, required=False)
    date = serializers.DateField(input_formats=['%Y-%m-%d'], required=False)
    doctorId = serializers.IntegerField(min_value=1, required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    pageSize = serializers.IntegerField(min_value=1, max_value=200, required=False)
