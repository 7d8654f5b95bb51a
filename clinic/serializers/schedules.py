from rest_framework import serializers

from clinic.models import ScheduleOverride

HHMM = ['%H:%M']


class DoctorListQuerySerializer(serializers.Serializer):
    branchId = serializers.IntegerField(min_value=1, required=False)
    q = serializers.CharField(max_length=64, required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    pageSize = serializers.IntegerField(min_value=1, required=False)


class SlotQuerySerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    date = serializers.DateField(input_formats=['%Y-%m-%d'])


class WeeklyEntrySerializer(serializers.Serializer):
    """One weekday row; omitted fields keep their current (or default) value."""
    dayOfWeek = serializers.IntegerField(min_value=0, max_value=6)
    startTime = serializers.TimeField(input_formats=HHMM, required=False)
    endTime = serializers.TimeField(input_formats=HHMM, required=False)
    isActive = serializers.BooleanField(required=False)


class OverrideRequestSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1, required=False)
    date = serializers.DateField(input_formats=['%Y-%m-%d'])
    kind = serializers.ChoiceField(choices=[c[0] for c in ScheduleOverride.KIND_CHOICES])
    startTime = serializers.TimeField(input_formats=HHMM, required=False, allow_null=True)
    endTime = serializers.TimeField(input_formats=HHMM, required=False, allow_null=True)
    reason = serializers.CharField(max_length=1000, required=False, allow_blank=True)


class OverrideReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[ScheduleOverride.STATUS_APPROVED, ScheduleOverride.STATUS_DECLINED])


class OverrideListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in ScheduleOverride.STATUS_CHOICES], required=False)
    doctorId = serializers.IntegerField(min_value=1, required=False)
