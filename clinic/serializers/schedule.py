from django.utils import timezone
from rest_framework import serializers

from clinic.models import DoctorSchedule
from clinic.serializers.common import CleanCharField


class SlotSerializer(serializers.Serializer):
    """Slot fields as the calendar sends them.

    ``partial=True`` is used for edits; the time window is then checked
    against the stored slot by the schedule service.
    """
    date = serializers.DateField()
    startTime = serializers.TimeField(source='start_time')
    endTime = serializers.TimeField(source='end_time')
    status = serializers.ChoiceField(
        choices=[c for c, _ in DoctorSchedule.STATUS_CHOICES], default=DoctorSchedule.STATUS_AVAILABLE
    )
    maxAppointments = serializers.IntegerField(source='max_appointments', min_value=1, default=1)
    notes = CleanCharField()

    def validate_date(self, v):
        if v < timezone.localdate():
            raise serializers.ValidationError('Date cannot be in the past.')
        return v

    def validate(self, attrs):
        start, end = attrs.get('start_time'), attrs.get('end_time')
        if start is not None and end is not None and start >= end:
            raise serializers.ValidationError({'endTime': 'End time must be after start time.'})
        return attrs


class ScheduleQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
