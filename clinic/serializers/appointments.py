from rest_framework import serializers

from clinic.models import Appointment
from clinic.serializers.common import CleanCharField


class BookSerializer(serializers.Serializer):
    slotId = serializers.IntegerField(min_value=1)
    notes = CleanCharField()


class RescheduleSerializer(serializers.Serializer):
    slotId = serializers.IntegerField(min_value=1)


class CancelSerializer(serializers.Serializer):
    reason = CleanCharField(max_length=255)


class StatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Appointment.STATUS_CHOICES])
    doctorNotes = CleanCharField()


class AppointmentQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Appointment.STATUS_CHOICES], required=False)
