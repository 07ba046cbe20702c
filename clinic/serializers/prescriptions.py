from rest_framework import serializers

from clinic.serializers.common import CleanCharField, clean_text

MEDICATION_FIELDS = ('name', 'dosage', 'frequency', 'duration')


class PrescriptionCreateSerializer(serializers.Serializer):
    patientName = serializers.CharField(max_length=255, allow_blank=True)
    patientPhone = CleanCharField(max_length=32)
    diagnosis = serializers.CharField(allow_blank=True)
    medications = serializers.ListField(child=serializers.DictField(), allow_empty=True, default=list)
    notes = CleanCharField()

    def validate_patientName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Patient name is required.')
        return v

    def validate_diagnosis(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Diagnosis is required.')
        return v

    def validate_medications(self, items):
        """Keep only complete rows; at least one is required."""
        valid = []
        for m in items:
            row = {k: clean_text(m.get(k)) for k in MEDICATION_FIELDS}
            if all(row.values()):
                row['instructions'] = clean_text(m.get('instructions')) or ''
                valid.append(row)
        if not valid:
            raise serializers.ValidationError(
                'At least one medication with name, dosage, frequency and duration is required.'
            )
        return valid
