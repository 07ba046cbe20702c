from collections.abc import Mapping

from rest_framework import serializers

from clinic.serializers.common import clean_text as _clean


class ProfileUpdateSerializer(serializers.Serializer):
    """Accepts snake_case or camelCase keys; empty strings become null."""
    full_name = serializers.CharField(max_length=255, required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    avatar_url = serializers.URLField(max_length=500, required=False, allow_blank=True, allow_null=True)
    bio = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    gender = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    emergency_contact = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    specialization = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    qualifications = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    experience_years = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    consultation_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0,
                                                required=False, allow_null=True)

    CAMEL = {
        'fullName': 'full_name',
        'avatarUrl': 'avatar_url',
        'dateOfBirth': 'date_of_birth',
        'emergencyContact': 'emergency_contact',
        'experienceYears': 'experience_years',
        'consultationFee': 'consultation_fee',
    }
    BLANK_AS_NULL = ('date_of_birth', 'experience_years', 'consultation_fee')

    def to_internal_value(self, data):
        if not isinstance(data, Mapping):
            return super().to_internal_value(data)
        data = dict(data.items())
        for camel, snake in self.CAMEL.items():
            if camel in data and snake not in data:
                data[snake] = data.pop(camel)
        for key in self.BLANK_AS_NULL:
            if data.get(key) == '':
                data[key] = None
        return super().to_internal_value(data)

    def validate_full_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Full name is required.')
        return v

    def validate(self, attrs):
        for key in ('phone', 'bio', 'gender', 'emergency_contact', 'specialization', 'qualifications'):
            if key in attrs:
                attrs[key] = _clean(attrs[key])
        # URLField already validated it
        if 'avatar_url' in attrs:
            attrs['avatar_url'] = attrs['avatar_url'] or None
        return attrs
