from django.contrib.auth import get_user_model
from rest_framework import serializers

from clinic.serializers.common import clean_text

User = get_user_model()


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField()

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required.')
        return v

    def validate(self, attrs):
        account = (attrs.get('email') or attrs.get('username') or '').strip()
        if not account:
            raise serializers.ValidationError({'email': 'E-mail or username is required.'})
        attrs['account'] = account
        return attrs


class SignupSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    fullName = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=[User.ROLE_PATIENT, User.ROLE_DOCTOR], required=False,
                                   default=User.ROLE_PATIENT)

    def validate_email(self, v):
        v = (v or '').strip().lower()
        if User.objects.filter(email__iexact=v).exists() or User.objects.filter(username__iexact=v).exists():
            raise serializers.ValidationError('An account with this e-mail already exists.')
        return v

    def validate_fullName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Full name is required.')
        return v


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)
