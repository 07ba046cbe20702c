import logging
from typing import Optional

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import ValidationError as DRFValidation
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.models import Profile

User = get_user_model()
logger = logging.getLogger(__name__)

COMMON_FIELDS = ('full_name', 'phone', 'avatar_url', 'bio', 'date_of_birth', 'gender', 'emergency_contact')
DOCTOR_FIELDS = ('specialization', 'qualifications', 'experience_years', 'consultation_fee')


def ensure_profile(user) -> Profile:
    profile, _ = Profile.objects.get_or_create(
        user=user, defaults={'full_name': user.get_full_name() or user.username}
    )
    return profile


def register_user(*, email: str, password: str, full_name: str, role: str = User.ROLE_PATIENT):
    try:
        validate_password(password, user=User(username=email, email=email, first_name=full_name))
    except ValidationError as e:
        raise DRFValidation({'password': e.messages})

    with transaction.atomic():
        user = User.objects.create_user(username=email, email=email, password=password, role=role)
        profile = Profile.objects.create(user=user, full_name=full_name)
    logger.info('registered %s account %s', role, user.id)
    return user, profile


def authenticate_account(request, account: str, password: str):
    """Authenticate by username, falling back to an e-mail lookup."""
    user = authenticate(request, username=account, password=password)
    if user is None and '@' in account:
        match = User.objects.filter(email__iexact=account).only('username').first()
        if match and match.username != account:
            user = authenticate(request, username=match.username, password=password)
    return user


def issue_tokens(user) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
    }


def revoke_tokens(user, refresh: Optional[str] = None) -> int:
    """Blacklist one refresh token (or all of the user's) and drop the DRF token."""
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            raise DRFValidation({'refresh': str(e)})
    else:
        for outstanding in OutstandingToken.objects.filter(user=user):
            _, created = BlacklistedToken.objects.get_or_create(token=outstanding)
            count += int(created)
    Token.objects.filter(user=user).delete()
    return count


def serialize_profile(user, profile: Optional[Profile] = None) -> dict:
    profile = profile or ensure_profile(user)
    data = {
        'id': profile.id,
        'userId': user.id,
        'email': user.email,
        'role': user.role,
        'fullName': profile.full_name,
        'phone': profile.phone,
        'avatarUrl': profile.avatar_url,
        'bio': profile.bio,
        'dateOfBirth': profile.date_of_birth.isoformat() if profile.date_of_birth else None,
        'gender': profile.gender,
        'emergencyContact': profile.emergency_contact,
    }
    if user.role == User.ROLE_DOCTOR:
        data.update({
            'specialization': profile.specialization,
            'qualifications': profile.qualifications,
            'experienceYears': profile.experience_years,
            'consultationFee': float(profile.consultation_fee) if profile.consultation_fee is not None else None,
        })
    return data


def update_profile(user, changes: dict) -> Profile:
    """Apply validated changes; professional fields only stick for doctors."""
    profile = ensure_profile(user)
    allowed = COMMON_FIELDS + (DOCTOR_FIELDS if user.role == User.ROLE_DOCTOR else ())
    updated = []
    for field in allowed:
        if field in changes:
            setattr(profile, field, changes[field])
            updated.append(field)
    if updated:
        profile.save(update_fields=updated + ['updated_at'])
    return profile
