from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.models import DoctorSchedule, Profile
from clinic.services.contact import doctor_support_message, support_link, tel_link

User = get_user_model()


def doctors_cache_key(q: Optional[str], page: Optional[int], page_size: Optional[int]) -> str:
    return f"doctors:q={q or ''}:p={page}:ps={page_size}"


def serialize_doctor(profile: Profile) -> dict:
    fee = profile.consultation_fee
    return {
        'id': profile.user_id,
        'profileId': profile.id,
        'fullName': profile.full_name,
        'specialization': profile.specialization,
        'qualifications': profile.qualifications,
        'experienceYears': profile.experience_years,
        'consultationFee': float(fee) if fee is not None else None,
        'bio': profile.bio,
        'avatarUrl': profile.avatar_url,
        'phone': profile.phone,
        'supportLink': support_link(doctor_support_message(profile.full_name, profile.specialization)),
        'callLink': tel_link(profile.phone),
    }


def list_doctors(*, q: Optional[str] = None, page: Optional[int] = None,
                 page_size: Optional[int] = None) -> tuple[list[dict], int]:
    qs = Profile.objects.filter(user__role=User.ROLE_DOCTOR).select_related('user')
    if q:
        qs = qs.filter(
            Q(full_name__icontains=q) | Q(specialization__icontains=q) | Q(bio__icontains=q)
        )
    qs = qs.order_by('full_name', 'id')

    total = qs.count()
    if page and page_size:
        start = (page - 1) * page_size
        qs = qs[start:start + page_size]
    return [serialize_doctor(p) for p in qs], total


def get_doctor_profile(doctor_id: int) -> Profile:
    profile = (
        Profile.objects.select_related('user')
        .filter(user_id=doctor_id, user__role=User.ROLE_DOCTOR)
        .first()
    )
    if not profile:
        raise NotFound('Doctor not found')
    return profile


def serialize_slot(slot: DoctorSchedule) -> dict:
    return {
        'id': slot.id,
        'doctorId': slot.doctor_id,
        'date': slot.date.isoformat(),
        'startTime': slot.start_time.strftime('%H:%M'),
        'endTime': slot.end_time.strftime('%H:%M'),
        'status': slot.status,
        'maxAppointments': slot.max_appointments,
        'notes': slot.notes,
    }


def available_slots(doctor_id: int) -> list[dict]:
    """Bookable slots from today on, soonest first."""
    get_doctor_profile(doctor_id)
    qs = (
        DoctorSchedule.objects
        .filter(doctor_id=doctor_id, status=DoctorSchedule.STATUS_AVAILABLE, date__gte=timezone.localdate())
        .order_by('date', 'start_time')[:settings.AVAILABLE_SLOTS_LIMIT]
    )
    return [serialize_slot(s) for s in qs]
