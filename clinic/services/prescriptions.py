import logging
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.models import Prescription, Profile
from clinic.services.audit import log_action
from clinic.services.contact import PRESCRIPTION_SUPPORT_MESSAGE, prescription_message, support_link, whatsapp_link

User = get_user_model()
logger = logging.getLogger(__name__)

FREQUENCY_OPTIONS = [
    'Once daily',
    'Twice daily',
    'Three times daily',
    'Four times daily',
    'Every 4 hours',
    'Every 6 hours',
    'Every 8 hours',
    'Every 12 hours',
    'As needed',
    'Before meals',
    'After meals',
    'At bedtime',
]


def serialize_prescription(p: Prescription, now=None) -> dict:
    now = now or timezone.now()
    active = p.created_at >= now - timedelta(days=settings.PRESCRIPTION_ACTIVE_DAYS)
    profile = getattr(p.doctor, 'profile', None)
    return {
        'id': p.id,
        'patientId': p.patient_id,
        'patientName': p.patient_name,
        'patientPhone': p.patient_phone,
        'diagnosis': p.diagnosis,
        'medications': p.medications,
        'notes': p.notes,
        'createdAt': p.created_at.isoformat(),
        'doctor': {
            'id': p.doctor_id,
            'fullName': p.doctor.display_name(),
            'specialization': profile.specialization if profile else None,
        },
        'isActive': active,
        'label': 'ACTIVE' if active else 'OLDER',
        'supportLink': support_link(PRESCRIPTION_SUPPORT_MESSAGE),
    }


def visible_prescriptions(user):
    qs = Prescription.objects.select_related('doctor__profile')
    if user.role == 'doctor':
        return qs.filter(doctor=user)
    profile = getattr(user, 'profile', None)
    cond = Q(patient=user)
    if profile is not None and profile.full_name:
        cond |= Q(patient_name=profile.full_name)
    return qs.filter(cond)


def get_visible(user, prescription_id: int) -> Prescription:
    p = visible_prescriptions(user).filter(id=prescription_id).first()
    if not p:
        raise NotFound('Prescription not found')
    return p


def resolve_patient(full_name: str):
    profile = (
        Profile.objects.select_related('user')
        .filter(full_name=full_name, user__role=User.ROLE_PATIENT)
        .order_by('id')
        .first()
    )
    if not profile:
        raise NotFound('Patient not found')
    return profile.user


def create(doctor, *, patient_name: str, diagnosis: str, medications: list,
           patient_phone: Optional[str] = None, notes: Optional[str] = None) -> tuple[Prescription, Optional[str]]:
    """Store a prescription; also return a WhatsApp link for the patient when a phone is known."""
    patient = resolve_patient(patient_name)
    p = Prescription.objects.create(
        doctor=doctor,
        patient=patient,
        patient_name=patient_name,
        patient_phone=patient_phone,
        diagnosis=diagnosis,
        medications=medications,
        notes=notes,
    )
    logger.info('doctor %s wrote prescription %s', doctor.id, p.id)
    log_action(user=doctor, action='prescription_create', object_type='prescription', object_id=p.id,
               detail={'patientId': patient.id, 'medications': len(medications)})
    link = None
    if patient_phone:
        link = whatsapp_link(patient_phone, prescription_message(
            patient_name=patient_name,
            doctor_name=doctor.display_name(),
            diagnosis=diagnosis,
            medications=medications,
            notes=notes,
        ))
    return p, link
