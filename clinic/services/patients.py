from datetime import date, timedelta
from typing import Optional

from django.contrib.auth import get_user_model
from django.db.models import Count, Max, Q
from django.utils import timezone

from clinic.models import Appointment
from clinic.services.contact import patient_followup_message, tel_link, whatsapp_link

User = get_user_model()

ACTIVE_WINDOW_DAYS = 30


def age_from(dob: Optional[date], today: Optional[date] = None) -> Optional[int]:
    if not dob:
        return None
    today = today or timezone.localdate()
    return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))


def doctor_patients(doctor, *, q: Optional[str] = None, now=None) -> dict:
    """Patients with at least one appointment with ``doctor``, plus visit counters."""
    now = now or timezone.now()
    mine = Q(patient_appointments__doctor=doctor)
    qs = (
        User.objects.filter(
            role=User.ROLE_PATIENT,
            id__in=Appointment.objects.filter(doctor=doctor).values('patient_id'),
        )
        .select_related('profile')
        .annotate(
            total_appointments=Count('patient_appointments', filter=mine, distinct=True),
            upcoming_appointments=Count(
                'patient_appointments',
                filter=mine & Q(patient_appointments__status=Appointment.STATUS_SCHEDULED,
                                patient_appointments__appointment_date__gte=now),
                distinct=True,
            ),
            last_appointment=Max(
                'patient_appointments__appointment_date',
                filter=mine & Q(patient_appointments__appointment_date__lt=now),
            ),
        )
    )
    if q:
        qs = qs.filter(
            Q(profile__full_name__icontains=q) | Q(email__icontains=q) | Q(profile__phone__contains=q)
        )

    doctor_name = doctor.display_name()
    cutoff = now - timedelta(days=ACTIVE_WINDOW_DAYS)
    data = []
    summary = {'totalPatients': 0, 'activePatients': 0, 'upcomingAppointments': 0, 'totalVisits': 0}
    for u in qs.order_by('profile__full_name', 'id'):
        profile = getattr(u, 'profile', None)
        name = u.display_name()
        phone = profile.phone if profile else None
        dob = profile.date_of_birth if profile else None
        data.append({
            'id': u.id,
            'fullName': name,
            'email': u.email,
            'phone': phone,
            'gender': profile.gender if profile else None,
            'dateOfBirth': dob.isoformat() if dob else None,
            'age': age_from(dob),
            'emergencyContact': profile.emergency_contact if profile else None,
            'upcomingAppointments': u.upcoming_appointments,
            'totalAppointments': u.total_appointments,
            'lastAppointment': u.last_appointment.isoformat() if u.last_appointment else None,
            'whatsappLink': whatsapp_link(phone, patient_followup_message(name, doctor_name)),
            'callLink': tel_link(phone),
        })
        summary['totalPatients'] += 1
        summary['upcomingAppointments'] += u.upcoming_appointments
        summary['totalVisits'] += u.total_appointments
        if u.upcoming_appointments > 0 or (u.last_appointment and u.last_appointment >= cutoff):
            summary['activePatients'] += 1
    return {'data': data, 'summary': summary}
