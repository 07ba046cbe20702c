"""
Appointment booking and lifecycle.

Booking, rescheduling and cancellation run inside a transaction with
the affected slot rows locked, so a single-capacity slot can never be
handed to two patients.  Status changes follow ``_can_transition`` and
are recorded as :class:`AppointmentTransition` rows.
"""
import logging
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from clinic.exceptions import Conflict
from clinic.models import Appointment, AppointmentTransition, DoctorSchedule
from clinic.realtime.broadcast import broadcast_schedule_change
from clinic.services.audit import log_action
from clinic.services.contact import appointment_message, whatsapp_link

logger = logging.getLogger(__name__)


def _can_transition(current: str, new: str) -> bool:
    """Return True if an appointment may move from ``current`` to ``new``."""
    transitions = {
        Appointment.STATUS_SCHEDULED: [
            Appointment.STATUS_COMPLETED,
            Appointment.STATUS_CANCELLED,
            Appointment.STATUS_NO_SHOW,
        ],
        Appointment.STATUS_COMPLETED: [],
        Appointment.STATUS_CANCELLED: [],
        Appointment.STATUS_NO_SHOW: [],
    }
    return new in transitions.get(current, [])


def _slot_start(slot: DoctorSchedule) -> datetime:
    naive = datetime.combine(slot.date, slot.start_time)
    return timezone.make_aware(naive) if settings.USE_TZ else naive


def _lock_bookable_slot(slot_id: int) -> DoctorSchedule:
    """Lock a slot row and check that it can take one more appointment."""
    slot = DoctorSchedule.objects.select_for_update().filter(id=slot_id).first()
    if not slot:
        raise NotFound('Slot not found')
    if slot.status != DoctorSchedule.STATUS_AVAILABLE:
        raise Conflict('This slot is no longer available.')
    if slot.date < timezone.localdate():
        raise Conflict('This slot is in the past.')
    taken = slot.appointments.filter(status=Appointment.STATUS_SCHEDULED).count()
    if taken >= slot.max_appointments:
        raise Conflict('This slot is fully booked.')
    return slot


def _fill(slot: DoctorSchedule) -> None:
    taken = slot.appointments.filter(status=Appointment.STATUS_SCHEDULED).count()
    if taken >= slot.max_appointments and slot.status != DoctorSchedule.STATUS_BOOKED:
        slot.status = DoctorSchedule.STATUS_BOOKED
        slot.save(update_fields=['status', 'updated_at'])


def _release(slot_id: Optional[int]) -> None:
    if not slot_id:
        return
    slot = DoctorSchedule.objects.select_for_update().filter(id=slot_id).first()
    if slot and slot.status == DoctorSchedule.STATUS_BOOKED:
        slot.status = DoctorSchedule.STATUS_AVAILABLE
        slot.save(update_fields=['status', 'updated_at'])


def _record(appt: Appointment, old: Optional[str], operator, reason: str = '') -> None:
    AppointmentTransition.objects.create(
        appointment=appt, from_status=old, to_status=appt.status, operator=operator, reason=reason,
    )


# ---------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------
def visible_appointments(user):
    qs = Appointment.objects.select_related('doctor__profile', 'patient__profile', 'slot')
    if user.role == 'doctor':
        return qs.filter(doctor=user)
    return qs.filter(patient=user)


def get_for_party(user, appointment_id: int) -> Appointment:
    appt = visible_appointments(user).filter(id=appointment_id).first()
    if not appt:
        raise NotFound('Appointment not found')
    return appt


def serialize_appointment(appt: Appointment, viewer) -> dict:
    doctor_profile = getattr(appt.doctor, 'profile', None)
    patient_profile = getattr(appt.patient, 'profile', None)
    doctor_phone = doctor_profile.phone if doctor_profile else None
    patient_phone = patient_profile.phone if patient_profile else None
    is_doctor = viewer.role == 'doctor'
    open_ = appt.status == Appointment.STATUS_SCHEDULED

    if is_doctor:
        contact_name, contact_phone = appt.patient.display_name(), patient_phone
    else:
        contact_name, contact_phone = appt.doctor.display_name(), doctor_phone

    data = {
        'id': appt.id,
        'slotId': appt.slot_id,
        'appointmentDate': appt.appointment_date.isoformat(),
        'durationMinutes': appt.duration_minutes,
        'status': appt.status,
        'notes': appt.notes,
        'doctor': {
            'id': appt.doctor_id,
            'fullName': appt.doctor.display_name(),
            'specialization': doctor_profile.specialization if doctor_profile else None,
            'phone': doctor_phone,
        },
        'patient': {
            'id': appt.patient_id,
            'fullName': appt.patient.display_name(),
            'phone': patient_phone,
        },
        'contact': {
            'name': contact_name,
            'phone': contact_phone,
            'whatsappLink': whatsapp_link(contact_phone, appointment_message(contact_name)),
        },
        'canCancel': open_,
        'canReschedule': open_ and not is_doctor,
        'createdAt': appt.created_at.isoformat(),
    }
    # each side reads the other side's notes
    if is_doctor:
        data['patientNotes'] = appt.patient_notes
    else:
        data['doctorNotes'] = appt.doctor_notes
    return data


def serialize_detail(appt: Appointment, viewer) -> dict:
    data = serialize_appointment(appt, viewer)
    data['transitionHistory'] = [
        {
            'from': t.from_status,
            'to': t.to_status,
            'operator': t.operator.username if t.operator else '',
            'timestamp': t.timestamp.isoformat(),
            'reason': t.reason,
        }
        for t in appt.transitions.select_related('operator').order_by('timestamp', 'id')
    ]
    return data


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------
def book(patient, slot_id: int, notes: Optional[str] = None) -> Appointment:
    with transaction.atomic():
        slot = _lock_bookable_slot(slot_id)
        appt = Appointment.objects.create(
            patient=patient,
            doctor_id=slot.doctor_id,
            slot=slot,
            appointment_date=_slot_start(slot),
            duration_minutes=settings.APPOINTMENT_DEFAULT_DURATION,
            status=Appointment.STATUS_SCHEDULED,
            patient_notes=notes or None,
        )
        _record(appt, None, patient, 'booked')
        _fill(slot)
    logger.info('patient %s booked slot %s', patient.id, slot.id)
    log_action(user=patient, action='appointment_book', object_type='appointment', object_id=appt.id,
               detail={'slotId': slot.id, 'doctorId': slot.doctor_id})
    broadcast_schedule_change(slot.doctor_id, slot_id=slot.id, action='booked')
    return appt


def cancel(user, appointment_id: int, reason: Optional[str] = None) -> Appointment:
    get_for_party(user, appointment_id)
    with transaction.atomic():
        appt = Appointment.objects.select_for_update().get(id=appointment_id)
        if not _can_transition(appt.status, Appointment.STATUS_CANCELLED):
            raise Conflict(f'Cannot cancel an appointment that is {appt.status}.')
        old = appt.status
        appt.status = Appointment.STATUS_CANCELLED
        appt.save(update_fields=['status', 'updated_at'])
        _record(appt, old, user, reason or 'cancelled')
        _release(appt.slot_id)
    log_action(user=user, action='appointment_cancel', object_type='appointment', object_id=appt.id)
    broadcast_schedule_change(appt.doctor_id, slot_id=appt.slot_id, action='cancelled')
    return appt


def reschedule(patient, appointment_id: int, slot_id: int) -> Appointment:
    current = get_for_party(patient, appointment_id)
    if current.patient_id != patient.id:
        raise PermissionDenied('Only the patient can reschedule this appointment.')
    with transaction.atomic():
        appt = Appointment.objects.select_for_update().get(id=appointment_id)
        if appt.status != Appointment.STATUS_SCHEDULED:
            raise Conflict(f'Cannot reschedule an appointment that is {appt.status}.')
        if appt.slot_id == slot_id:
            raise Conflict('The appointment is already in this slot.')
        # lock both slot rows in id order
        list(DoctorSchedule.objects.select_for_update()
             .filter(id__in=[i for i in (appt.slot_id, slot_id) if i]).order_by('id'))
        slot = _lock_bookable_slot(slot_id)
        if slot.doctor_id != appt.doctor_id:
            raise Conflict('Appointments can only move to a slot of the same doctor.')
        old_slot_id = appt.slot_id
        appt.slot = slot
        appt.appointment_date = _slot_start(slot)
        appt.save(update_fields=['slot', 'appointment_date', 'updated_at'])
        _record(appt, appt.status, patient, 'rescheduled')
        _release(old_slot_id)
        _fill(slot)
    log_action(user=patient, action='appointment_reschedule', object_type='appointment', object_id=appt.id,
               detail={'from': old_slot_id, 'to': slot.id})
    broadcast_schedule_change(appt.doctor_id, slot_id=slot.id, action='rescheduled')
    return appt


def set_status(doctor, appointment_id: int, new_status: str, doctor_notes: Optional[str] = None) -> Appointment:
    current = get_for_party(doctor, appointment_id)
    if current.doctor_id != doctor.id:
        raise PermissionDenied('Only the doctor can change the status of this appointment.')
    with transaction.atomic():
        appt = Appointment.objects.select_for_update().get(id=appointment_id)
        if not _can_transition(appt.status, new_status):
            raise Conflict(f'Cannot change status from {appt.status} to {new_status}.')
        old = appt.status
        appt.status = new_status
        if doctor_notes is not None:
            appt.doctor_notes = doctor_notes
        appt.save(update_fields=['status', 'doctor_notes', 'updated_at'])
        _record(appt, old, doctor, 'status update')
        if new_status == Appointment.STATUS_CANCELLED:
            _release(appt.slot_id)
    log_action(user=doctor, action='appointment_status', object_type='appointment', object_id=appt.id,
               detail={'from': old, 'to': new_status})
    broadcast_schedule_change(appt.doctor_id, slot_id=appt.slot_id, action=new_status)
    return appt
