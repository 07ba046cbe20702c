"""
Doctor calendar maintenance.

Doctors add, edit and remove their own slots here.  Status ``booked``
is owned by the booking flow: edits only move a slot between
``available`` and ``blocked``, and a slot holding scheduled
appointments is frozen apart from its notes.
"""
import logging
from datetime import date as date_cls

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic.exceptions import Conflict
from clinic.models import Appointment, DoctorSchedule
from clinic.realtime.broadcast import broadcast_schedule_change
from clinic.services.audit import log_action
from clinic.services.contact import slot_patient_message, whatsapp_link
from clinic.services.doctors import serialize_slot

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (DoctorSchedule.STATUS_AVAILABLE, DoctorSchedule.STATUS_BLOCKED)


def _overlaps(doctor_id, day, start, end, *, exclude_id=None) -> bool:
    qs = DoctorSchedule.objects.filter(doctor_id=doctor_id, date=day, start_time__lt=end, end_time__gt=start)
    if exclude_id:
        qs = qs.exclude(id=exclude_id)
    return qs.exists()


def _scheduled(slot: DoctorSchedule):
    return slot.appointments.filter(status=Appointment.STATUS_SCHEDULED)


def get_own_slot(doctor, slot_id: int, *, lock: bool = False) -> DoctorSchedule:
    qs = DoctorSchedule.objects.filter(id=slot_id, doctor=doctor)
    if lock:
        qs = qs.select_for_update()
    slot = qs.first()
    if not slot:
        raise NotFound('Slot not found')
    return slot


def day_schedule(doctor, day: date_cls) -> dict:
    """Slots of one day with their scheduled appointments folded in."""
    slots = list(
        DoctorSchedule.objects.filter(doctor=doctor, date=day).order_by('start_time', 'id')
    )
    appts = (
        Appointment.objects
        .filter(slot__in=slots, status=Appointment.STATUS_SCHEDULED)
        .select_related('patient__profile')
        .order_by('appointment_date', 'id')
    )
    by_slot: dict[int, list] = {}
    doctor_name = doctor.display_name()
    for a in appts:
        profile = getattr(a.patient, 'profile', None)
        name = a.patient.display_name()
        phone = profile.phone if profile else None
        by_slot.setdefault(a.slot_id, []).append({
            'id': a.id,
            'patientId': a.patient_id,
            'patientName': name,
            'patientPhone': phone,
            'patientNotes': a.patient_notes,
            'appointmentDate': a.appointment_date.isoformat(),
            'contactLink': whatsapp_link(phone, slot_patient_message(name, doctor_name)),
        })

    data = []
    summary = {s: 0 for s, _ in DoctorSchedule.STATUS_CHOICES}
    for s in slots:
        item = serialize_slot(s)
        item['appointments'] = by_slot.get(s.id, [])
        data.append(item)
        summary[s.status] = summary.get(s.status, 0) + 1
    summary['total'] = len(slots)
    return {'date': day.isoformat(), 'slots': data, 'summary': summary}


def create_slot(doctor, values: dict) -> DoctorSchedule:
    if values.get('status', DoctorSchedule.STATUS_AVAILABLE) not in EDITABLE_STATUSES:
        raise ValidationError({'status': 'New slots must be available or blocked.'})
    with transaction.atomic():
        if _overlaps(doctor.id, values['date'], values['start_time'], values['end_time']):
            raise Conflict('This slot overlaps an existing slot.')
        slot = DoctorSchedule.objects.create(doctor=doctor, **values)
    log_action(user=doctor, action='slot_create', object_type='slot', object_id=slot.id,
               detail={'date': slot.date.isoformat(), 'status': slot.status})
    broadcast_schedule_change(doctor.id, slot_id=slot.id, action='created')
    return slot


def update_slot(doctor, slot_id: int, changes: dict) -> DoctorSchedule:
    with transaction.atomic():
        slot = get_own_slot(doctor, slot_id, lock=True)

        new_status = changes.get('status', slot.status)
        if new_status != slot.status:
            if slot.status == DoctorSchedule.STATUS_BOOKED or new_status not in EDITABLE_STATUSES:
                raise Conflict(f'Cannot change slot status from {slot.status} to {new_status}.')

        if _scheduled(slot).exists():
            frozen = [k for k, v in changes.items() if k != 'notes' and getattr(slot, k) != v]
            if frozen:
                raise Conflict('Slot has scheduled appointments; only notes can be changed.')

        day = changes.get('date', slot.date)
        start = changes.get('start_time', slot.start_time)
        end = changes.get('end_time', slot.end_time)
        if start >= end:
            raise ValidationError({'endTime': 'End time must be after start time.'})
        if _overlaps(doctor.id, day, start, end, exclude_id=slot.id):
            raise Conflict('This slot overlaps an existing slot.')

        for field, value in changes.items():
            setattr(slot, field, value)
        slot.save()
    log_action(user=doctor, action='slot_update', object_type='slot', object_id=slot.id,
               detail={'fields': sorted(changes)})
    broadcast_schedule_change(doctor.id, slot_id=slot.id, action='updated')
    return slot


def delete_slot(doctor, slot_id: int) -> None:
    with transaction.atomic():
        slot = get_own_slot(doctor, slot_id, lock=True)
        if _scheduled(slot).exists():
            raise Conflict('Cannot delete a slot with scheduled appointments.')
        slot.delete()
    logger.info('doctor %s deleted slot %s', doctor.id, slot_id)
    log_action(user=doctor, action='slot_delete', object_type='slot', object_id=slot_id)
    broadcast_schedule_change(doctor.id, slot_id=slot_id, action='deleted')
