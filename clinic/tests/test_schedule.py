from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from clinic.models import Appointment, AuditEvent, DoctorSchedule

pytestmark = pytest.mark.django_db


def _day(days=1):
    return (timezone.localdate() + timedelta(days=days)).isoformat()


def test_doctor_creates_slot(doctor, client_for):
    r = client_for(doctor).post(reverse('slot_create'), {
        'date': _day(), 'startTime': '09:00', 'endTime': '09:30', 'notes': '<b>first</b> visit',
    }, format='json')
    assert r.status_code == 201
    assert r.data['data']['status'] == 'available'
    assert r.data['data']['maxAppointments'] == 1
    slot = DoctorSchedule.objects.get(id=r.data['data']['id'])
    assert slot.notes == 'first visit'
    assert AuditEvent.objects.filter(action='slot_create', object_id=slot.id).exists()


def test_patient_cannot_create_slot(patient, client_for):
    r = client_for(patient).post(reverse('slot_create'), {
        'date': _day(), 'startTime': '09:00', 'endTime': '09:30',
    }, format='json')
    assert r.status_code == 403


@pytest.mark.parametrize('body', [
    {'date': _day(-1), 'startTime': '09:00', 'endTime': '09:30'},
    {'date': _day(), 'startTime': '10:00', 'endTime': '09:30'},
    {'date': _day(), 'startTime': '09:00', 'endTime': '09:00'},
    {'date': _day(), 'startTime': '09:00', 'endTime': '09:30', 'status': 'booked'},
    {'startTime': '09:00', 'endTime': '09:30'},
])
def test_slot_validation(doctor, client_for, body):
    r = client_for(doctor).post(reverse('slot_create'), body, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_overlapping_slot_conflicts(doctor, client_for, make_slot):
    make_slot(doctor, start=9)
    r = client_for(doctor).post(reverse('slot_create'), {
        'date': _day(), 'startTime': '09:15', 'endTime': '09:45',
    }, format='json')
    assert r.status_code == 409
    assert r.data['error']['code'] == 'conflict'


def test_adjacent_slot_is_allowed(doctor, client_for, make_slot):
    make_slot(doctor, start=9)
    r = client_for(doctor).post(reverse('slot_create'), {
        'date': _day(), 'startTime': '09:30', 'endTime': '10:00',
    }, format='json')
    assert r.status_code == 201


def test_schedule_day_embeds_scheduled_appointments(doctor, patient, client_for, make_slot):
    booked = make_slot(doctor, start=9, status=DoctorSchedule.STATUS_BOOKED)
    make_slot(doctor, start=10)
    make_slot(doctor, start=11, status=DoctorSchedule.STATUS_BLOCKED)
    make_slot(doctor, days=2, start=9)
    Appointment.objects.create(
        patient=patient, doctor=doctor, slot=booked, appointment_date=timezone.now() + timedelta(days=1),
        patient_notes='headache',
    )
    r = client_for(doctor).get(reverse('schedule_day'), {'date': _day()})
    assert r.status_code == 200
    slots = r.data['slots']
    assert [s['startTime'] for s in slots] == ['09:00', '10:00', '11:00']
    embedded = slots[0]['appointments']
    assert embedded[0]['patientName'] == 'Alan Turing'
    assert embedded[0]['patientNotes'] == 'headache'
    assert embedded[0]['contactLink'].startswith('https://wa.me/442079460000')
    assert slots[1]['appointments'] == []
    assert r.data['summary'] == {'available': 1, 'booked': 1, 'blocked': 1, 'total': 3}


def test_schedule_only_shows_own_slots(doctor, make_user, client_for, make_slot):
    other = make_user('other', 'doctor')
    make_slot(other, start=9)
    r = client_for(doctor).get(reverse('schedule_day'), {'date': _day()})
    assert r.data['slots'] == []


def test_block_and_unblock_slot(doctor, client_for, make_slot):
    slot = make_slot(doctor)
    client = client_for(doctor)
    r = client.post(reverse('slot_update', args=[slot.id]), {'status': 'blocked'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'blocked'
    r = client.post(reverse('slot_update', args=[slot.id]), {'status': 'available'}, format='json')
    assert r.data['data']['status'] == 'available'


def test_doctor_cannot_mark_slot_booked(doctor, client_for, make_slot):
    slot = make_slot(doctor)
    r = client_for(doctor).post(reverse('slot_update', args=[slot.id]), {'status': 'booked'}, format='json')
    assert r.status_code == 409


def test_booked_slot_status_is_frozen(doctor, client_for, make_slot):
    slot = make_slot(doctor, status=DoctorSchedule.STATUS_BOOKED)
    r = client_for(doctor).post(reverse('slot_update', args=[slot.id]), {'status': 'available'}, format='json')
    assert r.status_code == 409
    slot.refresh_from_db()
    assert slot.status == 'booked'


def test_slot_with_appointments_only_accepts_notes(doctor, patient, client_for, make_slot):
    slot = make_slot(doctor, status=DoctorSchedule.STATUS_BOOKED)
    Appointment.objects.create(patient=patient, doctor=doctor, slot=slot, appointment_date=timezone.now())
    client = client_for(doctor)
    r = client.post(reverse('slot_update', args=[slot.id]), {'startTime': '08:00'}, format='json')
    assert r.status_code == 409
    r = client.post(reverse('slot_update', args=[slot.id]), {'notes': 'bring reports'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['notes'] == 'bring reports'


def test_update_rejects_inverted_window_against_stored_times(doctor, client_for, make_slot):
    slot = make_slot(doctor, start=9)
    r = client_for(doctor).post(reverse('slot_update', args=[slot.id]), {'endTime': '08:00'}, format='json')
    assert r.status_code == 400


def test_update_rejects_past_date(doctor, client_for, make_slot):
    slot = make_slot(doctor)
    r = client_for(doctor).post(reverse('slot_update', args=[slot.id]), {'date': _day(-1)}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid'
    slot.refresh_from_db()
    assert slot.date.isoformat() == _day()


def test_update_other_doctors_slot_is_not_found(doctor, make_user, client_for, make_slot):
    slot = make_slot(make_user('other', 'doctor'))
    r = client_for(doctor).post(reverse('slot_update', args=[slot.id]), {'notes': 'x'}, format='json')
    assert r.status_code == 404


def test_delete_slot(doctor, client_for, make_slot):
    slot = make_slot(doctor)
    r = client_for(doctor).post(reverse('slot_delete', args=[slot.id]))
    assert r.status_code == 200
    assert not DoctorSchedule.objects.filter(id=slot.id).exists()


def test_delete_refused_with_scheduled_appointment(doctor, patient, client_for, make_slot):
    slot = make_slot(doctor, status=DoctorSchedule.STATUS_BOOKED)
    Appointment.objects.create(patient=patient, doctor=doctor, slot=slot, appointment_date=timezone.now())
    r = client_for(doctor).post(reverse('slot_delete', args=[slot.id]))
    assert r.status_code == 409
    assert DoctorSchedule.objects.filter(id=slot.id).exists()


def test_slot_change_is_broadcast(doctor, client_for, make_slot, monkeypatch):
    sent = []
    monkeypatch.setattr('clinic.services.schedule.broadcast_schedule_change',
                        lambda doctor_id, **kw: sent.append((doctor_id, kw)))
    slot = make_slot(doctor)
    client_for(doctor).post(reverse('slot_update', args=[slot.id]), {'notes': 'n'}, format='json')
    assert sent == [(doctor.id, {'slot_id': slot.id, 'action': 'updated'})]
