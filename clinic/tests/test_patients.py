from datetime import date, timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from clinic.models import Appointment
from clinic.services.patients import age_from

pytestmark = pytest.mark.django_db


def _appt(patient, doctor, days, status='scheduled'):
    return Appointment.objects.create(
        patient=patient, doctor=doctor, appointment_date=timezone.now() + timedelta(days=days), status=status,
    )


def test_age_from():
    assert age_from(date(2000, 6, 15), today=date(2024, 6, 14)) == 23
    assert age_from(date(2000, 6, 15), today=date(2024, 6, 15)) == 24
    assert age_from(None) is None


def test_doctor_sees_own_patients_with_counters(doctor, patient, make_user, client_for):
    other_doc = make_user('doc2', 'doctor')
    stranger = make_user('stranger')
    lapsed = make_user('lapsed', full_name='Lapsed Person')
    _appt(patient, doctor, 3)
    _appt(patient, doctor, -5, status='completed')
    _appt(patient, doctor, -40, status='completed')
    _appt(lapsed, doctor, -60, status='completed')
    _appt(stranger, other_doc, 2)

    r = client_for(doctor).get(reverse('patient_list'))
    assert r.status_code == 200
    rows = {row['fullName']: row for row in r.data['data']}
    assert set(rows) == {'Alan Turing', 'Lapsed Person'}
    alan = rows['Alan Turing']
    assert alan['upcomingAppointments'] == 1
    assert alan['totalAppointments'] == 3
    assert alan['lastAppointment'] is not None
    assert alan['whatsappLink'].startswith('https://wa.me/442079460000')
    assert r.data['summary'] == {
        'totalPatients': 2, 'activePatients': 1, 'upcomingAppointments': 1, 'totalVisits': 4,
    }


def test_search_by_name_email_and_phone(doctor, patient, make_user, client_for):
    bob = make_user('bob', full_name='Bob Stone', phone='555-1234')
    _appt(patient, doctor, 1)
    _appt(bob, doctor, 1)
    client = client_for(doctor)
    names = lambda q: [row['fullName'] for row in client.get(reverse('patient_list'), {'q': q}).data['data']]
    assert names('turing') == ['Alan Turing']
    assert names('bob@example') == ['Bob Stone']
    assert names('1234') == ['Bob Stone']


def test_patient_gets_forbidden(patient, client_for):
    assert client_for(patient).get(reverse('patient_list')).status_code == 403
