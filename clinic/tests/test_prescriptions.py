from datetime import timedelta

import pytest
from django.urls import reverse

from clinic.models import Prescription

pytestmark = pytest.mark.django_db

MED = {'name': 'Amoxicillin', 'dosage': '500mg', 'frequency': 'Three times daily', 'duration': '7 days'}


def _create(client, **overrides):
    body = {'patientName': 'Alan Turing', 'diagnosis': 'Sinusitis', 'medications': [MED]}
    body.update(overrides)
    return client.post(reverse('prescription_create'), body, format='json')


def test_doctor_creates_prescription_for_named_patient(doctor, patient, client_for):
    r = _create(client_for(doctor), patientPhone='+44 20 7946 0000', notes='Finish the course')
    assert r.status_code == 201
    p = Prescription.objects.get(id=r.data['data']['id'])
    assert p.patient == patient
    assert p.medications == [dict(MED, instructions='')]
    assert r.data['notificationLink'].startswith('https://wa.me/442079460000?text=')
    assert r.data['data']['label'] == 'ACTIVE'


def test_diagnosis_keeps_comparison_signs(doctor, patient, client_for):
    r = _create(client_for(doctor), diagnosis='HbA1c < 7% & BP > 140', patientPhone='+44 20 7946 0000')
    assert r.status_code == 201
    assert Prescription.objects.get(id=r.data['data']['id']).diagnosis == 'HbA1c < 7% & BP > 140'
    assert 'HbA1c%20%3C%207%25%20%26%20BP%20%3E%20140' in r.data['notificationLink']


def test_no_notification_link_without_phone(doctor, patient, client_for):
    r = _create(client_for(doctor))
    assert r.status_code == 201
    assert r.data['notificationLink'] is None


def test_incomplete_medications_are_dropped(doctor, patient, client_for):
    meds = [MED, {'name': 'Ibuprofen', 'dosage': '', 'frequency': 'As needed', 'duration': '3 days'}]
    r = _create(client_for(doctor), medications=meds)
    assert r.status_code == 201
    assert [m['name'] for m in r.data['data']['medications']] == ['Amoxicillin']


@pytest.mark.parametrize('overrides', [
    {'patientName': '  '},
    {'diagnosis': ''},
    {'medications': []},
    {'medications': [{'name': 'X', 'dosage': '1', 'frequency': '', 'duration': '1d'}]},
])
def test_create_validation(doctor, patient, client_for, overrides):
    assert _create(client_for(doctor), **overrides).status_code == 400


def test_unknown_patient_is_not_found(doctor, client_for):
    r = _create(client_for(doctor), patientName='Nobody Here')
    assert r.status_code == 404
    assert r.data['error']['message'] == 'Patient not found'


def test_doctor_name_does_not_resolve_as_patient(doctor, patient, client_for):
    assert _create(client_for(doctor), patientName='Grace Hopper').status_code == 404


def test_patient_cannot_create(patient, client_for):
    assert _create(client_for(patient)).status_code == 403


def test_visibility(doctor, patient, make_user, client_for):
    other_doc = make_user('doc2', 'doctor')
    by_id = Prescription.objects.create(doctor=doctor, patient=patient, patient_name='Alan Turing',
                                        diagnosis='a', medications=[MED])
    by_name = Prescription.objects.create(doctor=other_doc, patient=None, patient_name='Alan Turing',
                                          diagnosis='b', medications=[MED])
    other = Prescription.objects.create(doctor=doctor, patient_name='Someone Else', diagnosis='c', medications=[MED])

    ids = [p['id'] for p in client_for(patient).get(reverse('prescription_list')).data['data']]
    assert set(ids) == {by_id.id, by_name.id}
    assert ids[0] == by_name.id

    ids = [p['id'] for p in client_for(doctor).get(reverse('prescription_list')).data['data']]
    assert set(ids) == {by_id.id, other.id}

    assert client_for(patient).get(reverse('prescription_detail', args=[other.id])).status_code == 404
    assert client_for(other_doc).get(reverse('prescription_detail', args=[by_id.id])).status_code == 404
    assert client_for(patient).get(reverse('prescription_detail', args=[by_name.id])).status_code == 200


def test_old_prescription_is_labelled_older(doctor, patient, client_for, settings):
    settings.PRESCRIPTION_ACTIVE_DAYS = 30
    p = Prescription.objects.create(doctor=doctor, patient=patient, patient_name='Alan Turing',
                                    diagnosis='a', medications=[MED])
    Prescription.objects.filter(id=p.id).update(created_at=p.created_at - timedelta(days=31))
    item = client_for(patient).get(reverse('prescription_detail', args=[p.id])).data['data']
    assert item['isActive'] is False
    assert item['label'] == 'OLDER'


def test_frequency_options(patient, client_for):
    r = client_for(patient).get(reverse('frequency_options'))
    assert r.status_code == 200
    assert r.data['data'][0] == 'Once daily'
    assert 'At bedtime' in r.data['data']
    assert len(r.data['data']) == 12
