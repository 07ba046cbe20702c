import pytest
from django.urls import reverse

from clinic.models import Profile

pytestmark = pytest.mark.django_db


def test_get_profile(patient, client_for):
    r = client_for(patient).get(reverse('profile_view'))
    assert r.status_code == 200
    assert r.data['data']['fullName'] == 'Alan Turing'
    assert 'specialization' not in r.data['data']


def test_profile_created_on_the_fly(client_for):
    from clinic.models import User
    bare = User.objects.create_user(username='bare', password='x', role='patient')
    r = client_for(bare).get(reverse('profile_view'))
    assert r.status_code == 200
    assert r.data['data']['fullName'] == 'bare'
    assert Profile.objects.filter(user=bare).exists()


def test_patient_update_ignores_doctor_fields(patient, client_for):
    r = client_for(patient).post(reverse('profile_update_view'), {
        'fullName': 'Alan M. Turing', 'phone': '', 'bio': '<i>math</i>', 'dateOfBirth': '1912-06-23',
        'specialization': 'Cryptography', 'consultationFee': '99.50',
    }, format='json')
    assert r.status_code == 200
    p = Profile.objects.get(user=patient)
    assert p.full_name == 'Alan M. Turing'
    assert p.phone is None
    assert p.bio == 'math'
    assert p.date_of_birth.isoformat() == '1912-06-23'
    assert p.specialization is None
    assert p.consultation_fee is None


def test_doctor_updates_professional_fields(doctor, client_for):
    r = client_for(doctor).post(reverse('profile_update_view'), {
        'full_name': 'Grace Hopper', 'experience_years': 20, 'consultation_fee': '120.00', 'qualifications': 'PhD',
    }, format='json')
    assert r.status_code == 200
    assert r.data['data']['experienceYears'] == 20
    assert r.data['data']['consultationFee'] == 120.0
    assert r.data['data']['qualifications'] == 'PhD'


@pytest.mark.parametrize('body', [
    {'fullName': '   '},
    {'fullName': ''},
    {'experienceYears': -1},
    {'consultationFee': '-5'},
    {'dateOfBirth': 'yesterday'},
])
def test_update_validation(doctor, client_for, body):
    assert client_for(doctor).post(reverse('profile_update_view'), body, format='json').status_code == 400


def test_update_body_must_be_an_object(patient, client_for):
    r = client_for(patient).post(reverse('profile_update_view'), [], format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid'


def test_avatar_url_is_stored_as_sent(patient, client_for):
    url = 'https://cdn.example.com/a.png?w=64&h=64'
    r = client_for(patient).post(reverse('profile_update_view'), {
        'avatarUrl': url, 'bio': '<b>Plays</b> chess & go',
    }, format='json')
    assert r.status_code == 200
    p = Profile.objects.get(user=patient)
    assert p.avatar_url == url
    assert p.bio == 'Plays chess & go'


def test_blank_avatar_url_is_cleared(patient, client_for):
    Profile.objects.filter(user=patient).update(avatar_url='https://cdn.example.com/a.png')
    r = client_for(patient).post(reverse('profile_update_view'), {'avatarUrl': ''}, format='json')
    assert r.status_code == 200
    assert Profile.objects.get(user=patient).avatar_url is None
