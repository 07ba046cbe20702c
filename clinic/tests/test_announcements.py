from datetime import timedelta

import pytest
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from clinic.models import Announcement

pytestmark = pytest.mark.django_db


def _announce(author, title, category='general', published=True, days_ago=0):
    return Announcement.objects.create(
        author=author, title=title, content='body', category=category, is_published=published,
        published_at=timezone.now() - timedelta(days=days_ago) if published else None,
    )


def test_public_list_shows_published_newest_first(doctor):
    _announce(doctor, 'old', days_ago=3)
    _announce(doctor, 'new', days_ago=0)
    _announce(doctor, 'draft', published=False)
    r = APIClient().get(reverse('announcement_list'))
    assert r.status_code == 200
    assert [a['title'] for a in r.data['data']] == ['new', 'old']
    assert r.data['data'][0]['author']['fullName'] == 'Grace Hopper'
    assert r.data['data'][0]['author']['specialization'] == 'Cardiology'


def test_category_filter_and_all(doctor):
    _announce(doctor, 'tip', category='health_tip')
    _announce(doctor, 'alert', category='emergency')
    client = APIClient()
    only = client.get(reverse('announcement_list'), {'category': 'emergency'}).data['data']
    assert [a['title'] for a in only] == ['alert']
    assert only[0]['emergencyLink'].startswith('https://wa.me/')
    assert len(client.get(reverse('announcement_list'), {'category': 'all'}).data['data']) == 2
    assert client.get(reverse('announcement_list'), {'category': 'gossip'}).status_code == 400


def test_non_emergency_has_no_emergency_link(doctor):
    _announce(doctor, 'tip', category='health_tip')
    item = APIClient().get(reverse('announcement_list')).data['data'][0]
    assert item['emergencyLink'] is None


def test_doctor_creates_published_announcement(doctor, client_for):
    r = client_for(doctor).post(reverse('announcement_create'), {
        'title': ' Flu shots ', 'content': 'Available <script>x</script>now', 'category': 'news', 'isPublished': True,
    }, format='json')
    assert r.status_code == 201
    a = Announcement.objects.get(id=r.data['data']['id'])
    assert a.title == 'Flu shots'
    assert '<script>' not in a.content
    assert a.is_published and a.published_at is not None


def test_draft_has_no_published_at(doctor, client_for):
    r = client_for(doctor).post(reverse('announcement_create'), {'title': 't', 'content': 'c'}, format='json')
    assert r.status_code == 201
    a = Announcement.objects.get(id=r.data['data']['id'])
    assert a.category == 'general'
    assert not a.is_published and a.published_at is None


@pytest.mark.parametrize('body', [
    {'title': '', 'content': 'c'},
    {'title': 't', 'content': '   '},
    {'title': 't', 'content': 'c', 'category': 'rumour'},
    {'content': 'c'},
])
def test_create_validation(doctor, client_for, body):
    assert client_for(doctor).post(reverse('announcement_create'), body, format='json').status_code == 400


@override_settings(ANNOUNCEMENT_MAX_LENGTH=10)
def test_content_length_limit(doctor, client_for):
    client = client_for(doctor)
    assert client.post(reverse('announcement_create'), {'title': 't', 'content': 'x' * 11}, format='json').status_code == 400
    assert client.post(reverse('announcement_create'), {'title': 't', 'content': 'x' * 10}, format='json').status_code == 201


def test_patient_cannot_create(patient, client_for):
    r = client_for(patient).post(reverse('announcement_create'), {'title': 't', 'content': 'c'}, format='json')
    assert r.status_code == 403


def test_mine_includes_drafts_of_author_only(doctor, make_user, client_for):
    _announce(doctor, 'mine-draft', published=False)
    _announce(make_user('other', 'doctor'), 'theirs')
    r = client_for(doctor).get(reverse('announcement_mine'))
    assert [a['title'] for a in r.data['data']] == ['mine-draft']


def test_publish_is_idempotent(doctor, client_for):
    a = _announce(doctor, 'draft', published=False)
    client = client_for(doctor)
    first = client.post(reverse('announcement_publish', args=[a.id]))
    assert first.status_code == 200
    stamp = first.data['data']['publishedAt']
    assert stamp
    second = client.post(reverse('announcement_publish', args=[a.id]))
    assert second.data['data']['publishedAt'] == stamp


def test_only_author_can_publish_or_delete(doctor, make_user, client_for):
    a = _announce(doctor, 'draft', published=False)
    intruder = client_for(make_user('other', 'doctor'))
    assert intruder.post(reverse('announcement_publish', args=[a.id])).status_code == 404
    assert intruder.post(reverse('announcement_delete', args=[a.id])).status_code == 404
    assert client_for(doctor).post(reverse('announcement_delete', args=[a.id])).status_code == 200
    assert not Announcement.objects.filter(id=a.id).exists()
