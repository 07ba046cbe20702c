from datetime import time, timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from clinic.models import DoctorSchedule, Profile, User

PASSWORD = 'P@ssw0rd-2468'


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make(username, role=User.ROLE_PATIENT, full_name=None, **profile):
        user = User.objects.create_user(
            username=username, email=f'{username}@example.com', password=PASSWORD, role=role,
        )
        Profile.objects.create(user=user, full_name=full_name or username.title(), **profile)
        return user
    return _make


@pytest.fixture
def doctor(make_user):
    return make_user('drwho', User.ROLE_DOCTOR, 'Grace Hopper', specialization='Cardiology', phone='+1 555 0100')


@pytest.fixture
def patient(make_user):
    return make_user('pat', User.ROLE_PATIENT, 'Alan Turing', phone='+44 20 7946 0000')


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def make_slot():
    def _make(doctor, days=1, start=9, end=None, **kw):
        return DoctorSchedule.objects.create(
            doctor=doctor,
            date=timezone.localdate() + timedelta(days=days),
            start_time=time(start, 0),
            end_time=time(end if end is not None else start, 30),
            **kw,
        )
    return _make
