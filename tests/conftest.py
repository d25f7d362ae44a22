import itertools
from datetime import timedelta

import pytest
from django.contrib.auth.models import User
from django.utils import timezone
from rest_framework.test import APIClient

from events.models import College, Event, Registration, UserProfile


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def college(db):
    return College.objects.create(
        name="Riverside Institute",
        domain="riverside.edu",
        contact_email="events@riverside.edu",
    )


@pytest.fixture
def other_college(college):
    return College.objects.create(
        name="Hillcrest College",
        domain="hillcrest.edu",
        contact_email="events@hillcrest.edu",
    )


@pytest.fixture
def make_user(college):
    def _make(username, role='student', member_of=None, **extra):
        user = User.objects.create_user(
            username=username,
            email=f"{username}@riverside.edu",
            password="pass12345",
            **extra
        )
        profile = UserProfile.objects.get(user=user)
        profile.role = role
        profile.college = member_of or college
        profile.name = username.title()
        profile.save()
        return User.objects.get(pk=user.pk)
    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user('campusadmin', role='admin')


@pytest.fixture
def student(make_user):
    return make_user('alice')


@pytest.fixture
def other_student(make_user):
    return make_user('bob')


@pytest.fixture
def make_event(college, admin_user):
    counter = itertools.count(1)

    def _make(**overrides):
        number = next(counter)
        data = {
            'college': college,
            'created_by': admin_user,
            'title': f"Event {number}",
            'description': "A campus event",
            'event_type': 'workshop',
            'event_date': timezone.now() + timedelta(days=7),
            'venue': f"Hall {number}",
            'capacity': 50,
            'status': 'published',
        }
        data.update(overrides)
        return Event.objects.create(**data)
    return _make


@pytest.fixture
def event(make_event):
    return make_event(title="Robotics Workshop")


@pytest.fixture
def registration(event, student):
    return Registration.objects.create(event=event, student=student)


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def student_client(api_client, student):
    api_client.force_authenticate(user=student)
    return api_client
