from datetime import timedelta
from io import StringIO

import pytest
from django.contrib.auth.models import User
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from events.models import AnalyticsSummary, College, Event, Notification, Registration

pytestmark = pytest.mark.django_db


def test_send_event_reminders_once_per_registrant(make_event, student, other_student):
    soon = make_event(event_date=timezone.now() + timedelta(hours=10))
    later = make_event(event_date=timezone.now() + timedelta(days=5))
    Registration.objects.create(event=soon, student=student)
    Registration.objects.create(event=soon, student=other_student, registration_status='waitlisted')
    Registration.objects.create(event=later, student=student)

    call_command('send_event_reminders', stdout=StringIO())
    call_command('send_event_reminders', stdout=StringIO())

    reminders = Notification.objects.filter(type='event_reminder')
    assert reminders.count() == 1
    assert reminders.get().user == student
    assert reminders.get().event == soon


def test_send_event_reminders_custom_window(make_event, student):
    later = make_event(event_date=timezone.now() + timedelta(days=5))
    Registration.objects.create(event=later, student=student)

    out = StringIO()
    call_command('send_event_reminders', '--hours', '200', stdout=out)

    assert 'Sent 1 reminders' in out.getvalue()


def test_complete_past_events(make_event):
    finished = make_event(event_date=timezone.now() - timedelta(hours=5))
    running = make_event(event_date=timezone.now() - timedelta(minutes=30))
    draft = make_event(event_date=timezone.now() - timedelta(days=1), status='draft')

    call_command('complete_past_events', stdout=StringIO())

    assert Event.objects.get(pk=finished.pk).status == 'completed'
    assert Event.objects.get(pk=running.pk).status == 'published'
    assert Event.objects.get(pk=draft.pk).status == 'draft'


def test_refresh_analytics_rebuilds_summaries(event, registration):
    AnalyticsSummary.objects.all().delete()

    call_command('refresh_analytics', '--event', str(event.id), stdout=StringIO())

    assert AnalyticsSummary.objects.get(event=event).total_registrations == 1


def test_refresh_analytics_unknown_event(db):
    with pytest.raises(CommandError):
        call_command('refresh_analytics', '--event', '9999', stdout=StringIO())


def test_seed_demo_data_is_repeatable(db):
    call_command('seed_demo_data', stdout=StringIO())
    call_command('seed_demo_data', stdout=StringIO())

    college = College.objects.get(name="Riverside Institute of Technology")
    assert Event.objects.filter(college=college).count() == 4
    assert User.objects.get(username='admin').profile.role == 'admin'
    assert User.objects.get(username='student').profile.college == college
    workshop = Event.objects.get(title="Machine Learning Workshop")
    assert workshop.is_full
    assert Registration.objects.filter(event__college=college).count() == 6
