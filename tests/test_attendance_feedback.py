from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from events.models import AnalyticsSummary, Attendance, Feedback, Registration

pytestmark = pytest.mark.django_db


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def attended(registration, admin_user):
    return Attendance.objects.create(registration=registration, checked_in_by=admin_user)


def test_check_in_by_qr_code(admin_client, admin_user, registration):
    response = admin_client.post('/api/attendance/check_in/', {'qr_code': registration.qr_code}, format='json')

    assert response.status_code == 201
    attendance = Attendance.objects.get(registration=registration)
    assert attendance.check_in_method == 'qr_code'
    assert attendance.checked_in_by == admin_user
    assert response.data['student_name'] == 'Alice'


def test_manual_check_in_by_registration_id(admin_client, registration):
    response = admin_client.post('/api/attendance/check_in/', {'registration': registration.id}, format='json')

    assert response.status_code == 201
    assert response.data['check_in_method'] == 'manual'


def test_check_in_needs_qr_or_registration(admin_client):
    response = admin_client.post('/api/attendance/check_in/', {}, format='json')

    assert response.status_code == 400


def test_double_check_in_is_rejected(admin_client, registration):
    admin_client.post('/api/attendance/check_in/', {'qr_code': registration.qr_code}, format='json')

    response = admin_client.post('/api/attendance/check_in/', {'qr_code': registration.qr_code}, format='json')

    assert response.status_code == 400
    assert Attendance.objects.filter(registration=registration).count() == 1


def test_unknown_qr_code_is_not_found(admin_client, registration):
    response = admin_client.post('/api/attendance/check_in/', {'qr_code': 'missing-token'}, format='json')

    assert response.status_code == 404


def test_waitlisted_registration_cannot_check_in(admin_client, event, other_student):
    waitlisted = Registration.objects.create(event=event, student=other_student, registration_status='waitlisted')

    response = admin_client.post('/api/attendance/check_in/', {'qr_code': waitlisted.qr_code}, format='json')

    assert response.status_code == 400


def test_cancelled_event_blocks_check_in(admin_client, event, registration):
    event.status = 'cancelled'
    event.save()

    response = admin_client.post('/api/attendance/check_in/', {'qr_code': registration.qr_code}, format='json')

    assert response.status_code == 400


def test_admin_of_other_college_cannot_check_in(make_user, other_college, registration):
    outsider = make_user('dana', role='admin', member_of=other_college)

    response = client_for(outsider).post('/api/attendance/check_in/', {'qr_code': registration.qr_code}, format='json')

    assert response.status_code == 404


def test_student_cannot_check_in(student_client, registration):
    response = student_client.post('/api/attendance/check_in/', {'qr_code': registration.qr_code}, format='json')

    assert response.status_code == 403


def test_check_out_records_duration(admin_client, attended):
    Attendance.objects.filter(pk=attended.pk).update(checked_in_at=timezone.now() - timedelta(minutes=90))

    response = admin_client.post(f'/api/attendance/{attended.id}/check_out/')
    again = admin_client.post(f'/api/attendance/{attended.id}/check_out/')

    assert response.status_code == 200
    assert response.data['duration_minutes'] == 90
    assert again.status_code == 400


def test_cancel_after_check_in_is_rejected(student_client, event, attended):
    response = student_client.post(f'/api/events/{event.id}/cancel_registration/')

    assert response.status_code == 400


def test_attendance_updates_analytics(event, student, other_student, admin_user):
    first = Registration.objects.create(event=event, student=student)
    Registration.objects.create(event=event, student=other_student)

    Attendance.objects.create(registration=first, checked_in_by=admin_user)

    summary = AnalyticsSummary.objects.get(event=event)
    assert summary.total_registrations == 2
    assert summary.total_attendance == 1
    assert summary.attendance_percentage == 50


def test_feedback_requires_attendance(student_client, registration):
    response = student_client.post('/api/feedback/', {'registration': registration.id, 'rating': 5}, format='json')

    assert response.status_code == 400
    assert not Feedback.objects.exists()


def test_feedback_after_attendance(student_client, event, attended):
    response = student_client.post('/api/feedback/', {
        'registration': attended.registration_id, 'rating': 4, 'comment': 'Great session',
    }, format='json')
    duplicate = student_client.post('/api/feedback/', {
        'registration': attended.registration_id, 'rating': 2,
    }, format='json')

    assert response.status_code == 201
    assert response.data['event_title'] == 'Robotics Workshop'
    assert duplicate.status_code == 400
    summary = AnalyticsSummary.objects.get(event=event)
    assert summary.avg_rating == 4
    assert summary.feedback_count == 1


def test_feedback_rating_out_of_range(student_client, attended):
    response = student_client.post('/api/feedback/', {
        'registration': attended.registration_id, 'rating': 6,
    }, format='json')

    assert response.status_code == 400
    assert 'rating' in response.data


def test_feedback_on_someone_elses_registration(other_student, attended):
    response = client_for(other_student).post('/api/feedback/', {
        'registration': attended.registration_id, 'rating': 3,
    }, format='json')

    assert response.status_code == 400


def test_anonymous_feedback_hides_student_name(admin_client, attended):
    Feedback.objects.create(registration=attended.registration, rating=5, anonymous=True)

    response = admin_client.get('/api/feedback/')

    assert response.status_code == 200
    assert response.data[0]['student_name'] is None


def test_anonymous_feedback_hides_registration_from_admin(admin_client, attended):
    Feedback.objects.create(registration=attended.registration, rating=2, anonymous=True)

    as_admin = admin_client.get('/api/feedback/')

    assert as_admin.data[0]['registration'] is None
    assert as_admin.data[0]['rating'] == 2


def test_owner_still_sees_own_anonymous_feedback_registration(student, attended):
    Feedback.objects.create(registration=attended.registration, rating=2, anonymous=True)

    response = client_for(student).get('/api/feedback/')

    assert response.data[0]['registration'] == attended.registration_id
