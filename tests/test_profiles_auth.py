import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from events.models import College, Notification, UserProfile

pytestmark = pytest.mark.django_db


def test_sign_up_creates_user_and_profile(api_client, college):
    response = api_client.post('/api/register/', {
        'email': 'new.student@riverside.edu',
        'password': 'secret123',
        'name': 'New Student',
        'college_id': college.id,
        'student_id': 'RIT-001',
    }, format='json')

    assert response.status_code == 201
    assert response.data['message'] == 'User registered successfully'
    user = User.objects.get(email='new.student@riverside.edu')
    assert user.username == 'new.student@riverside.edu'
    assert user.profile.name == 'New Student'
    assert user.profile.role == 'student'
    assert user.profile.college == college
    assert response.data['user']['role'] == 'student'


def test_sign_up_rejects_duplicate_email(api_client, student):
    response = api_client.post('/api/register/', {
        'email': student.email.upper(), 'password': 'secret123', 'name': 'Copy',
    }, format='json')

    assert response.status_code == 400
    assert 'email' in response.data


def test_anonymous_sign_up_cannot_request_admin_role(api_client, college):
    response = api_client.post('/api/register/', {
        'email': 'sneaky@riverside.edu', 'password': 'secret123', 'name': 'Sneaky', 'role': 'admin',
    }, format='json')

    assert response.status_code == 400
    assert 'role' in response.data


def test_short_password_is_rejected(api_client, college):
    response = api_client.post('/api/register/', {
        'email': 'short@riverside.edu', 'password': '123', 'name': 'Short',
    }, format='json')

    assert response.status_code == 400
    assert 'password' in response.data


def test_token_accepts_email_or_username(api_client, student):
    by_email = api_client.post('/api/token/', {'username': student.email, 'password': 'pass12345'}, format='json')
    by_username = api_client.post('/api/token/', {'username': 'alice', 'password': 'pass12345'}, format='json')
    wrong = api_client.post('/api/token/', {'username': 'alice', 'password': 'nope'}, format='json')

    assert by_email.status_code == 200
    assert 'access' in by_email.data and 'refresh' in by_email.data
    assert by_username.status_code == 200
    assert wrong.status_code == 401


def test_jwt_access_token_authenticates(api_client, student):
    token = api_client.post('/api/token/', {'username': 'alice', 'password': 'pass12345'}, format='json')
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.data['access']}")

    response = client.get('/api/profiles/me/')

    assert response.status_code == 200
    assert response.data['profile']['name'] == 'Alice'


def test_first_user_without_colleges_gets_default_college(db):
    user = User.objects.create_user('lonely', email='lonely@example.com', password='x')

    profile = UserProfile.objects.get(user=user)
    assert profile.college.name == 'Default College'
    assert profile.college.domain == 'default.edu'
    assert profile.name == 'lonely'
    assert profile.role == 'student'


def test_staff_user_profile_defaults_to_admin(college):
    user = User.objects.create_user('boss', email='', password='x', first_name='Pat', last_name='Lee', is_staff=True)

    profile = UserProfile.objects.get(user=user)
    assert profile.role == 'admin'
    assert profile.name == 'Pat Lee'
    assert profile.college == college


def test_me_recreates_missing_profile(api_client, college, student):
    UserProfile.objects.filter(user=student).delete()
    fresh = User.objects.get(pk=student.pk)
    api_client.force_authenticate(user=fresh)

    response = api_client.get('/api/profiles/me/')

    assert response.status_code == 200
    assert response.data['profile']['college'] == college.id
    assert response.data['profile']['name'] == 'alice'
    assert College.objects.count() == 1


def test_update_me_cannot_change_role(student_client, student):
    response = student_client.patch('/api/profiles/update_me/', {
        'name': 'Alice Smith', 'phone': '555-0199', 'role': 'admin',
    }, format='json')

    assert response.status_code == 200
    profile = UserProfile.objects.get(user=student)
    assert profile.name == 'Alice Smith'
    assert profile.phone == '555-0199'
    assert profile.role == 'student'


def test_students_only_see_their_own_profile(student_client, student, other_student):
    response = student_client.get('/api/profiles/')

    assert [item['user'] for item in response.data] == [student.id]


def test_colleges_are_public(api_client, college):
    response = api_client.get('/api/colleges/')

    assert response.status_code == 200
    assert response.data[0]['name'] == 'Riverside Institute'


def test_health_check(api_client):
    response = api_client.get('/api/health/')

    assert response.data == {'status': 'ok'}


def test_notifications_mark_read(student_client, student):
    first = Notification.objects.create(user=student, type='event_update', title='One', message='m')
    Notification.objects.create(user=student, type='event_update', title='Two', message='m')

    single = student_client.post(f'/api/notifications/{first.id}/mark_read/')
    bulk = student_client.post('/api/notifications/mark_all_read/')

    assert single.data['is_read'] is True
    assert bulk.data == {'status': 'all_notifications_marked_read', 'updated': 1}
    assert not Notification.objects.filter(user=student, read_at__isnull=True).exists()
