import io
import logging
import secrets
from datetime import datetime
from typing import Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.db.models import Avg
from django.utils import timezone

from .models import (
    AnalyticsSummary,
    Attendance,
    College,
    Event,
    Feedback,
    Notification,
    Registration,
    UserProfile,
)

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ('confirmed', 'pending')
EMAIL_NOTIFICATION_TYPES = ('registration_confirmation', 'event_cancelled', 'event_update')


def send_email_notification(user, subject, message):
    """
    Send email notification to user
    """
    if not user.email:
        return False
    try:
        send_mail(
            subject,
            message,
            settings.DEFAULT_FROM_EMAIL,
            [user.email],
            fail_silently=False,
        )
        return True
    except Exception:
        logger.exception("Failed to send email to %s", user.email)
    return False


def send_notification(user, title, message, notification_type, event=None):
    """Utility function to send notifications"""
    notification = Notification.objects.create(
        user=user,
        title=title,
        message=message,
        type=notification_type,
        event=event
    )

    if notification_type in EMAIL_NOTIFICATION_TYPES:
        send_email_notification(user, title, message)

    return notification


def notify_registrants(event, title, message, notification_type, statuses=ACTIVE_STATUSES + ('waitlisted',)):
    """Notify every student whose registration for the event is in one of ``statuses``."""
    registrations = event.registrations.filter(
        registration_status__in=statuses
    ).select_related('student')
    count = 0
    for registration in registrations:
        send_notification(registration.student, title, message, notification_type, event=event)
        count += 1
    logger.info("Sent %s '%s' notifications for event %s", count, notification_type, event.pk)
    return count


def display_name(user):
    profile = getattr(user, 'profile', None)
    if profile and profile.name:
        return profile.name
    return user.get_full_name() or user.username


def generate_qr_code(registration):
    """Check-in token for a registration: the event id plus an unguessable suffix."""
    return f"{registration.event_id}-{secrets.token_urlsafe(16)}"


def render_qr_png(data):
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def update_event_analytics(event):
    """Rebuild the analytics summary row for one event."""
    total_registrations = Registration.objects.filter(
        event=event, registration_status__in=ACTIVE_STATUSES
    ).count()
    total_attendance = Attendance.objects.filter(registration__event=event).count()
    feedback = Feedback.objects.filter(registration__event=event)
    feedback_count = feedback.count()
    avg_rating = feedback.aggregate(avg=Avg('rating'))['avg']

    if total_registrations:
        attendance_percentage = round(total_attendance / total_registrations * 100, 2)
    else:
        attendance_percentage = 0

    summary, _ = AnalyticsSummary.objects.update_or_create(
        event=event,
        defaults={
            'total_registrations': total_registrations,
            'total_attendance': total_attendance,
            'attendance_percentage': attendance_percentage,
            'avg_rating': round(avg_rating, 2) if avg_rating is not None else None,
            'feedback_count': feedback_count,
        }
    )
    return summary


def promote_from_waitlist(event):
    """
    Promote the earliest waitlisted registration when a seat opens.
    Runs inside the caller's transaction when there is one; the promoted
    student is told separately through ``announce_promotion``.
    """
    with transaction.atomic():
        event = Event.objects.select_for_update().get(pk=event.pk)
        if event.is_full:
            return None

        next_in_line = Registration.objects.select_for_update().filter(
            event=event,
            registration_status='waitlisted'
        ).order_by('registration_date', 'pk').first()
        if not next_in_line:
            return None

        next_in_line.registration_status = 'confirmed'
        next_in_line.save(update_fields=['registration_status'])

    logger.info("Promoted registration %s from waitlist for event %s", next_in_line.pk, event.pk)
    return next_in_line


def announce_promotion(registration):
    send_notification(
        user=registration.student,
        title="Waitlist Promotion",
        message=f"A seat opened up: {display_name(registration.student)} is now confirmed for {registration.event.title}",
        notification_type='registration_confirmation',
        event=registration.event
    )


def waitlist_position(registration):
    return Registration.objects.filter(
        event_id=registration.event_id,
        registration_status='waitlisted',
        registration_date__lte=registration.registration_date,
    ).count()


def get_default_college():
    college = College.objects.order_by('created_at', 'pk').first()
    if college:
        return college
    logger.warning("No colleges exist, creating the default college")
    return College.objects.create(
        name="Default College",
        domain="default.edu",
        contact_email="admin@default.edu",
    )


def default_profile_name(user):
    if user.get_full_name():
        return user.get_full_name()
    if user.email:
        return user.email.split('@')[0]
    return "User"


def get_user_profile(user, create_if_missing: bool = False) -> Optional[UserProfile]:
    """
    Safely retrieve the profile for a user. Optionally create it if missing,
    attaching it to the default college.
    """
    if not user or not user.is_authenticated:
        return None

    try:
        profile = user.profile
    except UserProfile.DoesNotExist:
        if not create_if_missing:
            return None
        profile = UserProfile.objects.create(
            user=user,
            college=get_default_college(),
            name=default_profile_name(user),
            role='admin' if user.is_staff else 'student',
        )
        return profile

    if profile.college_id is None and create_if_missing:
        profile.college = get_default_college()
        profile.save(update_fields=['college'])
    return profile


def combine_date_time(date_str, time_str):
    """Parse separate form fields (``YYYY-MM-DD`` and ``HH:MM``) into an aware datetime."""
    value = datetime.strptime(f"{date_str} {time_str}", "%Y-%m-%d %H:%M")
    return timezone.make_aware(value)
