import logging
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from events.models import Event, Notification
from events.utils import send_notification

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Sends a reminder notification to confirmed registrants of events starting soon'

    def add_arguments(self, parser):
        parser.add_argument('--hours', type=int, default=24, help='Look-ahead window in hours')

    def handle(self, *args, **options):
        now = timezone.now()
        window_end = now + timedelta(hours=options['hours'])
        events = Event.objects.filter(
            status='published',
            event_date__gte=now,
            event_date__lte=window_end,
        ).order_by('event_date')

        sent = 0
        for event in events:
            already_reminded = set(
                Notification.objects.filter(event=event, type='event_reminder').values_list('user_id', flat=True)
            )
            registrations = event.registrations.filter(
                registration_status='confirmed'
            ).exclude(student_id__in=already_reminded).select_related('student')

            starts_at = timezone.localtime(event.event_date)
            for registration in registrations:
                send_notification(
                    user=registration.student,
                    title=f"Reminder: {event.title}",
                    message=f"{event.title} starts at {starts_at:%Y-%m-%d %H:%M} in {event.venue}.",
                    notification_type='event_reminder',
                    event=event,
                )
                sent += 1

        logger.info("Sent %s event reminders", sent)
        self.stdout.write(self.style.SUCCESS(f'Sent {sent} reminders'))
