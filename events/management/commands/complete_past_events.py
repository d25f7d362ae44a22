from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from events.models import Event


class Command(BaseCommand):
    help = 'Marks published events that have finished as completed'

    def handle(self, *args, **kwargs):
        cutoff = timezone.now() - timedelta(hours=settings.EVENT_DURATION_HOURS)
        updated = Event.objects.filter(status='published', event_date__lt=cutoff).update(
            status='completed', updated_at=timezone.now()
        )
        self.stdout.write(self.style.SUCCESS(f'Marked {updated} events as completed'))
