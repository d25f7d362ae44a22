from django.core.management.base import BaseCommand, CommandError

from events.models import Event
from events.utils import update_event_analytics


class Command(BaseCommand):
    help = 'Recomputes analytics summaries for all events, or a single event'

    def add_arguments(self, parser):
        parser.add_argument('--event', type=int, help='Only refresh this event id')

    def handle(self, *args, **options):
        events = Event.objects.all()
        if options.get('event'):
            events = events.filter(pk=options['event'])
            if not events.exists():
                raise CommandError(f"Event {options['event']} does not exist")

        count = 0
        for event in events.iterator():
            update_event_analytics(event)
            count += 1

        self.stdout.write(self.style.SUCCESS(f'Refreshed analytics for {count} events'))
