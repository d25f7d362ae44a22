from django.core.management.base import BaseCommand
from django.contrib.auth.models import User
from django.db import transaction
from django.utils import timezone
from datetime import timedelta

from events.models import (
    College,
    EventCategory,
    Event,
    EventTag,
    UserProfile,
    Registration,
)


class Command(BaseCommand):
    help = "Seeds a demo college, users, categories, events and registrations for local testing."

    def handle(self, *args, **options):
        self.stdout.write(self.style.NOTICE("Starting demo data seeding..."))
        with transaction.atomic():
            college = self._seed_college()
            self._seed_users(college)
            categories = self._seed_categories()
            events = self._seed_events(college, categories)
            self._seed_registrations(events)
        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully."))

    def _seed_college(self):
        college, _ = College.objects.get_or_create(
            name="Riverside Institute of Technology",
            defaults={
                "domain": "riverside.edu",
                "contact_email": "events@riverside.edu",
                "address": "1 College Road",
            },
        )
        return college

    def _seed_user(self, college, username, email, name, role, is_staff=False, **profile_fields):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={
                "email": email,
                "is_staff": is_staff,
                "is_superuser": is_staff,
            },
        )
        if created:
            user.set_password("123")
            user.save()
        # The post_save signal creates the profile; point it at the demo college
        UserProfile.objects.filter(user=user).update(
            college=college, name=name, role=role, **profile_fields
        )
        return user

    def _seed_users(self, college):
        self._seed_user(college, "admin", "admin@riverside.edu", "Campus Admin", "admin", is_staff=True)
        self._seed_user(
            college, "student", "student@riverside.edu", "Sample Student", "student",
            student_id="RIT-2024-001", phone="555-0100",
        )
        self._seed_user(
            college, "student2", "student2@riverside.edu", "Second Student", "student",
            student_id="RIT-2024-002",
        )

    def _seed_categories(self):
        categories = {}
        for cat_name, desc in [
            ("Technical", "Hackathons, coding contests and workshops"),
            ("Career", "Placement drives, career fairs and networking"),
            ("Cultural", "Festivals, music and performances"),
        ]:
            category, _ = EventCategory.objects.get_or_create(
                name=cat_name,
                defaults={"description": desc},
            )
            categories[cat_name] = category
        return categories

    def _seed_events(self, college, categories):
        admin = User.objects.get(username="admin")
        now = timezone.now()
        events_seed = [
            {
                "title": "Spring Hackathon",
                "description": "24-hour hackathon on campus sustainability.",
                "event_type": "hackathon",
                "days_from_now": 10,
                "venue": "Innovation Lab",
                "capacity": 120,
                "categories": ["Technical"],
            },
            {
                "title": "Career Fair",
                "description": "Meet recruiters from engineering and finance firms.",
                "event_type": "fair",
                "days_from_now": 5,
                "venue": "Main Hall",
                "capacity": 400,
                "categories": ["Career"],
            },
            {
                "title": "Machine Learning Workshop",
                "description": "Hands-on introduction to model training.",
                "event_type": "workshop",
                "days_from_now": 15,
                "venue": "Lecture Theatre 2",
                "capacity": 2,
                "categories": ["Technical", "Career"],
            },
            {
                "title": "Cultural Night",
                "description": "Music, dance and food from around the world.",
                "event_type": "festival",
                "days_from_now": 30,
                "venue": "Open Air Theatre",
                "capacity": 500,
                "categories": ["Cultural"],
            },
        ]

        created_events = []
        for data in events_seed:
            event_date = now + timedelta(days=data["days_from_now"])
            event, _ = Event.objects.get_or_create(
                title=data["title"],
                college=college,
                defaults={
                    "description": data["description"],
                    "event_type": data["event_type"],
                    "event_date": event_date,
                    "registration_deadline": event_date - timedelta(days=1),
                    "venue": data["venue"],
                    "capacity": data["capacity"],
                    "created_by": admin,
                    "status": "published",
                },
            )
            for name in data["categories"]:
                EventTag.objects.get_or_create(event=event, category=categories[name])
            created_events.append(event)

        return created_events

    def _seed_registrations(self, events):
        students = list(User.objects.filter(username__in=["student", "student2"]).order_by("username"))
        for event in events[:3]:
            for student in students:
                Registration.objects.get_or_create(
                    event=event,
                    student=student,
                    defaults={"registration_status": "confirmed"},
                )
