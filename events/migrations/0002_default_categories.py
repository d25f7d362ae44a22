from django.db import migrations


DEFAULT_CATEGORIES = [
    ('Academic', 'Lectures, seminars and guest talks', '#3B82F6', 'book-open'),
    ('Technical', 'Hackathons, coding contests and workshops', '#10B981', 'cpu'),
    ('Cultural', 'Festivals, music and performances', '#F59E0B', 'music'),
    ('Sports', 'Tournaments and fitness events', '#EF4444', 'trophy'),
    ('Career', 'Placement drives, career fairs and networking', '#8B5CF6', 'briefcase'),
    ('Social', 'Club meetups and community service', '#EC4899', 'users'),
]


def create_default_categories(apps, schema_editor):
    EventCategory = apps.get_model('events', 'EventCategory')
    for name, description, color_code, icon in DEFAULT_CATEGORIES:
        EventCategory.objects.get_or_create(
            name=name,
            defaults={
                'description': description,
                'color_code': color_code,
                'icon': icon,
                'active': True,
            }
        )


def remove_default_categories(apps, schema_editor):
    EventCategory = apps.get_model('events', 'EventCategory')
    EventCategory.objects.filter(
        name__in=[name for name, _, _, _ in DEFAULT_CATEGORIES],
        tags__isnull=True,
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('events', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_default_categories, remove_default_categories),
    ]
