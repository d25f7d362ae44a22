from django.contrib.auth import get_user_model
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import AnalyticsSummary, Attendance, Event, Feedback, Registration
from .utils import get_user_profile, update_event_analytics

User = get_user_model()


@receiver(post_save, sender=User)
def ensure_user_profile(sender, instance, created, raw=False, **kwargs):
    """
    Guarantee that every user has a related profile.
    """
    if raw:
        return
    get_user_profile(instance, create_if_missing=True)


def _event_id_for(instance):
    if isinstance(instance, Registration):
        return instance.event_id
    return Registration.objects.filter(pk=instance.registration_id).values_list('event_id', flat=True).first()


@receiver(post_save, sender=Registration)
@receiver(post_save, sender=Attendance)
@receiver(post_save, sender=Feedback)
def refresh_analytics_on_save(sender, instance, raw=False, **kwargs):
    if raw:
        return
    event = Event.objects.filter(pk=_event_id_for(instance)).first()
    if event:
        update_event_analytics(event)


@receiver(post_delete, sender=Registration)
@receiver(post_delete, sender=Attendance)
@receiver(post_delete, sender=Feedback)
def refresh_analytics_on_delete(sender, instance, **kwargs):
    event_id = _event_id_for(instance)
    # Cascading deletes: only touch summaries that already exist for surviving events
    if not event_id or not AnalyticsSummary.objects.filter(event_id=event_id).exists():
        return
    event = Event.objects.filter(pk=event_id).first()
    if event:
        update_event_analytics(event)
