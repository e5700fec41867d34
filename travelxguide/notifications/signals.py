from django.db.models.signals import post_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from travelxguide.realtime.events.notifications import publish_notification_created

from .models import Notification


@receiver(post_save, sender=Notification)
def push_new_notification(sender, instance, created, **kwargs):
    # Only the first save is pushed; mark-read updates stay silent
    if created:
        on_commit(lambda: publish_notification_created(instance))
