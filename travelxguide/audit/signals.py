from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

from .utils import log_action


@receiver(user_logged_in)
def record_login(sender, request, user, **kwargs):
    log_action("login", actor=user, target=user, request=request)
