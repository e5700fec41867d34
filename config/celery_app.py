import os

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

# Deployed workers default to production settings. Local runs and pytest set
# DJANGO_SETTINGS_MODULE themselves, so setdefault leaves them alone.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.production")

app = Celery("travelxguide")

# All Celery options live in Django settings under the CELERY_ prefix
app.config_from_object("django.conf:settings", namespace="CELERY")

app.conf.beat_schedule = {
    "purge-expired-otps": {
        "task": "users.purge_expired_otps",
        "schedule": crontab(minute=0),
    },
}


@setup_logging.connect
def config_loggers(*args, **kwargs):
    # Workers log through the same LOGGING dictConfig as the web process
    from logging.config import dictConfig  # noqa: PLC0415

    from django.conf import settings  # noqa: PLC0415

    dictConfig(settings.LOGGING)


# Picks up tasks.py in every installed app (users, guides)
app.autodiscover_tasks()
