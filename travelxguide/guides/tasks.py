from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from travelxguide.guides.models import GuideApplication

logger = logging.getLogger(__name__)


@shared_task(name="guides.notify_admins_of_application")
def notify_admins_of_application(application_id: int) -> bool:
    recipients = list(getattr(settings, "GUIDE_APPLICATION_ADMIN_EMAILS", []))
    if not recipients:
        logger.info("No admin emails configured; skipping guide application mail")
        return False

    application = GuideApplication.objects.filter(pk=application_id).first()
    if application is None:
        logger.warning("Guide application %s vanished before mailing", application_id)
        return False

    body = "\n".join(
        [
            "A new guide application has been submitted.",
            "",
            f"Name: {application.name}",
            f"Email: {application.email}",
            f"Phone: {application.phone}",
            f"Languages: {', '.join(application.languages)}",
            f"Destinations: {', '.join(application.destinations)}",
            f"Hourly rate: {application.hourly_rate}",
            "",
            f"Experience: {application.experience}",
            "",
            "Please review the application in the admin panel.",
        ],
    )
    send_mail(
        subject=f"New Guide Application - {application.name}",
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=recipients,
        fail_silently=False,
    )
    return True
