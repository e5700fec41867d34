"""Guide application lifecycle: submit, then a single admin review."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import transaction
from django.utils import timezone

from travelxguide.audit.utils import log_action
from travelxguide.notifications.models import Notification
from travelxguide.notifications.services import notify
from travelxguide.notifications.services import notify_admins

from .models import GuideApplication
from .tasks import notify_admins_of_application

if TYPE_CHECKING:
    from travelxguide.users.models import User

logger = logging.getLogger(__name__)

REVIEW_OUTCOMES = (GuideApplication.Status.APPROVED, GuideApplication.Status.REJECTED)


class ApplicationError(Exception):
    """Raised when a guide application cannot be submitted or reviewed."""


@transaction.atomic
def submit_application(applicant: User, **fields) -> GuideApplication:
    if GuideApplication.objects.open_for(applicant).exists():
        msg = "You already have a pending or approved guide application"
        raise ApplicationError(msg)

    application = GuideApplication.objects.create(applicant=applicant, **fields)
    notify_admins(
        "New guide application",
        f"{application.name} applied to become a guide.",
        Notification.Type.GUIDE_APPLICATION,
        related_link=f"/admin/guides/{application.pk}",
    )
    log_action(
        "guide_application_submitted",
        actor=applicant,
        target=application,
        after={"status": application.status},
    )
    transaction.on_commit(lambda: notify_admins_of_application.delay(application.pk))
    logger.info("Guide application %s submitted by %s", application.pk, applicant.pk)
    return application


@transaction.atomic
def review_application(
    application: GuideApplication,
    *,
    status: str,
    reviewer: User,
    admin_notes: str = "",
) -> GuideApplication:
    if status not in REVIEW_OUTCOMES:
        msg = "Invalid status. Must be 'approved' or 'rejected'"
        raise ApplicationError(msg)

    locked = GuideApplication.objects.select_for_update().get(pk=application.pk)
    if locked.status != GuideApplication.Status.PENDING:
        msg = "Only pending applications can be reviewed"
        raise ApplicationError(msg)

    before = {"status": locked.status}
    locked.status = status
    locked.admin_notes = admin_notes or ""
    locked.reviewed_by = reviewer
    locked.reviewed_at = timezone.now()
    locked.save(
        update_fields=[
            "status",
            "admin_notes",
            "reviewed_by",
            "reviewed_at",
            "updated_at",
        ],
    )

    applicant = locked.applicant
    if status == GuideApplication.Status.APPROVED:
        if applicant.role == applicant.Role.TRAVELER:
            applicant.role = applicant.Role.GUIDE
            applicant.save(update_fields=["role", "updated_at"])
        notify(
            applicant,
            "Guide application approved",
            "Congratulations! You are now a verified guide.",
            Notification.Type.GUIDE_APPROVED,
        )
    else:
        notify(
            applicant,
            "Guide application rejected",
            admin_notes or "Your guide application was not approved.",
            Notification.Type.GUIDE_REJECTED,
        )

    log_action(
        f"guide_application_{status}",
        actor=reviewer,
        target=locked,
        message=admin_notes,
        before=before,
        after={"status": status},
    )
    return locked
