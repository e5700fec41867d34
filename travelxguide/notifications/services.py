"""Creating notifications. Delivery over the socket happens in ``signals``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db.models import Q

from .models import Notification

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from travelxguide.users.models import User

logger = logging.getLogger(__name__)


def notify(
    recipient: User,
    title: str,
    message: str,
    notification_type: str = Notification.Type.OTHER,
    related_link: str = "",
) -> Notification:
    return Notification.objects.create(
        recipient=recipient,
        title=title,
        message=message,
        notification_type=notification_type,
        related_link=related_link,
    )


def platform_admins() -> QuerySet[User]:
    user_model = get_user_model()
    return user_model.objects.filter(
        Q(role=user_model.Role.ADMIN) | Q(is_staff=True) | Q(is_superuser=True),
        is_active=True,
        is_blocked=False,
    )


def notify_admins(
    title: str,
    message: str,
    notification_type: str = Notification.Type.OTHER,
    related_link: str = "",
    *,
    exclude: User | None = None,
) -> list[Notification]:
    admins = platform_admins()
    if exclude is not None:
        admins = admins.exclude(pk=exclude.pk)
    # One row per admin so each gets its own socket push
    created = [
        notify(admin, title, message, notification_type, related_link)
        for admin in admins
    ]
    logger.debug("Notified %s admins: %s", len(created), title)
    return created
