from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from travelxguide.realtime.socketio import emit_event_to_user

if TYPE_CHECKING:
    from travelxguide.notifications.models import Notification

NOTIFICATION_EVENT = "notification"


def build_notification_payload(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.notification_type,
        "link": notification.related_link,
        "isRead": notification.is_read,
        "createdAt": notification.created_at.isoformat(),
    }


def publish_notification_created(notification: Notification) -> None:
    emit_event_to_user(
        notification.recipient_id,
        NOTIFICATION_EVENT,
        build_notification_payload(notification),
    )
