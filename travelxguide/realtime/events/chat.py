from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from django.utils import timezone

if TYPE_CHECKING:  # import for type checking only
    from travelxguide.chat.models import Message
from travelxguide.realtime.socketio import emit_event_to_chat

RECEIVE_MESSAGE_EVENT = "receiveMessage"


def build_message_payload(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "groupId": message.group_id,
        "senderId": message.sender_id,
        "senderName": message.sender_name,
        "message": message.message,
        "createdAt": message.created_at.isoformat(),
        "timestamp": timezone.now().isoformat(),
    }


def publish_message_created(message: Message) -> None:
    """Relay a stored chat message to everyone in its group room."""

    emit_event_to_chat(
        message.group_id,
        RECEIVE_MESSAGE_EVENT,
        build_message_payload(message),
    )
