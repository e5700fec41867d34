from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings

from .models import Message

if TYPE_CHECKING:
    from travelxguide.users.models import User


class ChatError(Exception):
    """A chat request that cannot be accepted; the message is shown to the sender."""


def is_known_group(group_id: object) -> bool:
    return isinstance(group_id, str) and group_id in settings.CHAT_GROUPS


def clean_message_text(text: object) -> str:
    if not isinstance(text, str) or not text.strip():
        msg = "Message cannot be empty"
        raise ChatError(msg)
    text = text.strip()
    if len(text) > settings.CHAT_MESSAGE_MAX_LENGTH:
        msg = f"Message is longer than {settings.CHAT_MESSAGE_MAX_LENGTH} characters"
        raise ChatError(msg)
    return text


def display_name(user: User) -> str:
    return user.name or user.username


def post_message(sender: User, group_id: str, text: object) -> Message:
    if not is_known_group(group_id):
        msg = "Unknown chat group"
        raise ChatError(msg)
    return Message.objects.create(
        group_id=group_id,
        sender=sender,
        sender_name=display_name(sender),
        message=clean_message_text(text),
    )


def recent_messages(group_id: str, limit: int | None = None) -> list[Message]:
    """Latest ``limit`` messages of a group, oldest first."""
    limit = limit or settings.CHAT_HISTORY_LIMIT
    newest_first = Message.objects.filter(group_id=group_id).order_by(
        "-created_at", "-id"
    )[:limit]
    return list(reversed(newest_first))
