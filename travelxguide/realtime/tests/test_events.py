from unittest import mock

import pytest

from travelxguide.chat.models import Message
from travelxguide.notifications.services import notify
from travelxguide.realtime.events.chat import build_message_payload
from travelxguide.realtime.events.chat import publish_message_created
from travelxguide.realtime.events.notifications import build_notification_payload
from travelxguide.realtime.events.notifications import publish_notification_created
from travelxguide.realtime.events.tours import publish_tour_status_changed
from travelxguide.realtime.events.tours import publish_tour_submitted

pytestmark = pytest.mark.django_db


def test_notification_payload(user):
    notification = notify(user, "Hello", "World", related_link="/x")
    payload = build_notification_payload(notification)
    assert payload["title"] == "Hello"
    assert payload["type"] == "other"
    assert payload["link"] == "/x"
    assert payload["createdAt"] == notification.created_at.isoformat()


def test_publish_notification_targets_recipient_room(user):
    notification = notify(user, "Hello", "World")
    with mock.patch(
        "travelxguide.realtime.events.notifications.emit_event_to_user"
    ) as emit:
        publish_notification_created(notification)
    emit.assert_called_once()
    assert emit.call_args.args[:2] == (user.pk, "notification")


def test_message_payload(user):
    msg = Message.objects.create(
        group_id="travel-group",
        sender=user,
        sender_name="Tina Traveler",
        message="hi all",
    )
    payload = build_message_payload(msg)
    assert payload["groupId"] == "travel-group"
    assert payload["senderId"] == user.pk
    assert payload["senderName"] == "Tina Traveler"
    assert payload["message"] == "hi all"
    assert payload["createdAt"] == msg.created_at.isoformat()

    with mock.patch("travelxguide.realtime.events.chat.emit_event_to_chat") as emit:
        publish_message_created(msg)
    assert emit.call_args.args[:2] == ("travel-group", "receiveMessage")


def test_tour_events_are_routed(user, make_tour):
    tour = make_tour(user)
    with mock.patch("travelxguide.realtime.events.tours.emit_event_to_user") as to_user:
        publish_tour_status_changed(tour)
    assert to_user.call_args.args[:2] == (user.pk, "tourStatusChanged")

    with mock.patch("travelxguide.realtime.events.tours.emit_event_to_role") as to_role:
        publish_tour_submitted(tour)
    assert to_role.call_args.args[:2] == ("admin", "tourSubmitted")
