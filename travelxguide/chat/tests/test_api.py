from unittest import mock

import pytest
from django.test import override_settings
from rest_framework import status

from travelxguide.chat.models import Message
from travelxguide.chat.services import post_message
from travelxguide.realtime.presence import tracker

pytestmark = pytest.mark.django_db

GROUP = "travel-group"


def test_history_oldest_first(user, other_user, client_for):
    first = post_message(user, GROUP, "Hello")
    second = post_message(other_user, GROUP, "Hi Tina")

    r = client_for(user).get(f"/api/v1/chat/messages/{GROUP}/")
    assert r.status_code == status.HTTP_200_OK
    assert r.data["group_id"] == GROUP
    assert [m["id"] for m in r.data["messages"]] == [first.id, second.id]
    assert r.data["messages"][1]["sender_name"] == "Omar Other"


@override_settings(CHAT_HISTORY_LIMIT=2)
def test_history_is_capped_to_latest(user, client_for):
    posted = [post_message(user, GROUP, f"msg {i}") for i in range(3)]
    r = client_for(user).get(f"/api/v1/chat/messages/{GROUP}/")
    assert [m["id"] for m in r.data["messages"]] == [posted[1].id, posted[2].id]


def test_history_unknown_group(user, client_for):
    r = client_for(user).get("/api/v1/chat/messages/secret-room/")
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_history_requires_authentication(api_client):
    r = api_client.get(f"/api/v1/chat/messages/{GROUP}/")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_post_message_uses_authenticated_sender(
    user, other_user, client_for, django_capture_on_commit_callbacks
):
    with mock.patch("travelxguide.chat.api.views.publish_message_created") as push:
        with django_capture_on_commit_callbacks(execute=True):
            r = client_for(user).post(
                "/api/v1/chat/messages/",
                {"groupId": GROUP, "message": "  On my way  ", "sender": other_user.id},
                format="json",
            )
    assert r.status_code == status.HTTP_201_CREATED, r.data
    assert r.data["sender"] == user.id
    assert r.data["sender_name"] == "Tina Traveler"
    assert r.data["message"] == "On my way"
    push.assert_called_once_with(Message.objects.get())


@pytest.mark.parametrize(
    ("payload", "field"),
    [
        ({"group_id": GROUP, "message": "   "}, "message"),
        ({"group_id": "nope", "message": "hi"}, "group_id"),
        ({"message": "hi"}, "group_id"),
    ],
)
def test_post_message_validation(user, client_for, payload, field):
    r = client_for(user).post("/api/v1/chat/messages/", payload, format="json")
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert field in r.data
    assert not Message.objects.exists()


def test_online_users(user, client_for):
    tracker.clear()
    tracker.add("sid-a", 1)
    tracker.add("sid-b", 1)
    try:
        r = client_for(user).get("/api/v1/chat/online/")
    finally:
        tracker.clear()
    assert r.status_code == status.HTTP_200_OK
    assert r.data == {"online_users": 2}
