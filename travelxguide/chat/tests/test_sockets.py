from unittest import mock

import pytest
from asgiref.sync import async_to_sync

from travelxguide.chat import sockets
from travelxguide.chat.services import ChatError
from travelxguide.realtime.socketio import sio

SESSION = {"user_id": 4, "name": "Tina Traveler", "role": "traveler"}


@pytest.fixture
def fake_sio():
    with (
        mock.patch.object(sio, "get_session", new_callable=mock.AsyncMock) as get,
        mock.patch.object(sio, "save_session", new_callable=mock.AsyncMock) as save,
        mock.patch.object(sio, "enter_room", new_callable=mock.AsyncMock) as enter,
        mock.patch.object(sio, "emit", new_callable=mock.AsyncMock) as emit,
    ):
        get.return_value = dict(SESSION)
        yield mock.Mock(get_session=get, save_session=save, enter_room=enter, emit=emit)


def test_join_known_group(fake_sio):
    async_to_sync(sockets.join_group)("sid-1", {"groupId": "travel-group"})

    fake_sio.save_session.assert_awaited_once_with(
        "sid-1", {**SESSION, "chat_groups": ["travel-group"]}
    )
    fake_sio.enter_room.assert_awaited_once_with("sid-1", "chat_travel-group")


@pytest.mark.parametrize("data", [{"groupId": "vip"}, {}, "travel-group", None])
def test_join_unknown_group(fake_sio, data):
    async_to_sync(sockets.join_group)("sid-1", data)

    fake_sio.enter_room.assert_not_awaited()
    fake_sio.emit.assert_awaited_once_with(
        "chatError", {"message": "Unknown chat group"}, to="sid-1"
    )


def test_send_requires_joined_group(fake_sio):
    with mock.patch.object(sockets, "_store_message", new_callable=mock.AsyncMock) as store:
        async_to_sync(sockets.send_message)(
            "sid-1", {"groupId": "travel-group", "message": "hi"}
        )
    store.assert_not_awaited()
    fake_sio.emit.assert_awaited_once_with(
        "chatError", {"message": "Join the group before sending messages"}, to="sid-1"
    )


def test_send_broadcasts_stored_message(fake_sio):
    fake_sio.get_session.return_value = {**SESSION, "chat_groups": ["travel-group"]}
    payload = {"id": 1, "groupId": "travel-group", "message": "hi"}
    with mock.patch.object(
        sockets, "_store_message", new_callable=mock.AsyncMock, return_value=payload
    ) as store:
        async_to_sync(sockets.send_message)(
            "sid-1",
            {"groupId": "travel-group", "message": "hi", "senderId": 999},
        )

    # Sender comes from the session, never from the payload
    store.assert_awaited_once_with(4, "travel-group", "hi")
    fake_sio.emit.assert_awaited_once_with(
        "receiveMessage", payload, room="chat_travel-group"
    )


def test_send_reports_validation_errors(fake_sio):
    fake_sio.get_session.return_value = {**SESSION, "chat_groups": ["travel-group"]}
    with mock.patch.object(
        sockets,
        "_store_message",
        new_callable=mock.AsyncMock,
        side_effect=ChatError("Message cannot be empty"),
    ):
        async_to_sync(sockets.send_message)(
            "sid-1", {"groupId": "travel-group", "message": "  "}
        )

    fake_sio.emit.assert_awaited_once_with(
        "chatError", {"message": "Message cannot be empty"}, to="sid-1"
    )


def test_send_without_session(fake_sio):
    fake_sio.get_session.return_value = {}
    async_to_sync(sockets.send_message)("sid-1", {"groupId": "travel-group"})
    fake_sio.emit.assert_awaited_once_with(
        "chatError", {"message": "Not authenticated"}, to="sid-1"
    )


def test_typing_skips_sender(fake_sio):
    fake_sio.get_session.return_value = {**SESSION, "chat_groups": ["travel-group"]}
    async_to_sync(sockets.typing)("sid-1", {"groupId": "travel-group", "isTyping": 1})

    fake_sio.emit.assert_awaited_once_with(
        "userTyping",
        {"userName": "Tina Traveler", "isTyping": True},
        room="chat_travel-group",
        skip_sid="sid-1",
    )


def test_typing_outside_group_is_ignored(fake_sio):
    async_to_sync(sockets.typing)("sid-1", {"groupId": "travel-group", "isTyping": True})
    fake_sio.emit.assert_not_awaited()
