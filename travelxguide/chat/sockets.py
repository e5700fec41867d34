"""Socket.IO chat events: joinGroup, sendMessage and typing.

Sender identity always comes from the authenticated socket session; any
sender fields in the client payload are ignored.
"""

from __future__ import annotations

import logging
from typing import Any

from channels.db import database_sync_to_async
from django.contrib.auth import get_user_model

from travelxguide.realtime.events.chat import RECEIVE_MESSAGE_EVENT
from travelxguide.realtime.events.chat import build_message_payload
from travelxguide.realtime.socketio import get_user_context
from travelxguide.realtime.socketio import room_for_chat
from travelxguide.realtime.socketio import sio

from .services import ChatError
from .services import is_known_group
from .services import post_message

logger = logging.getLogger(__name__)

CHAT_ERROR_EVENT = "chatError"
USER_TYPING_EVENT = "userTyping"


@database_sync_to_async
def _store_message(user_id: int, group_id: str, text: Any) -> dict[str, Any]:
    sender = get_user_model().objects.get(pk=user_id)
    return build_message_payload(post_message(sender, group_id, text))


async def _chat_error(sid: str, message: str) -> None:
    await sio.emit(CHAT_ERROR_EVENT, {"message": message}, to=sid)


def _group_from(data: Any) -> str | None:
    if isinstance(data, dict):
        group_id = data.get("groupId")
        return group_id if isinstance(group_id, str) else None
    return None


async def _joined_groups(sid: str) -> list[str]:
    session = await sio.get_session(sid)
    if not isinstance(session, dict):
        return []
    return list(session.get("chat_groups", []))


@sio.on("joinGroup")
async def join_group(sid: str, data: Any):
    group_id = _group_from(data)
    if not is_known_group(group_id):
        await _chat_error(sid, "Unknown chat group")
        return

    session = await sio.get_session(sid)
    if not isinstance(session, dict):
        session = {}
    groups = set(session.get("chat_groups", []))
    groups.add(group_id)
    await sio.save_session(sid, {**session, "chat_groups": sorted(groups)})
    await sio.enter_room(sid, room_for_chat(group_id))
    logger.debug("Socket %s joined chat group %s", sid, group_id)


@sio.on("sendMessage")
async def send_message(sid: str, data: Any):
    ctx = await get_user_context(sid)
    if ctx is None:
        await _chat_error(sid, "Not authenticated")
        return

    group_id = _group_from(data)
    if group_id not in await _joined_groups(sid):
        await _chat_error(sid, "Join the group before sending messages")
        return

    try:
        payload = await _store_message(ctx.user_id, group_id, data.get("message"))
    except ChatError as exc:
        await _chat_error(sid, str(exc))
        return
    except Exception:
        logger.exception("Failed to store chat message from user %s", ctx.user_id)
        await _chat_error(sid, "Failed to send message")
        return

    await sio.emit(RECEIVE_MESSAGE_EVENT, payload, room=room_for_chat(group_id))


@sio.on("typing")
async def typing(sid: str, data: Any):
    ctx = await get_user_context(sid)
    group_id = _group_from(data)
    if ctx is None or group_id not in await _joined_groups(sid):
        return
    await sio.emit(
        USER_TYPING_EVENT,
        {"userName": ctx.name, "isTyping": bool(data.get("isTyping"))},
        room=room_for_chat(group_id),
        skip_sid=sid,
    )
