"""Global Socket.IO server for the frontend.

Every feature (chat, notifications, tour moderation) emits through this one
server instance.

Frontend convention:
- Socket.IO path: settings.SOCKETIO_PATH (default ``ws/socket.io``)
- Auth: ``query.token``, ``auth.token`` or the ``access_token`` cookie

Rooms:
- ``user_<id>``: every socket of one user
- ``role_<role>``: every socket of users holding a role; staff also join
  ``role_admin``
- ``chat_<group>``: members of a chat group (see travelxguide.chat.sockets)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http.cookies import SimpleCookie
from typing import Any
from urllib.parse import parse_qs

import socketio
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken
from socketio.exceptions import ConnectionRefusedError  # noqa: A004

from travelxguide.users.authentication import CookieJWTAuthentication

from .presence import PresenceBroadcaster
from .presence import tracker

logger = logging.getLogger(__name__)


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=getattr(settings, "SOCKETIO_CORS_ALLOWED_ORIGINS", "*"),
    logger=False,
    engineio_logger=False,
)

broadcaster = PresenceBroadcaster(
    sio,
    tracker,
    interval=getattr(settings, "PRESENCE_BROADCAST_INTERVAL", 30),
)


@dataclass(frozen=True)
class UserRealtimeContext:
    user_id: int
    name: str
    role: str
    is_admin: bool = False

    def rooms(self) -> list[str]:
        rooms = [room_for_user(self.user_id), room_for_role(self.role)]
        # Staff accounts keep their own role but still moderate
        admin_room = room_for_role("admin")
        if self.is_admin and admin_room not in rooms:
            rooms.append(admin_room)
        return rooms


def _normalize_room_suffix(value: str) -> str:
    return "_".join(value.strip().lower().split())


def room_for_user(user_id: int) -> str:
    return f"user_{int(user_id)}"


def room_for_role(role: str) -> str:
    return f"role_{_normalize_room_suffix(role)}"


def room_for_chat(group_id: str) -> str:
    return f"chat_{_normalize_room_suffix(group_id)}"


@database_sync_to_async
def _get_user_context_from_access_token(token: str) -> UserRealtimeContext:
    jwt_auth = CookieJWTAuthentication()
    # AccessToken raises TokenError directly, keeping the expiry reason visible
    validated = AccessToken(token)
    user = jwt_auth.get_user(validated)
    return UserRealtimeContext(
        user_id=int(user.id),
        name=user.name or user.username,
        role=str(user.role),
        is_admin=user.is_platform_admin,
    )


def _scope(environ: dict[str, Any]) -> Any:
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            return inner
    return environ


def _cookie_token(scope: Any) -> str | None:
    raw_cookie = ""
    if isinstance(scope, dict) and "HTTP_COOKIE" in scope:
        raw_cookie = scope.get("HTTP_COOKIE", "")
    elif isinstance(scope, dict):
        for name, value in scope.get("headers", []) or []:
            if name in (b"cookie", "cookie"):
                raw_cookie = value
                break
    if isinstance(raw_cookie, (bytes, bytearray)):
        raw_cookie = raw_cookie.decode(errors="ignore")
    if not raw_cookie:
        return None
    cookie = SimpleCookie()
    cookie.load(str(raw_cookie))
    morsel = cookie.get(getattr(settings, "JWT_AUTH_COOKIE", "access_token"))
    return morsel.value if morsel is not None and morsel.value else None


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract JWT token from Socket.IO environ/auth.

    Handles python-socketio environ shapes across ASGI/WSGI servers.
    """

    scope = _scope(environ)

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token

    # Allow `auth: { token }` as fallback.
    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    return _cookie_token(scope)


async def get_user_context(sid: str) -> UserRealtimeContext | None:
    session = await sio.get_session(sid)
    if not isinstance(session, dict) or "user_id" not in session:
        return None
    return UserRealtimeContext(
        user_id=int(session["user_id"]),
        name=session.get("name", ""),
        role=session.get("role", ""),
        is_admin=bool(session.get("is_admin", False)),
    )


async def broadcast_online_count() -> None:
    await broadcaster.broadcast()


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    token = _extract_token(environ, auth)
    if not token:
        msg = "unauthorized"
        raise ConnectionRefusedError(msg)

    try:
        ctx = await _get_user_context_from_access_token(token)
    except TokenError as exc:
        message = str(exc)
        if "expired" in message.lower():
            msg = "jwt_expired"
            raise ConnectionRefusedError(msg) from exc
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except AuthenticationFailed as exc:  # user not found / inactive / blocked
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except Exception as exc:
        logger.exception("Socket.IO connect error")
        msg = "server_error"
        raise ConnectionRefusedError(msg) from exc

    await sio.save_session(
        sid,
        {
            "user_id": ctx.user_id,
            "name": ctx.name,
            "role": ctx.role,
            "is_admin": ctx.is_admin,
        },
    )
    for room in ctx.rooms():
        await sio.enter_room(sid, room)

    tracker.add(sid, ctx.user_id)
    logger.debug("Socket %s connected for user %s", sid, ctx.user_id)
    await broadcast_online_count()
    broadcaster.ensure_started()


@sio.event
async def disconnect(sid: str, *args):
    # Rooms/session are cleaned up by python-socketio.
    tracker.discard(sid)
    logger.debug("Socket %s disconnected", sid)
    await broadcast_online_count()


def emit_event_to_room(room: str, event: str, payload: Any) -> None:
    """Emit an event to a room from sync Django code."""

    async_to_sync(sio.emit)(event, payload, room=room)


def emit_event_to_user(user_id: int, event: str, payload: dict[str, Any]) -> None:
    emit_event_to_room(room_for_user(user_id), event, payload)


def emit_event_to_role(role: str, event: str, payload: dict[str, Any]) -> None:
    emit_event_to_room(room_for_role(role), event, payload)


def emit_event_to_chat(group_id: str, event: str, payload: dict[str, Any]) -> None:
    emit_event_to_room(room_for_chat(group_id), event, payload)
