"""
ASGI entry point for travelxguide: Django plus the Socket.IO server.

Run with ``uvicorn config.asgi:application``. Requests under
``SOCKETIO_PATH`` (Engine.IO polling and WebSocket upgrades) go to Socket.IO;
everything else falls through to Django.
"""

import os

from django.core.asgi import get_asgi_application

if "DJANGO_SETTINGS_MODULE" not in os.environ:
    local = os.environ.get("BUILD_ENV", "production").lower() == "local"
    os.environ["DJANGO_SETTINGS_MODULE"] = (
        "config.settings.local" if local else "config.settings.production"
    )

# Populate the app registry before importing anything that touches models
django_application = get_asgi_application()

from django.conf import settings  # noqa: E402
from socketio import ASGIApp  # noqa: E402

from travelxguide.realtime.socketio import sio  # noqa: E402

application = ASGIApp(
    sio,
    other_asgi_app=django_application,
    socketio_path=settings.SOCKETIO_PATH,
)
