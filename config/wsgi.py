"""
WSGI entry point for travelxguide.

Serves the REST API only. Socket.IO needs the ASGI application in
``config.asgi``, so deployments that want realtime chat run that one instead.
"""

import os

from django.core.wsgi import get_wsgi_application

if "DJANGO_SETTINGS_MODULE" not in os.environ:
    # BUILD_ENV=local is set by the development image
    local = os.environ.get("BUILD_ENV", "production").lower() == "local"
    os.environ["DJANGO_SETTINGS_MODULE"] = (
        "config.settings.local" if local else "config.settings.production"
    )

application = get_wsgi_application()
