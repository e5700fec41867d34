"""Liveness endpoint for load balancers and the deploy pipeline.

The database and Redis (cache, Celery broker) decide the overall status. The
realtime section is informational: it reports this process's socket presence
and never marks the service unhealthy.
"""

from __future__ import annotations

import logging
from typing import Any

import redis
from django.conf import settings
from django.db import connection
from django.db import transaction
from django.http import JsonResponse

logger = logging.getLogger(__name__)

REDIS_TIMEOUT = 0.5


def check_db() -> dict[str, Any]:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except Exception as exc:  # noqa: BLE001 - report, never crash
        logger.warning("Health check: database unavailable: %s", exc)
        return {"ok": False, "error": str(exc)}
    return {"ok": True, "vendor": connection.vendor}


def check_redis() -> dict[str, Any]:
    url = getattr(settings, "REDIS_URL", None)
    if not url:
        return {"ok": False, "error": "REDIS_URL not configured"}
    try:
        redis.Redis.from_url(
            url,
            socket_timeout=REDIS_TIMEOUT,
            socket_connect_timeout=REDIS_TIMEOUT,
        ).ping()
    except Exception as exc:  # noqa: BLE001 - report, never crash
        logger.warning("Health check: redis unavailable: %s", exc)
        return {"ok": False, "error": str(exc)}
    return {"ok": True}


def realtime_info() -> dict[str, Any]:
    from travelxguide.realtime.presence import tracker  # noqa: PLC0415

    return {"online_sockets": tracker.count, "path": settings.SOCKETIO_PATH}


@transaction.non_atomic_requests
def health(request):
    components = {"db": check_db(), "redis": check_redis()}
    healthy = [c["ok"] for c in components.values()]

    if all(healthy):
        status, http_status = "ok", 200
    elif any(healthy):
        status, http_status = "degraded", 503
    else:
        status, http_status = "down", 503

    return JsonResponse(
        {
            "status": status,
            "components": components,
            "realtime": realtime_info(),
        },
        status=http_status,
    )
