from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model

from .models import AuditLog

if TYPE_CHECKING:
    from django.db.models import Model
    from django.http import HttpRequest

USER_AGENT_MAX_LENGTH = 255


def client_ip(request: HttpRequest | None) -> str:
    if request is None:
        return ""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    return request.META.get("REMOTE_ADDR", "") or ""


def user_agent(request: HttpRequest | None) -> str:
    if request is None:
        return ""
    return request.META.get("HTTP_USER_AGENT", "")[:USER_AGENT_MAX_LENGTH]


def log_action(  # noqa: PLR0913
    action: str,
    *,
    actor: object | None = None,
    target: Model | None = None,
    message: str = "",
    model_name: str = "",
    record_id: int | None = None,
    before: dict | list | None = None,
    after: dict | list | None = None,
    request: HttpRequest | None = None,
) -> AuditLog:
    """Store an audit row.

    ``target`` fills ``model_name``/``record_id`` from a saved model instance.
    ``request`` fills the client address and user agent. Actors that are not
    users (``"cron"``, ``None``) are recorded as system actions.
    """
    user_model = get_user_model()
    actor_user = actor if isinstance(actor, user_model) else None
    if target is not None:
        model_name = type(target).__name__
        record_id = target.pk
    return AuditLog.objects.create(
        action=action,
        actor=actor_user,
        actor_role=getattr(actor_user, "role", "") or "",
        message=message,
        model_name=model_name,
        record_id=record_id,
        before=before,
        after=after,
        ip_address=client_ip(request),
        user_agent=user_agent(request),
    )
