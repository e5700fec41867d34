"""Tour moderation state machine.

Allowed moves and who may make them:

    pending  -> approved   admin
    pending  -> rejected   admin
    pending  -> cancelled  host or admin
    approved -> cancelled  host or admin

Everything else raises InvalidTransition. ``transition`` is the only code path
that changes ``Tour.status`` after creation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import transaction
from django.utils import timezone

from travelxguide.audit.utils import log_action
from travelxguide.notifications.models import Notification
from travelxguide.notifications.services import notify
from travelxguide.realtime.events.tours import publish_tour_status_changed

from .models import Tour

if TYPE_CHECKING:
    from travelxguide.users.models import User

logger = logging.getLogger(__name__)

ADMIN = "admin"
HOST = "host"

Status = Tour.Status

TRANSITIONS: dict[tuple[str, str], frozenset[str]] = {
    (Status.PENDING, Status.APPROVED): frozenset({ADMIN}),
    (Status.PENDING, Status.REJECTED): frozenset({ADMIN}),
    (Status.PENDING, Status.CANCELLED): frozenset({HOST, ADMIN}),
    (Status.APPROVED, Status.CANCELLED): frozenset({HOST, ADMIN}),
}

REVIEW_OUTCOMES = (Status.APPROVED, Status.REJECTED)

_NOTIFICATION_TYPES = {
    Status.APPROVED: Notification.Type.TOUR_APPROVED,
    Status.REJECTED: Notification.Type.TOUR_REJECTED,
    Status.CANCELLED: Notification.Type.TOUR_CANCELLED,
}


class InvalidTransition(Exception):
    """The requested status change is not in the transition table."""


class TransitionNotPermitted(Exception):
    """The actor may not perform an otherwise valid transition."""


def actor_roles(tour: Tour, actor: User) -> frozenset[str]:
    roles = set()
    if getattr(actor, "is_platform_admin", False):
        roles.add(ADMIN)
    if actor is not None and actor.pk == tour.host_id:
        roles.add(HOST)
    return frozenset(roles)


def check_transition(tour: Tour, target: str, actor: User) -> None:
    current = tour.status
    allowed = TRANSITIONS.get((current, target))
    if allowed is None:
        if target in REVIEW_OUTCOMES:
            msg = "Tour is not pending approval"
        else:
            msg = f"Cannot change tour status from {current} to {target}"
        raise InvalidTransition(msg)
    if not actor_roles(tour, actor) & allowed:
        msg = f"You are not allowed to mark this tour as {target}"
        raise TransitionNotPermitted(msg)


def can_transition(tour: Tour, target: str, actor: User) -> bool:
    try:
        check_transition(tour, target, actor)
    except (InvalidTransition, TransitionNotPermitted):
        return False
    return True


@transaction.atomic
def transition(
    tour: Tour,
    target: str,
    *,
    actor: User,
    admin_notes: str | None = None,
) -> Tour:
    locked = Tour.objects.select_for_update().get(pk=tour.pk)
    check_transition(locked, target, actor)

    before = {"status": locked.status}
    locked.status = target
    update_fields = ["status", "updated_at"]
    if admin_notes:
        locked.admin_notes = admin_notes
        update_fields.append("admin_notes")
    if target == Status.APPROVED:
        locked.approved_by = actor
        locked.approved_at = timezone.now()
        update_fields += ["approved_by", "approved_at"]
    locked.save(update_fields=update_fields)

    if actor.pk != locked.host_id:
        notify(
            locked.host,
            f"Tour {target}",
            admin_notes or f'Your tour "{locked.title}" was {target}.',
            _NOTIFICATION_TYPES[target],
            related_link=f"/tours/{locked.pk}",
        )
    log_action(
        f"tour_{target}",
        actor=actor,
        target=locked,
        message=admin_notes or "",
        before=before,
        after={"status": target},
    )
    transaction.on_commit(lambda: publish_tour_status_changed(locked))
    logger.info(
        "Tour %s moved %s -> %s by %s",
        locked.pk,
        before["status"],
        target,
        actor.pk,
    )
    return locked
