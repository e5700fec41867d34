from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:  # import for type checking only
    from travelxguide.tours.models import Tour
from travelxguide.realtime.socketio import emit_event_to_role
from travelxguide.realtime.socketio import emit_event_to_user

TOUR_STATUS_EVENT = "tourStatusChanged"
TOUR_SUBMITTED_EVENT = "tourSubmitted"


def build_tour_payload(tour: Tour) -> dict[str, Any]:
    return {
        "id": tour.id,
        "title": tour.title,
        "status": tour.status,
        "hostId": tour.host_id,
        "adminNotes": tour.admin_notes,
    }


def publish_tour_status_changed(tour: Tour) -> None:
    emit_event_to_user(tour.host_id, TOUR_STATUS_EVENT, build_tour_payload(tour))


def publish_tour_submitted(tour: Tour) -> None:
    """Tell connected admins a new tour is waiting for moderation."""

    emit_event_to_role("admin", TOUR_SUBMITTED_EVENT, build_tour_payload(tour))
