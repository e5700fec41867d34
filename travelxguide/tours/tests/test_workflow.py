from unittest import mock

import pytest

from travelxguide.audit.models import AuditLog
from travelxguide.notifications.models import Notification
from travelxguide.tours import workflow
from travelxguide.tours.models import Tour

pytestmark = pytest.mark.django_db

ALL_STATUSES = [s.value for s in Tour.Status]


@pytest.mark.parametrize("current", ALL_STATUSES)
@pytest.mark.parametrize("target", ALL_STATUSES)
def test_transition_table(current, target, user, platform_admin, make_tour):
    tour = make_tour(user, status=current)
    allowed = workflow.TRANSITIONS.get((current, target), frozenset())

    assert workflow.can_transition(tour, target, platform_admin) == (
        workflow.ADMIN in allowed
    )
    assert workflow.can_transition(tour, target, user) == (workflow.HOST in allowed)


def test_stranger_cannot_cancel(user, other_user, make_tour):
    tour = make_tour(user, status=Tour.Status.APPROVED)
    with pytest.raises(workflow.TransitionNotPermitted):
        workflow.check_transition(tour, Tour.Status.CANCELLED, other_user)


def test_review_of_non_pending_tour(user, platform_admin, make_tour):
    tour = make_tour(user, status=Tour.Status.REJECTED)
    with pytest.raises(workflow.InvalidTransition, match="not pending approval"):
        workflow.check_transition(tour, Tour.Status.APPROVED, platform_admin)


def test_approve_records_moderator(
    user, platform_admin, make_tour, django_capture_on_commit_callbacks
):
    tour = make_tour(user)
    with mock.patch(
        "travelxguide.tours.workflow.publish_tour_status_changed"
    ) as push, mock.patch(
        "travelxguide.notifications.signals.publish_notification_created"
    ):
        with django_capture_on_commit_callbacks(execute=True):
            result = workflow.transition(
                tour, Tour.Status.APPROVED, actor=platform_admin, admin_notes="Lovely"
            )

    tour.refresh_from_db()
    assert tour.status == Tour.Status.APPROVED
    assert tour.approved_by == platform_admin
    assert tour.approved_at is not None
    assert tour.admin_notes == "Lovely"
    push.assert_called_once_with(result)

    notification = Notification.objects.get(recipient=user)
    assert notification.notification_type == Notification.Type.TOUR_APPROVED
    assert notification.message == "Lovely"

    log = AuditLog.objects.get(action="tour_approved")
    assert log.before == {"status": "pending"}
    assert log.after == {"status": "approved"}


def test_host_cancel_does_not_notify_host(user, make_tour):
    tour = make_tour(user, status=Tour.Status.APPROVED)
    workflow.transition(tour, Tour.Status.CANCELLED, actor=user)
    tour.refresh_from_db()
    assert tour.status == Tour.Status.CANCELLED
    assert not Notification.objects.filter(recipient=user).exists()


def test_invalid_transition_leaves_tour_untouched(user, platform_admin, make_tour):
    tour = make_tour(user, status=Tour.Status.CANCELLED)
    with pytest.raises(workflow.InvalidTransition):
        workflow.transition(tour, Tour.Status.PENDING, actor=platform_admin)
    tour.refresh_from_db()
    assert tour.status == Tour.Status.CANCELLED
    assert not AuditLog.objects.exists()
