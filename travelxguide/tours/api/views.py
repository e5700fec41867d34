import logging

from django.db import transaction
from django.utils.translation import gettext_lazy as _
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet

from travelxguide.audit.utils import log_action
from travelxguide.notifications.models import Notification
from travelxguide.notifications.services import notify_admins
from travelxguide.realtime.events.tours import publish_tour_submitted
from travelxguide.tours import workflow
from travelxguide.tours.models import Tour
from travelxguide.users.api.permissions import IsPlatformAdmin
from travelxguide.users.api.permissions import is_platform_admin

from .filters import TourFilter
from .permissions import IsTourHostOrAdmin
from .permissions import IsVerifiedAccount
from .serializers import TourCancelSerializer
from .serializers import TourReviewSerializer
from .serializers import TourSerializer

logger = logging.getLogger(__name__)

STATUS_PARAM = OpenApiParameter(
    "status",
    str,
    description="pending, approved, rejected, cancelled or all",
)


@extend_schema_view(
    list=extend_schema(tags=["Tours"]),
    create=extend_schema(tags=["Tours"]),
    retrieve=extend_schema(tags=["Tours"]),
    update=extend_schema(tags=["Tours"]),
    partial_update=extend_schema(tags=["Tours"]),
    destroy=extend_schema(tags=["Tours"]),
    mine=extend_schema(tags=["Tours"], parameters=[STATUS_PARAM]),
    pending=extend_schema(tags=["Tours"]),
    all_tours=extend_schema(tags=["Tours"], parameters=[STATUS_PARAM]),
    review=extend_schema(tags=["Tours"], request=TourReviewSerializer),
    cancel=extend_schema(tags=["Tours"], request=TourCancelSerializer),
)
class TourViewSet(ModelViewSet):
    """Tour listings and their moderation workflow.

    Public listing shows approved tours only; hosts see their own tours through
    ``mine``; admins moderate through ``pending``, ``all`` and ``review``.
    """

    serializer_class = TourSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = TourFilter

    def get_permissions(self):
        if self.action == "list":
            return [AllowAny()]
        if self.action == "create":
            return [IsAuthenticated(), IsVerifiedAccount()]
        if self.action in {"pending", "all_tours", "review"}:
            return [IsPlatformAdmin()]
        if self.action in {"update", "partial_update", "destroy", "cancel"}:
            return [IsAuthenticated(), IsTourHostOrAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        qs = Tour.objects.select_related("host", "approved_by")
        if self.action == "list":
            return qs.approved()
        return qs.visible_to(self.request.user)

    def perform_create(self, serializer):
        tour = serializer.save(host=self.request.user, status=Tour.Status.PENDING)
        log_action(
            "tour_submitted",
            actor=self.request.user,
            target=tour,
            request=self.request,
            after={"status": tour.status},
        )
        notify_admins(
            "New tour awaiting review",
            f'"{tour.title}" in {tour.location} needs moderation.',
            Notification.Type.TOUR_SUBMITTED,
            related_link=f"/admin/tours/{tour.pk}",
            exclude=self.request.user,
        )
        transaction.on_commit(lambda: publish_tour_submitted(tour))
        logger.info("Tour %s submitted by %s", tour.pk, self.request.user.pk)

    def create(self, request, *args, **kwargs):
        response = super().create(request, *args, **kwargs)
        response.data = {
            "detail": _(
                "Tour hosting request submitted successfully. "
                "Waiting for admin approval.",
            ),
            "tour": response.data,
        }
        return response

    def perform_update(self, serializer):
        tour = serializer.instance
        if tour.host_id != self.request.user.pk:
            raise PermissionDenied(_("You can only update your own tours"))
        if tour.status != Tour.Status.PENDING:
            raise ValidationError({"detail": _("Can only update pending tours")})
        serializer.save()

    def perform_destroy(self, instance):
        user = self.request.user
        if not is_platform_admin(user):
            if instance.host_id != user.pk:
                raise PermissionDenied(_("You can only delete your own tours"))
            if instance.status != Tour.Status.PENDING:
                raise ValidationError({"detail": _("Can only delete pending tours")})
        log_action(
            "tour_deleted",
            actor=user,
            target=instance,
            request=self.request,
            before={"status": instance.status, "title": instance.title},
        )
        instance.delete()

    def _paginated(self, queryset):
        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)

    @action(detail=False)
    def mine(self, request):
        qs = (
            Tour.objects.select_related("host", "approved_by")
            .hosted_by(request.user)
            .with_status(request.query_params.get("status"))
        )
        return self._paginated(qs)

    @action(detail=False)
    def pending(self, request):
        qs = Tour.objects.select_related("host").pending().order_by("created_at", "id")
        return self._paginated(qs)

    @action(detail=False, url_path="all")
    def all_tours(self, request):
        qs = Tour.objects.select_related("host", "approved_by").with_status(
            request.query_params.get("status"),
        )
        return self._paginated(qs)

    def _transition(self, request, target: str, admin_notes: str):
        tour = self.get_object()
        try:
            tour = workflow.transition(
                tour, target, actor=request.user, admin_notes=admin_notes
            )
        except workflow.InvalidTransition as exc:
            raise ValidationError({"detail": str(exc)}) from exc
        except workflow.TransitionNotPermitted as exc:
            raise PermissionDenied(str(exc)) from exc
        serializer = self.get_serializer(tour)
        message = _("Tour %(status)s successfully") % {"status": tour.status}
        return Response(
            {"detail": message, "tour": serializer.data},
            status=status.HTTP_200_OK,
        )

    @action(detail=True, methods=["post"])
    def review(self, request, pk=None):
        payload = TourReviewSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        return self._transition(
            request,
            payload.validated_data["status"],
            payload.validated_data["admin_notes"],
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        payload = TourCancelSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        return self._transition(
            request,
            Tour.Status.CANCELLED,
            payload.validated_data["admin_notes"],
        )
