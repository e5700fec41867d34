from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from drf_spectacular.utils import inline_serializer
from rest_framework import mixins
from rest_framework import serializers
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from travelxguide.notifications.models import Notification

from .filters import NotificationFilter
from .serializers import NotificationSerializer


@extend_schema_view(
    list=extend_schema(tags=["Notifications"]),
    destroy=extend_schema(tags=["Notifications"]),
    mark_read=extend_schema(tags=["Notifications"], request=None),
    mark_all_read=extend_schema(tags=["Notifications"], request=None),
    unread_count=extend_schema(
        tags=["Notifications"],
        responses=inline_serializer(
            "UnreadCount", {"unread": serializers.IntegerField()}
        ),
    ),
)
class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """The authenticated user's inbox. Other users' rows behave as missing."""

    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = NotificationFilter

    def get_queryset(self):
        return Notification.objects.filter(recipient=self.request.user)

    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request, pk=None):
        self.get_object().mark_read()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"], url_path="mark-all-read")
    def mark_all_read(self, request):
        self.get_queryset().mark_read()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, url_path="unread-count", filter_backends=[])
    def unread_count(self, request):
        return Response({"unread": self.get_queryset().unread().count()})
