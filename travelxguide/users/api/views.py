from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.mixins import ListModelMixin
from rest_framework.mixins import RetrieveModelMixin
from rest_framework.mixins import UpdateModelMixin
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from travelxguide.audit.utils import log_action
from travelxguide.users.models import User
from travelxguide.users.services import revoke_refresh_tokens

from .filters import UserFilter
from .permissions import IsPlatformAdmin
from .permissions import is_platform_admin
from .serializers import UserSerializer


@extend_schema_view(
    list=extend_schema(tags=["Users"]),
    retrieve=extend_schema(tags=["Users"]),
    partial_update=extend_schema(tags=["Users"]),
    update=extend_schema(tags=["Users"]),
    me=extend_schema(tags=["Users"]),
    block=extend_schema(tags=["Users"], request=None),
    unblock=extend_schema(tags=["Users"], request=None),
)
class UserViewSet(RetrieveModelMixin, ListModelMixin, UpdateModelMixin, GenericViewSet):
    """Admins manage every account; everyone else only sees and edits their own."""

    serializer_class = UserSerializer
    lookup_field = "username"
    filter_backends = [DjangoFilterBackend]
    filterset_class = UserFilter

    def get_queryset(self):
        user = self.request.user
        if is_platform_admin(user):
            return User.objects.order_by("-created_at", "-id")
        return User.objects.filter(pk=user.pk)

    @action(detail=False, filter_backends=[])
    def me(self, request):
        serializer = self.get_serializer(request.user)
        return Response(serializer.data)

    @action(detail=True, methods=["post"], permission_classes=[IsPlatformAdmin])
    def block(self, request, username=None):
        return self._set_blocked(request, blocked=True)

    @action(detail=True, methods=["post"], permission_classes=[IsPlatformAdmin])
    def unblock(self, request, username=None):
        return self._set_blocked(request, blocked=False)

    def _set_blocked(self, request, *, blocked: bool):
        target = self.get_object()
        if target.pk == request.user.pk:
            return Response(
                {"detail": "You cannot block your own account."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        before = {"is_blocked": target.is_blocked}
        target.is_blocked = blocked
        target.save(update_fields=["is_blocked", "updated_at"])
        if blocked:
            # Access tokens are refused by CookieJWTAuthentication; refresh
            # tokens must not mint new ones either
            revoke_refresh_tokens(target)
        log_action(
            "user_blocked" if blocked else "user_unblocked",
            actor=request.user,
            target=target,
            message=f"username={target.username}",
            request=request,
            before=before,
            after={"is_blocked": blocked},
        )
        return Response(self.get_serializer(target).data)

    def perform_update(self, serializer):
        instance = serializer.save()
        log_action(
            "user_updated",
            actor=self.request.user,
            target=instance,
            message=f"username={instance.username}",
            request=self.request,
        )
