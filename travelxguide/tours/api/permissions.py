from rest_framework.permissions import BasePermission

from travelxguide.users.api.permissions import is_platform_admin


class IsVerifiedAccount(BasePermission):
    message = "Please verify your email before hosting tours"

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and user.is_account_verified)


class IsTourHostOrAdmin(BasePermission):
    """Object-level: the tour's host, or a platform admin."""

    message = "You can only manage your own tours"

    def has_object_permission(self, request, view, obj):
        user = request.user
        return is_platform_admin(user) or obj.host_id == getattr(user, "pk", None)
