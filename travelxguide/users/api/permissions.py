from rest_framework.permissions import BasePermission


def is_platform_admin(user) -> bool:
    if not (user and getattr(user, "is_authenticated", False)):
        return False
    return bool(getattr(user, "is_platform_admin", False))


class IsPlatformAdmin(BasePermission):
    """Allow access only to staff or users with the admin role."""

    def has_permission(self, request, view):
        return is_platform_admin(getattr(request, "user", None))
