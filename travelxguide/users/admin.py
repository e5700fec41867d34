from django.contrib import admin
from django.contrib.auth import admin as auth_admin
from django.utils.translation import gettext_lazy as _

from travelxguide.users.models import User


@admin.register(User)
class UserAdmin(auth_admin.UserAdmin):
    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Personal info"), {"fields": ("name", "email", "phone", "location")}),
        (
            _("Marketplace"),
            {
                "fields": (
                    "role",
                    "oauth_provider",
                    "oauth_id",
                    "is_account_verified",
                    "is_blocked",
                ),
            },
        ),
        (
            _("Permissions"),
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )
    list_display = ["username", "email", "name", "role", "is_blocked", "is_superuser"]
    search_fields = ["name", "email", "username"]
    list_filter = ["role", "is_blocked", "is_account_verified", "oauth_provider"]
