from django.contrib import admin

from travelxguide.audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = [
        "created_at",
        "action",
        "actor",
        "actor_role",
        "model_name",
        "record_id",
    ]
    list_filter = ["action", "actor_role", "model_name"]
    search_fields = ["action", "message", "actor__email", "ip_address"]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
