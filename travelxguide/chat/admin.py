from django.contrib import admin

from travelxguide.chat import models


@admin.register(models.Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ["id", "group_id", "sender_name", "message", "created_at"]
    search_fields = ["sender_name", "message"]
    list_filter = ["group_id", "created_at"]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
