from django.contrib import admin

from travelxguide.notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["created_at", "recipient", "notification_type", "title", "is_read"]
    list_filter = ["notification_type", "is_read"]
    search_fields = ["title", "message", "recipient__email"]
    raw_id_fields = ["recipient"]
