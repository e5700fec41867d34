from __future__ import annotations

from rest_framework import serializers

from travelxguide.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    unread = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = (
            "id",
            "title",
            "message",
            "notification_type",
            "related_link",
            "is_read",
            "unread",
            "read_at",
            "created_at",
        )
        read_only_fields = fields

    def get_unread(self, obj: Notification) -> bool:
        return not obj.is_read
