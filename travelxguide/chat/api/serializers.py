from django.conf import settings
from rest_framework import serializers

from travelxguide.chat.models import Message


class MessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Message
        fields = ["id", "group_id", "sender", "sender_name", "message", "created_at"]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    group_id = serializers.CharField(max_length=100)
    message = serializers.CharField(max_length=settings.CHAT_MESSAGE_MAX_LENGTH)

    def to_internal_value(self, data):
        # The socket client uses camelCase; accept it here too
        if hasattr(data, "get") and "group_id" not in data and "groupId" in data:
            data = {"group_id": data.get("groupId"), "message": data.get("message")}
        return super().to_internal_value(data)

    def validate_group_id(self, value: str) -> str:
        if value not in settings.CHAT_GROUPS:
            msg = "Unknown chat group"
            raise serializers.ValidationError(msg)
        return value
