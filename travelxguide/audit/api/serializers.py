from __future__ import annotations

from rest_framework import serializers

from travelxguide.audit.models import AuditLog
from travelxguide.users.api.serializers import UserSummarySerializer


class AuditLogSerializer(serializers.ModelSerializer):
    actor = UserSummarySerializer(allow_null=True, read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "action",
            "actor",
            "actor_role",
            "message",
            "model_name",
            "record_id",
            "before",
            "after",
            "ip_address",
            "user_agent",
            "created_at",
        ]
        read_only_fields = fields
