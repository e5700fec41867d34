from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from travelxguide.audit.api.serializers import AuditLogSerializer
from travelxguide.audit.models import AuditLog
from travelxguide.users.api.permissions import IsPlatformAdmin

DEFAULT_LIMIT = 5
MAX_LIMIT = 50


def parse_limit(raw) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return max(1, min(limit, MAX_LIMIT))


@extend_schema(
    tags=["Audit"],
    parameters=[
        OpenApiParameter("limit", OpenApiTypes.INT, description="1..50, default 5"),
        OpenApiParameter("action", OpenApiTypes.STR),
    ],
)
class RecentAuditView(APIView):
    """Newest audit rows first, for the admin dashboard."""

    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        limit = parse_limit(request.query_params.get("limit", DEFAULT_LIMIT))
        rows = AuditLog.objects.recent(
            limit, action=request.query_params.get("action") or None
        )
        data = AuditLogSerializer(rows, many=True).data
        return Response({"results": data, "limit": limit})
