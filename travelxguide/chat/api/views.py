from django.conf import settings
from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from travelxguide.chat.services import ChatError
from travelxguide.chat.services import post_message
from travelxguide.chat.services import recent_messages
from travelxguide.realtime.events.chat import publish_message_created
from travelxguide.realtime.presence import tracker

from .serializers import MessageCreateSerializer
from .serializers import MessageSerializer


@extend_schema(tags=["Chat"], responses=MessageSerializer(many=True))
class MessageHistoryView(APIView):
    def get(self, request, group_id: str):
        if group_id not in settings.CHAT_GROUPS:
            msg = "Unknown chat group"
            raise NotFound(msg)
        messages = recent_messages(group_id)
        data = MessageSerializer(messages, many=True).data
        return Response({"group_id": group_id, "messages": data})


@extend_schema(
    tags=["Chat"],
    request=MessageCreateSerializer,
    responses=MessageSerializer,
)
class MessageCreateView(APIView):
    def post(self, request):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            message = post_message(
                request.user,
                serializer.validated_data["group_id"],
                serializer.validated_data["message"],
            )
        except ChatError as exc:
            raise ValidationError({"message": [str(exc)]}) from exc
        transaction.on_commit(lambda: publish_message_created(message))
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Chat"], responses={200: None})
class OnlineUsersView(APIView):
    def get(self, request):
        return Response({"online_users": tracker.count})
