from django.urls import path

from travelxguide.chat.api.views import MessageCreateView
from travelxguide.chat.api.views import MessageHistoryView
from travelxguide.chat.api.views import OnlineUsersView

app_name = "chat"

urlpatterns = [
    path("messages/", MessageCreateView.as_view(), name="message-create"),
    path(
        "messages/<str:group_id>/",
        MessageHistoryView.as_view(),
        name="message-history",
    ),
    path("online/", OnlineUsersView.as_view(), name="online"),
]
