from django.conf import settings
from django.urls import include
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from travelxguide.guides.api.views import GuideApplicationAdminViewSet
from travelxguide.guides.api.views import GuideViewSet
from travelxguide.notifications.api.views import NotificationViewSet
from travelxguide.tours.api.views import TourViewSet
from travelxguide.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet, basename="user")
# Admin moderation of guide applications
router.register(
    "guides/applications",
    GuideApplicationAdminViewSet,
    basename="guide-applications",
)
router.register("guides", GuideViewSet, basename="guides")
router.register("tours", TourViewSet, basename="tours")
router.register("notifications", NotificationViewSet, basename="notifications")


app_name = "api"
urlpatterns = [
    path(
        "audit/",
        include(("travelxguide.audit.api.urls", "audit"), namespace="audit"),
    ),
    path(
        "chat/",
        include(("travelxguide.chat.api.urls", "chat"), namespace="chat"),
    ),
    *router.urls,
]
