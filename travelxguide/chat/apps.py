from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class ChatConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "travelxguide.chat"
    verbose_name = _("Chat")

    def ready(self):
        # Registers the Socket.IO event handlers on the shared server
        import travelxguide.chat.sockets  # noqa: F401, PLC0415
