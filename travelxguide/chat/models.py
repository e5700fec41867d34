from django.conf import settings
from django.db import models


class Message(models.Model):
    """A chat message. Rows are append-only: never edited, never deleted via API."""

    group_id = models.CharField(max_length=100)
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="chat_messages",
    )
    sender_name = models.CharField(max_length=255)
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["group_id", "created_at"],
                name="chat_group_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"[{self.group_id}] {self.sender_name}: {self.message[:50]}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            msg = "Chat messages are append-only"
            raise ValueError(msg)
        super().save(*args, **kwargs)
