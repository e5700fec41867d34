from django.conf import settings
from django.db import models


class AuditLogQuerySet(models.QuerySet):
    def for_record(self, model_name: str, record_id: int):
        return self.filter(model_name=model_name, record_id=record_id)

    def recent(self, limit: int, *, action: str | None = None):
        qs = self.select_related("actor")
        if action:
            qs = qs.filter(action=action)
        return qs.order_by("-created_at", "-id")[:limit]


class AuditLog(models.Model):
    """One row per moderation, account or login event. Rows are never edited."""

    action = models.CharField(max_length=100, db_index=True)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_entries",
    )
    # Role at the time of the action; the user's role can change later
    actor_role = models.CharField(max_length=20, blank=True)
    message = models.TextField(blank=True)
    model_name = models.CharField(max_length=150, blank=True)
    record_id = models.BigIntegerField(null=True, blank=True)
    before = models.JSONField(null=True, blank=True)
    after = models.JSONField(null=True, blank=True)
    ip_address = models.CharField(max_length=64, blank=True)
    user_agent = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["model_name", "record_id"],
                name="audit_record_idx",
            ),
        ]

    def __str__(self) -> str:
        who = self.actor_id or "system"
        return f"[{self.created_at:%Y-%m-%d %H:%M:%S}] {who}: {self.action}"
