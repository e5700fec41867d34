from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class NotificationQuerySet(models.QuerySet):
    def unread(self):
        return self.filter(is_read=False)

    def mark_read(self) -> int:
        return self.unread().update(is_read=True, read_at=timezone.now())


class Notification(models.Model):
    """In-app message for one user, pushed over the socket when created."""

    class Type(models.TextChoices):
        TOUR_SUBMITTED = "tour_submitted", _("Tour Submitted")
        TOUR_APPROVED = "tour_approved", _("Tour Approved")
        TOUR_REJECTED = "tour_rejected", _("Tour Rejected")
        TOUR_CANCELLED = "tour_cancelled", _("Tour Cancelled")
        GUIDE_APPLICATION = "guide_application", _("Guide Application")
        GUIDE_APPROVED = "guide_approved", _("Guide Approved")
        GUIDE_REJECTED = "guide_rejected", _("Guide Rejected")
        OTHER = "other", _("Other")

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    notification_type = models.CharField(
        max_length=50,
        choices=Type.choices,
        default=Type.OTHER,
    )
    # Frontend route the notification points to, e.g. /tours/12
    related_link = models.CharField(max_length=500, blank=True, default="")
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["recipient", "is_read"],
                name="notification_inbox_idx",
            ),
        ]

    def __str__(self):
        return f"{self.title} -> {self.recipient_id}"

    def mark_read(self) -> None:
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at"])
