from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


def search_terms(values) -> str:
    """Casefolded, newline-delimited copy of a list of names.

    Every item is wrapped in newlines so a substring lookup can never span
    two items.
    """
    items = [" ".join(str(value).split()).casefold() for value in values or []]
    items = [item for item in items if item]
    return "\n" + "\n".join(items) + "\n" if items else ""


class GuideApplicationQuerySet(models.QuerySet):
    def approved(self):
        return self.filter(status=GuideApplication.Status.APPROVED, is_active=True)

    def pending(self):
        return self.filter(status=GuideApplication.Status.PENDING)

    def open_for(self, user):
        """Applications that block ``user`` from applying again."""
        return self.filter(
            applicant=user,
            status__in=[
                GuideApplication.Status.PENDING,
                GuideApplication.Status.APPROVED,
            ],
        )


class GuideApplication(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="guide_applications",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=20)
    experience = models.TextField()
    languages = models.JSONField(default=list)
    destinations = models.JSONField(default=list)
    # Lookup columns for the public directory, derived in save()
    language_terms = models.TextField(blank=True, default="", editable=False)
    destination_terms = models.TextField(blank=True, default="", editable=False)
    bio = models.TextField()
    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    profile_image = models.CharField(max_length=500, blank=True, default="")

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    admin_notes = models.TextField(blank=True, default="")
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_guide_applications",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)

    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    tours_completed = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = GuideApplicationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.name} <{self.email}> ({self.status})"

    def save(self, *args, **kwargs):
        self.language_terms = search_terms(self.languages)
        self.destination_terms = search_terms(self.destinations)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            update_fields = set(update_fields)
            if "languages" in update_fields:
                update_fields.add("language_terms")
            if "destinations" in update_fields:
                update_fields.add("destination_terms")
            kwargs["update_fields"] = update_fields
        super().save(*args, **kwargs)
