from __future__ import annotations

import math
from datetime import date
from datetime import datetime

from django.conf import settings
from django.core.validators import MaxLengthValidator
from django.core.validators import MaxValueValidator
from django.core.validators import MinValueValidator
from django.db import models
from django.urls import reverse
from django.utils.translation import gettext_lazy as _


def compute_duration_days(start: date | datetime, end: date | datetime) -> int:
    """Whole days between start and end, rounding partial days up."""
    seconds = (end - start).total_seconds()
    return math.ceil(seconds / 86400)


class TourQuerySet(models.QuerySet):
    def approved(self):
        return self.filter(status=Tour.Status.APPROVED)

    def pending(self):
        return self.filter(status=Tour.Status.PENDING)

    def hosted_by(self, user):
        return self.filter(host=user)

    def with_status(self, status: str | None):
        """Filter by status; blank or ``all`` leaves the queryset untouched."""
        if not status or status == "all":
            return self
        return self.filter(status=status)

    def visible_to(self, user):
        if getattr(user, "is_platform_admin", False):
            return self
        if user is not None and user.is_authenticated:
            return self.filter(
                models.Q(status=Tour.Status.APPROVED) | models.Q(host=user),
            )
        return self.approved()


class Tour(models.Model):
    class Category(models.TextChoices):
        ADVENTURE = "Adventure", _("Adventure")
        CULTURAL = "Cultural", _("Cultural")
        HISTORICAL = "Historical", _("Historical")
        NATURE = "Nature", _("Nature")
        FOOD = "Food", _("Food")
        CITY = "City", _("City")
        BEACH = "Beach", _("Beach")
        MOUNTAIN = "Mountain", _("Mountain")
        OTHER = "Other", _("Other")

    class Difficulty(models.TextChoices):
        EASY = "Easy", _("Easy")
        MODERATE = "Moderate", _("Moderate")
        HARD = "Hard", _("Hard")
        EXPERT = "Expert", _("Expert")

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")
        CANCELLED = "cancelled", _("Cancelled")

    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hosted_tours",
    )
    title = models.CharField(max_length=100)
    description = models.TextField(validators=[MaxLengthValidator(1000)])
    location = models.CharField(max_length=255)
    duration = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(30)],
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    max_participants = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(50)],
    )
    start_date = models.DateField()
    end_date = models.DateField()
    images = models.JSONField(default=list, blank=True)
    location_photo = models.CharField(max_length=500, blank=True, default="")
    category = models.CharField(max_length=20, choices=Category.choices)
    difficulty = models.CharField(max_length=20, choices=Difficulty.choices)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    admin_notes = models.CharField(max_length=500, blank=True, default="")
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_tours",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TourQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="tour_end_after_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.status})"

    def save(self, *args, **kwargs):
        if self.start_date and self.end_date:
            self.duration = compute_duration_days(self.start_date, self.end_date)
        super().save(*args, **kwargs)

    def get_absolute_url(self) -> str:
        return reverse("api_v1:tours-detail", kwargs={"pk": self.pk})
