from django.conf import settings
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from travelxguide.tours.models import Tour
from travelxguide.tours.models import compute_duration_days
from travelxguide.users.api.serializers import UserSummarySerializer


class TourSerializer(serializers.ModelSerializer):
    host = UserSummarySerializer(read_only=True)
    approved_by = UserSummarySerializer(read_only=True)
    images = serializers.ListField(
        child=serializers.CharField(max_length=500),
        required=False,
        default=list,
    )

    class Meta:
        model = Tour
        fields = [
            "id",
            "host",
            "title",
            "description",
            "location",
            "duration",
            "price",
            "max_participants",
            "start_date",
            "end_date",
            "images",
            "location_photo",
            "category",
            "difficulty",
            "status",
            "admin_notes",
            "approved_by",
            "approved_at",
            "created_at",
            "updated_at",
        ]
        # Moderation fields only change through the workflow endpoints
        read_only_fields = [
            "id",
            "host",
            "duration",
            "status",
            "admin_notes",
            "approved_by",
            "approved_at",
            "created_at",
            "updated_at",
        ]

    def validate(self, attrs):
        instance = getattr(self, "instance", None)
        start = attrs.get("start_date", getattr(instance, "start_date", None))
        end = attrs.get("end_date", getattr(instance, "end_date", None))

        if "start_date" in attrs and start <= timezone.localdate():
            raise serializers.ValidationError(
                {"start_date": [_("Start date must be in the future")]},
            )
        if end <= start:
            raise serializers.ValidationError(
                {"end_date": [_("End date must be after start date")]},
            )
        duration = compute_duration_days(start, end)
        if duration > settings.TOUR_MAX_DURATION_DAYS:
            raise serializers.ValidationError(
                {
                    "end_date": [
                        _("Tours cannot last longer than %(days)s days")
                        % {"days": settings.TOUR_MAX_DURATION_DAYS},
                    ],
                },
            )
        attrs["duration"] = duration
        return attrs


class TourReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[Tour.Status.APPROVED, Tour.Status.REJECTED],
        error_messages={"invalid_choice": _("Invalid status")},
    )
    admin_notes = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )


class TourCancelSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )
