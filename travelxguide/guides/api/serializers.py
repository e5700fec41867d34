import re
from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from travelxguide.guides.models import GuideApplication
from travelxguide.users.api.serializers import UserSummarySerializer
from travelxguide.users.api.serializers import _validate_email_value
from travelxguide.users.api.serializers import _validate_new_password

PHONE_RE = re.compile(r"^[0-9]{10,15}$")


class StringListField(serializers.ListField):
    """List of non-blank strings; a single string is accepted as a one-item list."""

    child = serializers.CharField(max_length=100)

    def __init__(self, **kwargs):
        kwargs.setdefault("allow_empty", False)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = [data]
        values = super().to_internal_value(data)
        return [v.strip() for v in values if v.strip()]


class GuideApplicationSerializer(serializers.ModelSerializer):
    """Applicant-facing shape: what the user submitted and where it stands."""

    languages = StringListField()
    destinations = StringListField()
    # Only used when an anonymous visitor applies and needs an account
    password = serializers.CharField(
        write_only=True, required=False, trim_whitespace=False
    )

    class Meta:
        model = GuideApplication
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "password",
            "experience",
            "languages",
            "destinations",
            "bio",
            "hourly_rate",
            "profile_image",
            "status",
            "admin_notes",
            "reviewed_at",
            "created_at",
        ]
        read_only_fields = ["id", "status", "admin_notes", "reviewed_at", "created_at"]

    def validate_email(self, value: str) -> str:
        return _validate_email_value(value)

    def validate_phone(self, value: str) -> str:
        digits = re.sub(r"\s", "", value)
        if not PHONE_RE.match(digits):
            raise serializers.ValidationError(
                _("Please enter a valid phone number (10-15 digits)"),
            )
        return digits

    def validate_hourly_rate(self, value: Decimal) -> Decimal:
        minimum = Decimal(str(settings.GUIDE_MIN_HOURLY_RATE))
        if value < minimum:
            raise serializers.ValidationError(
                _("Hourly rate must be at least %(minimum)s") % {"minimum": minimum},
            )
        return value

    def validate(self, attrs):
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            attrs.pop("password", None)
            return attrs

        password = attrs.get("password")
        if not password:
            raise serializers.ValidationError(
                {"password": [_("This field is required.")]},
            )
        if get_user_model().objects.filter(email__iexact=attrs["email"]).exists():
            raise serializers.ValidationError(
                {"email": [_("Email already registered")]},
            )
        try:
            _validate_new_password(password)
        except serializers.ValidationError as exc:
            raise serializers.ValidationError({"password": exc.detail}) from exc
        return attrs


class PublicGuideSerializer(serializers.ModelSerializer):
    """Approved guide as shown on the public directory (no contact secrets)."""

    class Meta:
        model = GuideApplication
        fields = [
            "id",
            "name",
            "experience",
            "languages",
            "destinations",
            "bio",
            "hourly_rate",
            "profile_image",
            "rating",
            "tours_completed",
        ]
        read_only_fields = fields


class GuideApplicationAdminSerializer(serializers.ModelSerializer):
    applicant = UserSummarySerializer(read_only=True)
    reviewed_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = GuideApplication
        fields = [
            "id",
            "applicant",
            "name",
            "email",
            "phone",
            "experience",
            "languages",
            "destinations",
            "bio",
            "hourly_rate",
            "profile_image",
            "status",
            "admin_notes",
            "reviewed_by",
            "reviewed_at",
            "rating",
            "tours_completed",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[
            GuideApplication.Status.APPROVED,
            GuideApplication.Status.REJECTED,
        ],
        error_messages={
            "invalid_choice": _("Invalid status. Must be 'approved' or 'rejected'"),
        },
    )
    admin_notes = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )
