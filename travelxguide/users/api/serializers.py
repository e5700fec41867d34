from dj_rest_auth.serializers import PasswordChangeSerializer
from django.contrib.auth import get_user_model
from django.contrib.auth import password_validation
from django.core.exceptions import ValidationError as DjangoValidationError
from django.urls import NoReverseMatch
from django.urls import reverse
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from travelxguide.users.models import User
from travelxguide.users.validators import validate_account_email


def _validate_email_value(value: str) -> str:
    try:
        validate_account_email(value)
    except DjangoValidationError as exc:
        raise serializers.ValidationError(list(exc.messages)) from exc
    return value.strip().lower()


def _validate_new_password(password: str, user: User | None = None) -> str:
    try:
        password_validation.validate_password(password, user=user)
    except DjangoValidationError as exc:
        raise serializers.ValidationError(list(exc.messages)) from exc
    return password


class UserSummarySerializer(serializers.ModelSerializer[User]):
    """Shape returned alongside tokens by register/login endpoints."""

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "email",
            "role",
            "is_account_verified",
            "profile_picture",
        ]
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer[User]):
    id = serializers.IntegerField(read_only=True)

    # Make username & email explicitly read-only; email changes are not supported
    username = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "email",
            "role",
            "is_account_verified",
            "is_active",
            "is_blocked",
            "url",
        ]
        read_only_fields = ["role", "is_account_verified", "is_active", "is_blocked"]

    url = serializers.SerializerMethodField()

    def get_url(self, obj: User) -> str:
        request = self.context.get("request")
        namespace = getattr(
            getattr(request, "resolver_match", None),
            "namespace",
            None,
        )

        candidates = []
        if namespace:
            candidates.append(f"{namespace}:user-detail")
        candidates.extend(["api_v1:user-detail", "api:user-detail"])

        for view_name in candidates:
            try:
                url = reverse(view_name, kwargs={"username": obj.username})
            except NoReverseMatch:
                continue
            return request.build_absolute_uri(url) if request is not None else url

        return ""

    def update(self, instance, validated_data):
        # Enforce invariant: username & email are system-managed
        forbidden = {k for k in ("username", "email") if k in self.initial_data}
        if forbidden:
            errors = {}
            for f in forbidden:
                errors[f] = "This field is read-only."
            raise serializers.ValidationError(errors)
        instance.name = validated_data.get("name", instance.name)
        instance.save()
        return instance


class ProfileSerializer(serializers.ModelSerializer[User]):
    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "email",
            "role",
            "phone",
            "location",
            "bio",
            "date_of_birth",
            "profile_picture",
            "oauth_provider",
            "is_account_verified",
            "email_verified_at",
            "last_login",
            "created_at",
        ]
        read_only_fields = [
            "id",
            "username",
            "email",
            "role",
            "profile_picture",
            "oauth_provider",
            "is_account_verified",
            "email_verified_at",
            "last_login",
            "created_at",
        ]


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.CharField(max_length=254)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    # Guides go through the application flow; admins are promoted by staff.
    role = serializers.ChoiceField(
        choices=[User.Role.TRAVELER],
        default=User.Role.TRAVELER,
        error_messages={"invalid_choice": _("Invalid role")},
    )

    def validate_email(self, value: str) -> str:
        email = _validate_email_value(value)
        if get_user_model().objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError(_("User already exists"))
        return email

    def validate(self, attrs):
        candidate = User(name=attrs.get("name", ""), email=attrs.get("email", ""))
        try:
            _validate_new_password(attrs["password"], candidate)
        except serializers.ValidationError as exc:
            raise serializers.ValidationError({"password": exc.detail}) from exc
        return attrs


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)

    def validate_email(self, value: str) -> str:
        return _validate_email_value(value)


class OAuthLoginSerializer(serializers.Serializer):
    provider = serializers.ChoiceField(
        choices=[User.OAuthProvider.GOOGLE],
        error_messages={"invalid_choice": _("Unsupported OAuth provider")},
    )
    oauth_id = serializers.CharField(max_length=255)
    name = serializers.CharField(max_length=255)
    email = serializers.CharField(max_length=254)
    profile_picture = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )

    def validate_email(self, value: str) -> str:
        return _validate_email_value(value)


class EmailSerializer(serializers.Serializer):
    email = serializers.CharField()

    def validate_email(self, value: str) -> str:
        return _validate_email_value(value)


class VerifyEmailSerializer(serializers.Serializer):
    otp = serializers.CharField(max_length=6)


class ResetPasswordSerializer(EmailSerializer):
    otp = serializers.CharField(max_length=6)
    new_password = serializers.CharField(trim_whitespace=False)

    def validate_new_password(self, value: str) -> str:
        return _validate_new_password(value)


class ChangePasswordSerializer(PasswordChangeSerializer):
    """dj-rest-auth password change keyed ``current_password``/``new_password``."""

    old_password = None
    new_password1 = None
    new_password2 = None
    current_password = serializers.CharField(max_length=128, trim_whitespace=False)
    new_password = serializers.CharField(max_length=128, trim_whitespace=False)

    def validate_current_password(self, value: str) -> str:
        return self.validate_old_password(value)

    def validate(self, attrs):
        password = attrs["new_password"]
        try:
            super().validate({"new_password1": password, "new_password2": password})
        except serializers.ValidationError as exc:
            errors = exc.detail
            if isinstance(errors, dict):
                errors = errors.get("new_password2", errors)
            raise serializers.ValidationError({"new_password": errors}) from exc
        return attrs
