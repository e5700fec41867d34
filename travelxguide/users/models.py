from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import CharField
from django.db.models import EmailField
from django.urls import reverse
from django.utils.translation import gettext_lazy as _


class User(AbstractUser):
    """
    Default custom user model for travelxguide.

    Travelers, guides and admins share this model and are told apart by
    ``role``. Email is the login identifier; ``username`` is generated from it.
    """

    class Role(models.TextChoices):
        TRAVELER = "traveler", _("Traveler")
        GUIDE = "guide", _("Guide")
        ADMIN = "admin", _("Admin")

    class OAuthProvider(models.TextChoices):
        LOCAL = "local", _("Local")
        GOOGLE = "google", _("Google")

    # First and last name do not cover name patterns around the globe
    name = CharField(_("Full Name"), blank=True, max_length=255)
    email = EmailField(_("email address"), unique=True)
    role = CharField(
        _("Role"),
        max_length=20,
        choices=Role.choices,
        default=Role.TRAVELER,
    )

    # OAuth integration
    oauth_provider = CharField(
        max_length=20,
        choices=OAuthProvider.choices,
        default=OAuthProvider.LOCAL,
    )
    oauth_id = CharField(max_length=255, blank=True, default="")
    profile_picture = CharField(max_length=500, blank=True, default="")

    # Email verification
    verify_otp = CharField(max_length=6, blank=True, default="")
    verify_otp_expire_at = models.DateTimeField(null=True, blank=True)
    is_account_verified = models.BooleanField(default=False)
    email_verified_at = models.DateTimeField(null=True, blank=True)

    # Password reset
    reset_otp = CharField(max_length=6, blank=True, default="")
    reset_otp_expire_at = models.DateTimeField(null=True, blank=True)

    # Account status (is_active comes from AbstractUser)
    is_blocked = models.BooleanField(default=False)

    # Profile
    phone = CharField(max_length=30, blank=True, default="")
    date_of_birth = models.DateField(null=True, blank=True)
    location = CharField(max_length=255, blank=True, default="")
    bio = models.TextField(blank=True, default="")

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(AbstractUser.Meta):
        swappable = "AUTH_USER_MODEL"
        indexes = [
            models.Index(
                fields=["oauth_provider", "oauth_id"],
                name="users_oauth_identity_idx",
            ),
        ]

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        if not self.name:
            self.name = f"{self.first_name} {self.last_name}".strip()
        super().save(*args, **kwargs)

    @property
    def is_platform_admin(self) -> bool:
        return bool(
            self.is_superuser or self.is_staff or self.role == self.Role.ADMIN,
        )

    def get_absolute_url(self) -> str:
        """Get URL for user's detail view.

        Returns:
            str: URL for user detail.

        """
        return reverse("api_v1:user-detail", kwargs={"username": self.username})
