import datetime as dt

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.signals import user_login_failed
from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from travelxguide.audit.models import AuditLog
from travelxguide.conftest import DEFAULT_PASSWORD
from travelxguide.users.services import OTP_RESET
from travelxguide.users.services import issue_otp

pytestmark = pytest.mark.django_db

AUTH = "/api/v1/auth"


def register(client, **overrides):
    payload = {
        "name": "Nora Nomad",
        "email": "nora@example.com",
        "password": "Wander!Lust42",
    }
    payload.update(overrides)
    return client.post(f"{AUTH}/register/", payload, format="json")


class TestRegister:
    def test_register_returns_tokens_and_cookies(self, api_client):
        r = register(api_client)
        assert r.status_code == status.HTTP_201_CREATED, r.data
        assert r.data["user"]["email"] == "nora@example.com"
        assert r.data["user"]["role"] == "traveler"
        assert r.data["user"]["is_account_verified"] is True
        assert r.data["access"]
        assert r.data["refresh"]
        assert r.cookies["access_token"]["httponly"]
        assert r.cookies["refresh_token"].value == r.data["refresh"]

        user = get_user_model().objects.get(email="nora@example.com")
        assert user.check_password("Wander!Lust42")
        assert user.username.startswith("nora-")
        assert AuditLog.objects.filter(actor=user, action="login").exists()

    def test_register_lowercases_email(self, api_client):
        r = register(api_client, email="Nora@Example.COM")
        assert r.status_code == status.HTTP_201_CREATED
        assert r.data["user"]["email"] == "nora@example.com"

    def test_duplicate_email_rejected(self, api_client, user):
        r = register(api_client, email=user.email.upper())
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert "email" in r.data

    def test_disposable_email_rejected(self, api_client):
        r = register(api_client, email="nora@mailinator.com")
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert "email" in r.data

    def test_weak_password_rejected(self, api_client):
        r = register(api_client, password="123")
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert "password" in r.data

    @pytest.mark.parametrize("role", ["guide", "admin"])
    def test_cannot_self_register_privileged_role(self, api_client, role):
        r = register(api_client, role=role)
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert "role" in r.data
        assert not get_user_model().objects.filter(email="nora@example.com").exists()

    @override_settings(ACCOUNT_EMAIL_VERIFICATION_REQUIRED=True)
    def test_register_sends_verification_otp(
        self, api_client, mailoutbox, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            r = register(api_client)
        assert r.status_code == status.HTTP_201_CREATED
        assert r.data["user"]["is_account_verified"] is False

        user = get_user_model().objects.get(email="nora@example.com")
        assert len(user.verify_otp) == 6
        assert len(mailoutbox) == 1
        assert mailoutbox[0].subject == "Account Verification OTP"
        assert user.verify_otp in mailoutbox[0].body


class TestLogin:
    def test_login_success(self, api_client, user):
        r = api_client.post(
            f"{AUTH}/login/",
            {"email": "TRAVELER@example.com", "password": DEFAULT_PASSWORD},
            format="json",
        )
        assert r.status_code == status.HTTP_200_OK, r.data
        assert r.data["user"]["id"] == user.pk
        assert "access_token" in r.cookies

    def test_login_wrong_password(self, api_client, user):
        r = api_client.post(
            f"{AUTH}/login/",
            {"email": user.email, "password": "nope"},
            format="json",
        )
        assert r.status_code == status.HTTP_401_UNAUTHORIZED
        assert str(r.data["detail"]) == "Invalid credentials"

    def test_login_unknown_email(self, api_client, db):
        r = api_client.post(
            f"{AUTH}/login/",
            {"email": "ghost@example.com", "password": DEFAULT_PASSWORD},
            format="json",
        )
        assert r.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_missing_fields(self, api_client, db):
        r = api_client.post(f"{AUTH}/login/", {}, format="json")
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert set(r.data) == {"email", "password"}

    def test_blocked_account_cannot_login(self, api_client, make_user):
        blocked = make_user(is_blocked=True)
        r = api_client.post(
            f"{AUTH}/login/",
            {"email": blocked.email, "password": DEFAULT_PASSWORD},
            format="json",
        )
        assert r.status_code == status.HTTP_403_FORBIDDEN
        assert "blocked" in str(r.data["detail"])

    def test_deactivated_account_cannot_login(self, api_client, make_user):
        inactive = make_user(is_active=False)
        r = api_client.post(
            f"{AUTH}/login/",
            {"email": inactive.email, "password": DEFAULT_PASSWORD},
            format="json",
        )
        assert r.status_code == status.HTTP_403_FORBIDDEN
        assert "deactivated" in str(r.data["detail"])

    def test_login_wrong_password_advertises_bearer(self, api_client, user):
        r = api_client.post(
            f"{AUTH}/login/",
            {"email": user.email, "password": "nope"},
            format="json",
        )
        assert r.status_code == status.HTTP_401_UNAUTHORIZED
        assert r["WWW-Authenticate"].startswith("Bearer")

    def test_failed_login_goes_through_auth_backends(self, api_client, user):
        attempts = []

        def on_failure(sender, credentials, **kwargs):
            attempts.append(credentials)

        user_login_failed.connect(on_failure)
        try:
            api_client.post(
                f"{AUTH}/login/",
                {"email": user.email, "password": "nope"},
                format="json",
            )
        finally:
            user_login_failed.disconnect(on_failure)

        assert len(attempts) == 1
        assert attempts[0]["username"] == user.email
        assert attempts[0]["password"] != "nope"

    def test_blocked_account_with_wrong_password_is_invalid_credentials(
        self, api_client, make_user
    ):
        blocked = make_user(is_blocked=True)
        r = api_client.post(
            f"{AUTH}/login/",
            {"email": blocked.email, "password": "nope"},
            format="json",
        )
        assert r.status_code == status.HTTP_401_UNAUTHORIZED


class TestOAuthLogin:
    payload = {
        "provider": "google",
        "oauth_id": "g-123",
        "name": "Gina Google",
        "email": "gina@example.com",
        "profile_picture": "https://example.com/gina.png",
    }

    def test_creates_verified_traveler(self, api_client, db):
        r = api_client.post(f"{AUTH}/oauth-login/", self.payload, format="json")
        assert r.status_code == status.HTTP_200_OK, r.data
        user = get_user_model().objects.get(email="gina@example.com")
        assert user.role == "traveler"
        assert user.oauth_provider == "google"
        assert user.oauth_id == "g-123"
        assert user.is_account_verified is True
        assert not user.has_usable_password()

    def test_second_login_reuses_account(self, api_client, db):
        api_client.post(f"{AUTH}/oauth-login/", self.payload, format="json")
        r = api_client.post(
            f"{AUTH}/oauth-login/",
            {**self.payload, "email": "gina.new@example.com"},
            format="json",
        )
        assert r.status_code == status.HTTP_200_OK
        assert get_user_model().objects.filter(oauth_id="g-123").count() == 1
        assert r.data["user"]["email"] == "gina@example.com"

    def test_links_existing_local_account(self, api_client, make_user):
        local = make_user("gina@example.com", verified=False)
        r = api_client.post(f"{AUTH}/oauth-login/", self.payload, format="json")
        assert r.status_code == status.HTTP_200_OK
        local.refresh_from_db()
        assert local.oauth_id == "g-123"
        assert local.profile_picture == self.payload["profile_picture"]
        assert local.is_account_verified is True
        assert local.check_password(DEFAULT_PASSWORD)

    def test_unsupported_provider(self, api_client, db):
        r = api_client.post(
            f"{AUTH}/oauth-login/",
            {**self.payload, "provider": "facebook"},
            format="json",
        )
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert "provider" in r.data


class TestLogoutAndRefresh:
    def _login(self, client, user):
        r = client.post(
            f"{AUTH}/login/",
            {"email": user.email, "password": DEFAULT_PASSWORD},
            format="json",
        )
        assert r.status_code == status.HTTP_200_OK
        return r.data

    def test_refresh_from_cookie(self, user):
        client = APIClient()
        self._login(client, user)
        r = client.post(f"{AUTH}/jwt/refresh/", {}, format="json")
        assert r.status_code == status.HTTP_200_OK, r.data
        assert r.data["access"]
        assert r.cookies["access_token"].value == r.data["access"]

    def test_refresh_without_token(self, api_client, db):
        r = api_client.post(f"{AUTH}/jwt/refresh/", {}, format="json")
        assert r.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_blacklists_refresh_token(self, user):
        client = APIClient()
        tokens = self._login(client, user)

        r = client.post(f"{AUTH}/logout/", {"refresh": tokens["refresh"]}, format="json")
        assert r.status_code == status.HTTP_200_OK
        assert r.cookies["access_token"].value == ""
        assert r.cookies["refresh_token"].value == ""

        r = APIClient().post(
            f"{AUTH}/jwt/refresh/",
            {"refresh": tokens["refresh"]},
            format="json",
        )
        assert r.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_tolerates_garbage_token(self, api_client, db):
        r = api_client.post(f"{AUTH}/logout/", {"refresh": "garbage"}, format="json")
        assert r.status_code == status.HTTP_200_OK

    def test_logout_with_cookie_only_clears_cookies(self, user):
        client = APIClient()
        self._login(client, user)

        r = client.post(f"{AUTH}/logout/")
        assert r.status_code == status.HTTP_200_OK
        assert r.cookies["access_token"].value == ""
        assert r.cookies["refresh_token"].value == ""


class TestEmailVerification:
    def test_send_and_verify_otp(
        self, make_user, client_for, mailoutbox, django_capture_on_commit_callbacks
    ):
        pending = make_user(verified=False)
        client = client_for(pending)

        with django_capture_on_commit_callbacks(execute=True):
            r = client.post(f"{AUTH}/send-verify-otp/")
        assert r.status_code == status.HTTP_200_OK
        assert len(mailoutbox) == 1

        pending.refresh_from_db()
        r = client.post(
            f"{AUTH}/verify-email/", {"otp": pending.verify_otp}, format="json"
        )
        assert r.status_code == status.HTTP_200_OK, r.data
        pending.refresh_from_db()
        assert pending.is_account_verified is True
        assert pending.email_verified_at is not None

    def test_wrong_otp(self, make_user, client_for):
        pending = make_user(verified=False)
        client = client_for(pending)
        client.post(f"{AUTH}/send-verify-otp/")
        pending.refresh_from_db()
        wrong = "000000" if pending.verify_otp != "000000" else "999999"

        r = client.post(f"{AUTH}/verify-email/", {"otp": wrong}, format="json")
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert r.data["otp"] == ["Invalid OTP"]

    def test_already_verified(self, user, client_for):
        r = client_for(user).post(f"{AUTH}/send-verify-otp/")
        assert r.status_code == status.HTTP_400_BAD_REQUEST

    def test_requires_authentication(self, api_client, db):
        r = api_client.post(f"{AUTH}/send-verify-otp/")
        assert r.status_code == status.HTTP_401_UNAUTHORIZED


class TestPasswordReset:
    def test_full_reset_flow(
        self, api_client, user, mailoutbox, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            r = api_client.post(
                f"{AUTH}/send-reset-otp/", {"email": user.email}, format="json"
            )
        assert r.status_code == status.HTTP_200_OK
        assert mailoutbox[0].subject == "Password Reset OTP"

        user.refresh_from_db()
        r = api_client.post(
            f"{AUTH}/reset-password/",
            {
                "email": user.email,
                "otp": user.reset_otp,
                "new_password": "Brand!New!Pass9",
            },
            format="json",
        )
        assert r.status_code == status.HTTP_200_OK, r.data

        r = api_client.post(
            f"{AUTH}/login/",
            {"email": user.email, "password": "Brand!New!Pass9"},
            format="json",
        )
        assert r.status_code == status.HTTP_200_OK

    def test_unknown_email(self, api_client, db):
        r = api_client.post(
            f"{AUTH}/send-reset-otp/", {"email": "ghost@example.com"}, format="json"
        )
        assert r.status_code == status.HTTP_404_NOT_FOUND

    def test_expired_otp(self, api_client, user):
        otp = issue_otp(user, OTP_RESET)
        user.reset_otp_expire_at = timezone.now() - dt.timedelta(minutes=1)
        user.save()

        r = api_client.post(
            f"{AUTH}/reset-password/",
            {"email": user.email, "otp": otp, "new_password": "Brand!New!Pass9"},
            format="json",
        )
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert r.data["otp"] == ["OTP expired"]
        user.refresh_from_db()
        assert user.check_password(DEFAULT_PASSWORD)


class TestAccount:
    def test_change_password(self, user, client_for):
        r = client_for(user).post(
            f"{AUTH}/change-password/",
            {"current_password": DEFAULT_PASSWORD, "new_password": "Another!Pass77"},
            format="json",
        )
        assert r.status_code == status.HTTP_200_OK, r.data
        user.refresh_from_db()
        assert user.check_password("Another!Pass77")

    def test_change_password_runs_password_validators(self, user, client_for):
        r = client_for(user).post(
            f"{AUTH}/change-password/",
            {"current_password": DEFAULT_PASSWORD, "new_password": "short"},
            format="json",
        )
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert "new_password" in r.data
        user.refresh_from_db()
        assert user.check_password(DEFAULT_PASSWORD)

    def test_access_cookie_authenticates(self, user):
        client = APIClient()
        client.post(
            f"{AUTH}/login/",
            {"email": user.email, "password": DEFAULT_PASSWORD},
            format="json",
        )
        r = client.get(f"{AUTH}/is-auth/")
        assert r.status_code == status.HTTP_200_OK

    def test_change_password_wrong_current(self, user, client_for):
        r = client_for(user).post(
            f"{AUTH}/change-password/",
            {"current_password": "wrong", "new_password": "Another!Pass77"},
            format="json",
        )
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert "current_password" in r.data

    def test_profile_update_ignores_read_only_fields(self, user, client_for):
        client = client_for(user)
        r = client.patch(
            f"{AUTH}/profile/",
            {
                "name": "Tina T.",
                "location": "Porto",
                "email": "hijack@example.com",
                "role": "admin",
            },
            format="json",
        )
        assert r.status_code == status.HTTP_200_OK, r.data
        user.refresh_from_db()
        assert user.name == "Tina T."
        assert user.location == "Porto"
        assert user.email == "traveler@example.com"
        assert user.role == "traveler"

        r = client.get(f"{AUTH}/profile/")
        assert r.data["location"] == "Porto"

    def test_is_auth(self, api_client, user, client_for):
        assert api_client.get(f"{AUTH}/is-auth/").status_code == 401
        r = client_for(user).get(f"{AUTH}/is-auth/")
        assert r.status_code == status.HTTP_200_OK
        assert r.data == {"success": True}

    def test_blocked_user_token_rejected(self, api_client, user):
        r = api_client.post(
            f"{AUTH}/login/",
            {"email": user.email, "password": DEFAULT_PASSWORD},
            format="json",
        )
        access = r.data["access"]
        user.is_blocked = True
        user.save()

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        assert client.get(f"{AUTH}/is-auth/").status_code == 401
