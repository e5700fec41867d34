import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from datetime import timedelta

from dj_rest_auth.views import LogoutView as RestAuthLogoutView
from dj_rest_auth.views import PasswordChangeView
from dj_rest_auth.views import UserDetailsView
from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth import get_user_model
from django.contrib.auth.signals import user_logged_in
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from drf_spectacular.utils import extend_schema
from rest_framework import permissions
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from travelxguide.users.models import User
from travelxguide.users.services import OTP_RESET
from travelxguide.users.services import OTP_VERIFY
from travelxguide.users.services import OTPError
from travelxguide.users.services import consume_otp
from travelxguide.users.services import generate_username
from travelxguide.users.services import issue_otp
from travelxguide.users.services import mark_verified
from travelxguide.users.tasks import send_otp_email

from .serializers import ChangePasswordSerializer
from .serializers import EmailSerializer
from .serializers import LoginSerializer
from .serializers import OAuthLoginSerializer
from .serializers import ProfileSerializer
from .serializers import RegisterSerializer
from .serializers import ResetPasswordSerializer
from .serializers import UserSummarySerializer
from .serializers import VerifyEmailSerializer

logger = logging.getLogger(__name__)


def _set_cookie(
    response: Response,
    name: str,
    value: str,
    max_age: int | None,
) -> None:
    if not value:
        return
    cookie_kwargs = {
        "httponly": True,
        "secure": getattr(settings, "JWT_AUTH_COOKIE_SECURE", not settings.DEBUG),
        "samesite": getattr(settings, "JWT_AUTH_COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }
    if max_age is not None:
        cookie_kwargs["max_age"] = max_age
    response.set_cookie(name, value, **cookie_kwargs)


def _set_jwt_cookies(
    response: Response, access: str | None, refresh: str | None
) -> None:
    access_lifetime: timedelta = settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
    refresh_lifetime: timedelta = settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"]

    access_cookie = getattr(settings, "JWT_AUTH_COOKIE", "access_token")
    refresh_cookie = getattr(settings, "JWT_AUTH_REFRESH_COOKIE", "refresh_token")

    if access:
        _set_cookie(
            response, access_cookie, access, int(access_lifetime.total_seconds())
        )
    if refresh:
        _set_cookie(
            response, refresh_cookie, refresh, int(refresh_lifetime.total_seconds())
        )


def _token_response(
    request, user: User, message: str, http_status=status.HTTP_200_OK
) -> Response:
    refresh = RefreshToken.for_user(user)
    access = str(refresh.access_token)
    data = {
        "detail": message,
        "user": UserSummarySerializer(user, context={"request": request}).data,
        "access": access,
        "refresh": str(refresh),
    }
    response = Response(data, status=http_status)
    _set_jwt_cookies(response, access, str(refresh))
    return response


def _ensure_can_sign_in(user: User) -> None:
    if user.is_blocked:
        raise PermissionDenied(_("Account is blocked. Please contact support."))
    if not user.is_active:
        raise PermissionDenied(_("Account is deactivated. Please contact support."))


@extend_schema(tags=["Authentication"], request=RegisterSerializer)
class RegisterView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            user = get_user_model().objects.create_user(
                username=generate_username(data["email"]),
                email=data["email"],
                password=data["password"],
                name=data["name"],
                role=data["role"],
            )
            if settings.ACCOUNT_EMAIL_VERIFICATION_REQUIRED:
                issue_otp(user, OTP_VERIFY)
                transaction.on_commit(
                    lambda: send_otp_email.delay(user.pk, OTP_VERIFY),
                )
                message = _("Registration successful! Check your email for the code.")
            else:
                mark_verified(user)
                message = _("Registration successful! You can now use all features.")

        logger.info("Registered user %s (%s)", user.pk, user.role)
        user_logged_in.send(sender=user.__class__, request=request, user=user)
        return _token_response(request, user, message, status.HTTP_201_CREATED)


@extend_schema(tags=["Authentication"], request=LoginSerializer)
class LoginView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get_authenticate_header(self, request):
        # Without one DRF turns AuthenticationFailed into a 403
        return 'Bearer realm="api"'

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]
        password = serializer.validated_data["password"]

        user = authenticate(request, username=email, password=password)
        if user is None:
            # The backend refuses blocked and deactivated accounts too; report
            # those as such once the password is known to be right.
            account = get_user_model().objects.filter(email__iexact=email).first()
            if account is not None and account.check_password(password):
                _ensure_can_sign_in(account)
            raise AuthenticationFailed(_("Invalid credentials"))

        user_logged_in.send(sender=user.__class__, request=request, user=user)
        return _token_response(request, user, _("Login successful"))


@extend_schema(tags=["Authentication"], request=OAuthLoginSerializer)
class OAuthLoginView(APIView):
    """Sign in with an identity already verified by the OAuth provider."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = OAuthLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user_model = get_user_model()

        with transaction.atomic():
            user = user_model.objects.filter(
                oauth_provider=data["provider"],
                oauth_id=data["oauth_id"],
            ).first()
            if user is None:
                user = user_model.objects.filter(email__iexact=data["email"]).first()
                if user is not None:
                    # Link the existing local account with the provider identity
                    user.oauth_provider = data["provider"]
                    user.oauth_id = data["oauth_id"]
                    if data["profile_picture"]:
                        user.profile_picture = data["profile_picture"]
                    user.save()
                else:
                    user = user_model(
                        username=generate_username(data["email"]),
                        email=data["email"],
                        name=data["name"],
                        oauth_provider=data["provider"],
                        oauth_id=data["oauth_id"],
                        profile_picture=data["profile_picture"],
                        role=User.Role.TRAVELER,
                    )
                    user.set_unusable_password()
                    user.save()
            _ensure_can_sign_in(user)
            if not user.is_account_verified:
                mark_verified(user)

        user_logged_in.send(sender=user.__class__, request=request, user=user)
        return _token_response(
            request, user, _("%(provider)s login successful") % data
        )


@extend_schema(tags=["Authentication"], request=None)
class LogoutView(RestAuthLogoutView):
    """Blacklist the refresh token and clear both JWT cookies.

    dj-rest-auth reads the token from the refresh cookie; API clients that
    keep it themselves may send it in the body instead. Logging out never
    fails: a missing or unusable token only skips the blacklist step.
    """

    authentication_classes = []

    def logout(self, request):
        raw_refresh = request.data.get("refresh")
        if raw_refresh:
            request.COOKIES[settings.JWT_AUTH_REFRESH_COOKIE] = raw_refresh
        response = super().logout(request)
        if response.status_code != status.HTTP_200_OK:
            logger.debug("Logout without a usable refresh token: %s", response.data)
            response.status_code = status.HTTP_200_OK
        response.data = {"detail": _("Logged out")}
        return response


@extend_schema(tags=["Authentication"], request=None)
class SendVerifyOtpView(APIView):
    def post(self, request):
        user = request.user
        if user.is_account_verified:
            raise ValidationError({"detail": _("Account already verified")})
        issue_otp(user, OTP_VERIFY)
        transaction.on_commit(lambda: send_otp_email.delay(user.pk, OTP_VERIFY))
        return Response({"detail": _("Verification OTP sent to your email")})


@extend_schema(tags=["Authentication"], request=VerifyEmailSerializer)
class VerifyEmailView(APIView):
    def post(self, request):
        serializer = VerifyEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = request.user
        try:
            consume_otp(user, OTP_VERIFY, serializer.validated_data["otp"])
        except OTPError as exc:
            raise ValidationError({"otp": [str(exc)]}) from exc
        mark_verified(user)
        return Response({"detail": _("Email verified successfully")})


@extend_schema(tags=["Authentication"], request=EmailSerializer)
class SendResetOtpView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]
        user = get_user_model().objects.filter(email__iexact=email).first()
        if user is None:
            raise NotFound(_("User not found"))
        issue_otp(user, OTP_RESET)
        transaction.on_commit(lambda: send_otp_email.delay(user.pk, OTP_RESET))
        return Response({"detail": _("OTP sent to your email")})


@extend_schema(tags=["Authentication"], request=ResetPasswordSerializer)
class ResetPasswordView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user = get_user_model().objects.filter(email__iexact=data["email"]).first()
        if user is None:
            raise NotFound(_("User not found"))
        try:
            consume_otp(user, OTP_RESET, data["otp"])
        except OTPError as exc:
            raise ValidationError({"otp": [str(exc)]}) from exc
        user.set_password(data["new_password"])
        user.save(update_fields=["password", "updated_at"])
        logger.info("Password reset for user %s", user.pk)
        return Response({"detail": _("Password has been reset successfully")})


@extend_schema(tags=["Authentication"], request=ChangePasswordSerializer)
class ChangePasswordView(PasswordChangeView):
    serializer_class = ChangePasswordSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        logger.info("Password changed for user %s", request.user.pk)
        response.data = {"detail": _("Password changed successfully")}
        return response


@extend_schema(tags=["Authentication"])
class ProfileView(UserDetailsView):
    serializer_class = ProfileSerializer


@extend_schema(tags=["Authentication"], responses={200: None})
class IsAuthenticatedView(APIView):
    def get(self, request):
        return Response({"success": True})


class CookieJWTRefreshView(TokenRefreshView):
    """Refresh that falls back to the refresh cookie and re-sets JWT cookies."""

    def post(self, request, *args, **kwargs):  # type: ignore[override]
        raw_refresh = request.data.get("refresh") or request.COOKIES.get(
            getattr(settings, "JWT_AUTH_REFRESH_COOKIE", "refresh_token"),
            "",
        )
        serializer = self.get_serializer(data={"refresh": raw_refresh})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as exc:
            raise InvalidToken(exc.args[0]) from exc

        response = Response(serializer.validated_data, status=status.HTTP_200_OK)
        _set_jwt_cookies(
            response,
            serializer.validated_data.get("access"),
            serializer.validated_data.get("refresh"),
        )
        return response
