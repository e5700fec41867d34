from django.urls import path

from .auth_views import ChangePasswordView
from .auth_views import IsAuthenticatedView
from .auth_views import LoginView
from .auth_views import LogoutView
from .auth_views import OAuthLoginView
from .auth_views import ProfileView
from .auth_views import RegisterView
from .auth_views import ResetPasswordView
from .auth_views import SendResetOtpView
from .auth_views import SendVerifyOtpView
from .auth_views import VerifyEmailView

# Account lifecycle endpoints. JWT create/refresh/verify are wired in config.urls.
urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("oauth-login/", OAuthLoginView.as_view(), name="oauth-login"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("send-verify-otp/", SendVerifyOtpView.as_view(), name="send-verify-otp"),
    path("verify-email/", VerifyEmailView.as_view(), name="verify-email"),
    path("send-reset-otp/", SendResetOtpView.as_view(), name="send-reset-otp"),
    path("reset-password/", ResetPasswordView.as_view(), name="reset-password"),
    path("change-password/", ChangePasswordView.as_view(), name="change-password"),
    path("profile/", ProfileView.as_view(), name="profile"),
    path("is-auth/", IsAuthenticatedView.as_view(), name="is-auth"),
]
