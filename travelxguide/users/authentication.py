"""JWT authentication over the Authorization header or the HttpOnly access cookie."""

from dj_rest_auth.jwt_auth import JWTCookieAuthentication
from django.utils.translation import gettext_lazy as _
from rest_framework.exceptions import AuthenticationFailed


class CookieJWTAuthentication(JWTCookieAuthentication):
    """Refuses tokens that belong to blocked accounts."""

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if getattr(user, "is_blocked", False):
            msg = _("Account is blocked. Please contact support.")
            raise AuthenticationFailed(msg, code="user_blocked")
        return user
