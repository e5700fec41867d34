from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q


class UsernameOrEmailBackend(ModelBackend):
    """Accept either the email address or the generated username as login.

    Email wins when one account's username equals another account's email.
    Blocked accounts never authenticate.
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        user_model = get_user_model()
        login = username or kwargs.get(user_model.EMAIL_FIELD)
        if not login or password is None:
            return None
        login = login.strip()
        candidates = sorted(
            user_model.objects.filter(
                Q(email__iexact=login) | Q(username__iexact=login),
            )[:2],
            key=lambda u: u.email.lower() != login.lower(),
        )
        if not candidates:
            # Run the hasher anyway so unknown logins take as long as bad passwords
            user_model().set_password(password)
            return None
        user = candidates[0]
        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None

    def user_can_authenticate(self, user):
        if getattr(user, "is_blocked", False):
            return False
        return super().user_can_authenticate(user)
