from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import EmailValidator
from django.utils.translation import gettext_lazy as _

MAX_EMAIL_LENGTH = 254

_email_format = EmailValidator(message=_("Invalid email format"))


def validate_account_email(value: str) -> None:
    """Reject malformed, overly long and disposable email addresses."""
    if len(value) > MAX_EMAIL_LENGTH:
        raise ValidationError(_("Email address is too long"), code="too_long")
    _email_format(value)
    domain = value.rsplit("@", 1)[-1].lower()
    if domain in settings.DISPOSABLE_EMAIL_DOMAINS:
        raise ValidationError(
            _("Disposable email addresses are not allowed"),
            code="disposable",
        )
