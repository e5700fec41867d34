"""Account helpers shared by the auth views, OAuth login and guide applications.

OTP lifecycle:
- ``issue_otp`` stores a fresh 6-digit code and its expiry on the user.
- ``consume_otp`` checks the code, then clears both fields so it cannot be reused.
"""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone
from django.utils.crypto import get_random_string

if TYPE_CHECKING:
    from travelxguide.users.models import User

logger = logging.getLogger(__name__)

OTP_VERIFY = "verify"
OTP_RESET = "reset"

_OTP_FIELDS = {
    OTP_VERIFY: ("verify_otp", "verify_otp_expire_at"),
    OTP_RESET: ("reset_otp", "reset_otp_expire_at"),
}


class OTPError(Exception):
    """Raised when a submitted OTP cannot be accepted."""


class InvalidOTP(OTPError):
    pass


class ExpiredOTP(OTPError):
    pass


def generate_username(email: str) -> str:
    """Generate a unique username from the email local part and a short salt.

    Pattern: <local-part>-<salt>, lowercased. Salt is 4 chars.
    """
    user_model = get_user_model()
    base = email.split("@", 1)[0].lower()
    # Keep only url-safe chars
    base = "".join(ch for ch in base if ch.isalnum() or ch in {".", "-", "_"})
    base = base[:120] or "user"
    while True:
        salt = get_random_string(
            4, allowed_chars="abcdefghijklmnopqrstuvwxyz0123456789"
        )
        candidate = f"{base}-{salt}"
        if not user_model.objects.filter(username=candidate).exists():
            return candidate


def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


def _otp_ttl(purpose: str):
    if purpose == OTP_VERIFY:
        return settings.OTP_VERIFY_TTL
    return settings.OTP_RESET_TTL


def issue_otp(user: User, purpose: str) -> str:
    code_field, expiry_field = _OTP_FIELDS[purpose]
    otp = generate_otp()
    setattr(user, code_field, otp)
    setattr(user, expiry_field, timezone.now() + _otp_ttl(purpose))
    user.save(update_fields=[code_field, expiry_field, "updated_at"])
    logger.info("Issued %s OTP for user %s", purpose, user.pk)
    return otp


def consume_otp(user: User, purpose: str, otp: str) -> None:
    code_field, expiry_field = _OTP_FIELDS[purpose]
    stored = getattr(user, code_field)
    if not stored or not secrets.compare_digest(stored, str(otp).strip()):
        msg = "Invalid OTP"
        raise InvalidOTP(msg)
    expires_at = getattr(user, expiry_field)
    if expires_at is None or expires_at < timezone.now():
        msg = "OTP expired"
        raise ExpiredOTP(msg)
    setattr(user, code_field, "")
    setattr(user, expiry_field, None)
    user.save(update_fields=[code_field, expiry_field, "updated_at"])


def mark_verified(user: User, *, save: bool = True) -> None:
    user.is_account_verified = True
    user.email_verified_at = timezone.now()
    user.verify_otp = ""
    user.verify_otp_expire_at = None
    if save:
        user.save(
            update_fields=[
                "is_account_verified",
                "email_verified_at",
                "verify_otp",
                "verify_otp_expire_at",
                "updated_at",
            ],
        )


def clear_expired_otps() -> int:
    """Blank OTP codes whose expiry has passed. Returns the number of codes cleared."""
    now = timezone.now()
    user_model = get_user_model()
    cleared = 0
    for code_field, expiry_field in _OTP_FIELDS.values():
        cleared += (
            user_model.objects.exclude(**{code_field: ""})
            .filter(**{f"{expiry_field}__lt": now})
            .update(**{code_field: "", expiry_field: None, "updated_at": now})
        )
    return cleared


def revoke_refresh_tokens(user: User) -> int:
    """Blacklist every outstanding refresh token of ``user``."""
    from rest_framework_simplejwt.token_blacklist.models import (  # noqa: PLC0415
        BlacklistedToken,
        OutstandingToken,
    )

    revoked = 0
    for token in OutstandingToken.objects.filter(user=user):
        _, created = BlacklistedToken.objects.get_or_create(token=token)
        revoked += int(created)
    if revoked:
        logger.info("Revoked %s refresh tokens for user %s", revoked, user.pk)
    return revoked
