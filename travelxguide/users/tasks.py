import logging

from celery import shared_task
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

from travelxguide.users.services import OTP_RESET
from travelxguide.users.services import OTP_VERIFY
from travelxguide.users.services import clear_expired_otps

logger = logging.getLogger(__name__)

OTP_SUBJECTS = {
    OTP_VERIFY: "Account Verification OTP",
    OTP_RESET: "Password Reset OTP",
}

OTP_BODIES = {
    OTP_VERIFY: (
        "Your account verification code for {email} is {otp}.\n"
        "It expires in 24 hours."
    ),
    OTP_RESET: (
        "Your password reset code for {email} is {otp}.\n"
        "It expires in 15 minutes. Ignore this email if you did not ask for it."
    ),
}


@shared_task(name="users.send_otp_email")
def send_otp_email(user_id: int, purpose: str) -> bool:
    """Email the currently stored OTP of the given purpose to the user.

    Returns False when there is nothing to send (user gone or OTP consumed).
    """
    user = get_user_model().objects.filter(pk=user_id).first()
    if user is None:
        logger.warning("OTP email skipped: user %s not found", user_id)
        return False
    otp = user.verify_otp if purpose == OTP_VERIFY else user.reset_otp
    if not otp:
        logger.warning("OTP email skipped: no %s OTP for user %s", purpose, user_id)
        return False
    send_mail(
        OTP_SUBJECTS[purpose],
        OTP_BODIES[purpose].format(email=user.email, otp=otp),
        None,
        [user.email],
    )
    return True


@shared_task(name="users.purge_expired_otps")
def purge_expired_otps() -> int:
    cleared = clear_expired_otps()
    if cleared:
        logger.info("Cleared %s expired OTP codes", cleared)
    return cleared
