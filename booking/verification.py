"""
Phone-number sign-in for customers.

``start_verification`` sends a one-time code and returns the pending
PhoneVerification; its id is the handle the client presents to
``complete_verification`` along with the code. Each attempt lives in its
own row, so concurrent sign-ins never share state.
"""
import logging
import secrets
from datetime import timedelta

from django.contrib.auth.hashers import check_password, make_password
from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone

from .constants import (
    VERIFICATION_CODE_LENGTH,
    VERIFICATION_HOURLY_LIMIT,
    VERIFICATION_MAX_ATTEMPTS,
    VERIFICATION_RESEND_SECONDS,
    VERIFICATION_TTL_MINUTES,
)
from .customers import create_or_update_profile
from .exceptions import SmsDeliveryError, VerificationError, VerificationThrottled
from .models import PhoneVerification
from .sms import send_sms

logger = logging.getLogger(__name__)


def generate_code(length: int = VERIFICATION_CODE_LENGTH) -> str:
    return str(secrets.randbelow(10 ** length)).zfill(length)


def _check_send_allowed(phone: str, now):
    recent = PhoneVerification.objects.filter(phone=phone, created_at__gt=now - timedelta(hours=1))
    if recent.filter(created_at__gt=now - timedelta(seconds=VERIFICATION_RESEND_SECONDS)).exists():
        raise VerificationThrottled("Please wait a minute before requesting another code.")
    if recent.count() >= VERIFICATION_HOURLY_LIMIT:
        raise VerificationThrottled()


def start_verification(phone: str) -> PhoneVerification:
    """``phone`` must already be normalized."""
    now = timezone.now()
    # rows older than the throttle window are long expired
    pruned, _ = PhoneVerification.objects.filter(created_at__lte=now - timedelta(hours=1)).delete()
    if pruned:
        logger.debug("Pruned %d stale phone verifications", pruned)

    _check_send_allowed(phone, now)

    code = generate_code()
    verification = PhoneVerification.objects.create(
        phone=phone,
        code_hash=make_password(code),
        expires_at=now + timedelta(minutes=VERIFICATION_TTL_MINUTES),
    )
    try:
        send_sms(phone, f"Your BarberBook verification code is {code}")
    except SmsDeliveryError:
        # an unsent code must not count against the throttle
        verification.delete()
        raise
    logger.info("Verification %s started for %s", verification.id, phone)
    return verification


def _check_usable(verification: PhoneVerification, now):
    if verification.verified_at is not None:
        raise VerificationError("This verification code has already been used")
    if verification.expires_at <= now:
        raise VerificationError("Verification code has expired. Please request a new one.")
    if verification.attempts >= VERIFICATION_MAX_ATTEMPTS:
        raise VerificationError("Too many attempts. Please request a new code.")


def complete_verification(verification_id, code: str, display_name: str = None, email: str = None):
    """
    Check the code; on success return the (new or existing) Customer.

    Every check spends one attempt, claimed in the database before the code
    is compared, and the code is consumed with a conditional write, so
    parallel requests can neither exceed the attempt limit nor use one
    code twice.
    """
    try:
        verification = PhoneVerification.objects.get(pk=verification_id)
    except (PhoneVerification.DoesNotExist, ValidationError, ValueError):
        raise VerificationError("Verification session not found")

    now = timezone.now()
    _check_usable(verification, now)

    usable = PhoneVerification.objects.filter(
        pk=verification.pk,
        verified_at__isnull=True,
        expires_at__gt=now,
        attempts__lt=VERIFICATION_MAX_ATTEMPTS,
    )
    if not usable.update(attempts=F("attempts") + 1):
        verification.refresh_from_db()
        _check_usable(verification, now)
        raise VerificationError("Too many attempts. Please request a new code.")

    if not check_password(code, verification.code_hash):
        logger.info("Wrong code for verification %s", verification.id)
        raise VerificationError("Invalid verification code")

    if not PhoneVerification.objects.filter(pk=verification.pk, verified_at__isnull=True).update(verified_at=now):
        raise VerificationError("This verification code has already been used")

    customer = create_or_update_profile(verification.phone, display_name=display_name, email=email)
    logger.info("Phone %s verified for customer %s", verification.phone, customer.uid)
    return customer
