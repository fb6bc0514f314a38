"""
Admin session for the dashboard API.

Admins sign in against the ADMIN_CREDENTIALS allow-list ("username:hash"
entries, hashes made by Django's password hashers). A successful login
sets the ``auth-token`` cookie, signed so it cannot be forged client-side,
for 24 hours.
"""
import logging
from functools import wraps

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password

from booking.utils.http import json_error

logger = logging.getLogger(__name__)

ADMIN_SESSION_SALT = "barberbook.admin-session"
SESSION_SENTINEL = "authenticated"


def admin_credentials():
    """ADMIN_CREDENTIALS as {username: encoded_password}."""
    creds = {}
    for entry in settings.ADMIN_CREDENTIALS:
        username, sep, encoded = entry.strip().partition(":")
        if not sep or not username or not encoded:
            logger.warning("Ignoring malformed ADMIN_CREDENTIALS entry")
            continue
        creds[username] = encoded
    return creds


def check_admin_credentials(username, password):
    encoded = admin_credentials().get(username)
    if encoded is None:
        # hash anyway so unknown usernames take as long as wrong passwords
        make_password(password)
        return False
    return check_password(password, encoded)


def issue_admin_session(response):
    response.set_signed_cookie(
        settings.ADMIN_SESSION_COOKIE,
        SESSION_SENTINEL,
        salt=ADMIN_SESSION_SALT,
        max_age=settings.ADMIN_SESSION_MAX_AGE,
        httponly=True,
        samesite="Lax",
        secure=settings.IS_PRODUCTION,
    )
    return response


def clear_admin_session(response):
    response.delete_cookie(settings.ADMIN_SESSION_COOKIE, samesite="Lax")
    return response


def admin_session_token(request):
    """Unsigned cookie value, or None when missing, tampered or expired."""
    return request.get_signed_cookie(
        settings.ADMIN_SESSION_COOKIE,
        default=None,
        salt=ADMIN_SESSION_SALT,
        max_age=settings.ADMIN_SESSION_MAX_AGE,
    )


def admin_session_required(view):
    """Reject with 401 before the view touches the store."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if admin_session_token(request) is None:
            return json_error("Unauthorized", status=401)
        return view(request, *args, **kwargs)

    return wrapper
