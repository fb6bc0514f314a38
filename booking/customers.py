from functools import wraps

from django.conf import settings

from .models import Customer
from .utils.http import json_error

CUSTOMER_SESSION_SALT = "barberbook.customer-session"


def create_or_update_profile(phone, display_name=None, email=None):
    """
    Profile for a verified phone. Existing profiles keep their data unless
    a new display name or email is supplied.
    """
    customer, _ = Customer.objects.get_or_create(phone=phone)
    customer.phone_verified = True
    if display_name:
        customer.display_name = display_name.strip()
    if email:
        customer.email = email.strip()
    customer.save()
    return customer


def update_profile(customer, display_name=None, email=None, language=None):
    fields = []
    if display_name is not None:
        customer.display_name = display_name.strip()
        fields.append("display_name")
    if email is not None:
        customer.email = email.strip()
        fields.append("email")
    if language:
        customer.language = language
        fields.append("language")
    if fields:
        customer.save(update_fields=fields + ["updated_at"])
    return customer


def set_customer_session(response, customer):
    response.set_signed_cookie(
        settings.CUSTOMER_SESSION_COOKIE,
        str(customer.uid),
        salt=CUSTOMER_SESSION_SALT,
        max_age=settings.CUSTOMER_SESSION_MAX_AGE,
        httponly=True,
        samesite="Lax",
        secure=settings.IS_PRODUCTION,
    )
    return response


def clear_customer_session(response):
    response.delete_cookie(settings.CUSTOMER_SESSION_COOKIE, samesite="Lax")
    return response


def session_customer(request):
    """Customer behind the request's session cookie, or None."""
    uid = request.get_signed_cookie(
        settings.CUSTOMER_SESSION_COOKIE,
        default=None,
        salt=CUSTOMER_SESSION_SALT,
        max_age=settings.CUSTOMER_SESSION_MAX_AGE,
    )
    if not uid:
        return None
    return Customer.objects.filter(uid=uid).first()


def customer_session_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        customer = session_customer(request)
        if customer is None:
            return json_error("Not signed in", status=401)
        request.customer = customer
        return view(request, *args, **kwargs)

    return wrapper
