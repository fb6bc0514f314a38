import logging

from django.http import JsonResponse
from django.utils.cache import patch_cache_control

from . import services
from .customers import (
    clear_customer_session,
    customer_session_required,
    session_customer,
    set_customer_session,
    update_profile,
)
from .forms import BookingForm, CustomerProfileForm, PhoneStartForm, PhoneVerifyForm, SlotsQueryForm
from .utils.http import api_view, allow_methods, form_error, json_body, json_error
from .utils.time_utils import business_now
from .verification import complete_verification, start_verification

logger = logging.getLogger(__name__)

SLOTS_CACHE_SECONDS = 60


@api_view
@allow_methods("POST")
def book(request):
    form = BookingForm(json_body(request))
    if not form.is_valid():
        return form_error(form)

    appt = services.create_appointment(customer=session_customer(request), **form.store_kwargs())
    return JsonResponse(
        {
            "success": True,
            "appointmentId": str(appt.id),
            "message": "Appointment booked successfully",
        },
        status=201,
    )


@api_view
@allow_methods("GET")
def slots(request):
    form = SlotsQueryForm(request.GET)
    if not form.is_valid():
        return form_error(form)

    target = form.cleaned_data["date"]
    now = business_now()
    if target < now.date():
        return json_error("Cannot get slots for past dates", status=400)

    response = JsonResponse({
        "success": True,
        "date": target.isoformat(),
        "availableSlots": services.get_available_slots(target, now=now),
    })
    patch_cache_control(response, public=True, max_age=SLOTS_CACHE_SECONDS)
    return response


# --- Customer phone sign-in ---

@api_view
@allow_methods("POST")
def phone_start(request):
    form = PhoneStartForm(json_body(request))
    if not form.is_valid():
        return form_error(form)

    verification = start_verification(form.cleaned_data["phone"])
    return JsonResponse(
        {
            "success": True,
            "verificationId": str(verification.id),
            "expiresAt": verification.expires_at.isoformat(),
        },
        status=201,
    )


@api_view
@allow_methods("POST")
def phone_verify(request):
    form = PhoneVerifyForm(json_body(request))
    if not form.is_valid():
        return form_error(form)

    data = form.cleaned_data
    customer = complete_verification(
        data["verificationId"],
        data["code"],
        display_name=data.get("displayName"),
        email=data.get("email"),
    )
    response = JsonResponse({"success": True, "customer": customer.as_dict()})
    return set_customer_session(response, customer)


@api_view
@allow_methods("GET", "PATCH")
@customer_session_required
def customer_profile(request):
    customer = request.customer
    if request.method == "PATCH":
        payload = json_body(request)
        form = CustomerProfileForm(payload)
        if not form.is_valid():
            return form_error(form)
        data = form.cleaned_data
        update_profile(
            customer,
            display_name=data["displayName"] if "displayName" in payload else None,
            email=data["email"] if "email" in payload else None,
            language=data.get("language") or None,
        )
    return JsonResponse({"success": True, "customer": customer.as_dict()})


@api_view
@allow_methods("POST")
def customer_logout(request):
    response = JsonResponse({"success": True, "message": "Signed out successfully"})
    return clear_customer_session(response)


@api_view
@allow_methods("GET")
@customer_session_required
def customer_appointments(request):
    appointments = services.customer_appointments(request.customer)
    return JsonResponse({
        "success": True,
        "appointments": [a.as_dict() for a in appointments],
    })
