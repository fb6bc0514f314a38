import logging

from django.http import JsonResponse

from booking import services as store
from booking.forms import AppointmentUpdateForm, LoginForm, StatusForm
from booking.models import Appointment
from booking.utils.http import api_view, allow_methods, form_error, json_body, json_error
from booking.utils.time_utils import business_today, parse_date

from .auth import (
    SESSION_SENTINEL,
    admin_session_required,
    admin_session_token,
    check_admin_credentials,
    clear_admin_session,
    issue_admin_session,
)
from .services import appointment_stats, todays_schedule
from .utils.chart_utils import build_appointment_chart

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    Appointment.STATUS_CONFIRMED: "Appointment confirmed successfully",
    Appointment.STATUS_CANCELLED: "Appointment cancelled successfully",
}


# --- Session ---

@api_view
@allow_methods("POST")
def login(request):
    form = LoginForm(json_body(request))
    if not form.is_valid() or not check_admin_credentials(
        form.cleaned_data["username"], form.cleaned_data["password"]
    ):
        logger.info("Failed admin login attempt")
        return json_error("Invalid username or password", status=401)

    response = JsonResponse({"success": True, "message": "Login successful"})
    return issue_admin_session(response)


@api_view
@allow_methods("POST")
def logout(request):
    response = JsonResponse({"success": True, "message": "Logged out successfully"})
    return clear_admin_session(response)


@api_view
@allow_methods("GET")
def auth_check(request):
    if admin_session_token(request) != SESSION_SENTINEL:
        return json_error("Not authenticated", status=401)
    return JsonResponse({"success": True, "authenticated": True})


# --- Appointments ---

@api_view
@allow_methods("GET")
@admin_session_required
def appointments(request):
    status = request.GET.get("status", "").strip().lower()
    date_param = request.GET.get("date", "").strip().lower()

    if status in ("", "all"):
        status = None
    elif status not in store.VALID_STATUSES:
        return json_error("Invalid status filter", status=400)

    on_date = None
    if date_param == "today":
        on_date = business_today()
    elif date_param not in ("", "all"):
        on_date = parse_date(date_param)
        if on_date is None:
            return json_error("Date must be in YYYY-MM-DD format", status=400)

    items = store.list_appointments(status=status, on_date=on_date)
    return JsonResponse({
        "success": True,
        "appointments": [a.as_dict() for a in items],
    })


@api_view
@allow_methods("PATCH", "DELETE")
@admin_session_required
def appointment_detail(request, appointment_id):
    if request.method == "DELETE":
        store.delete_appointment(appointment_id)
        return JsonResponse({"success": True, "message": "Appointment deleted successfully"})

    form = StatusForm(json_body(request))
    if not form.is_valid():
        return json_error("Invalid status", status=400)

    store.set_status(appointment_id, form.cleaned_data["status"])
    return JsonResponse({"success": True, "message": "Appointment updated successfully"})


@api_view
@allow_methods("PATCH", "DELETE")
@admin_session_required
def update(request):
    """Older combined edit/delete surface, kept for existing dashboard clients."""
    if request.method == "DELETE":
        appointment_id = request.GET.get("id")
        if not appointment_id:
            return json_error("Appointment ID is required", status=400)
        store.delete_appointment(appointment_id)
        return JsonResponse({"success": True, "message": "Appointment deleted successfully"})

    form = AppointmentUpdateForm(json_body(request))
    if not form.is_valid():
        return form_error(form)

    changes = form.changes()
    store.update_appointment(form.cleaned_data["id"], changes)
    message = STATUS_MESSAGES.get(changes.get("status"), "Appointment updated successfully")
    return JsonResponse({"success": True, "message": message})


@api_view
@allow_methods("GET")
@admin_session_required
def stats(request):
    base = parse_date(request.GET.get("start")) or business_today()
    return JsonResponse({
        "success": True,
        "stats": appointment_stats(),
        "today": [a.as_dict() for a in todays_schedule()],
        "chart": build_appointment_chart(request.GET.get("view"), base),
    })
