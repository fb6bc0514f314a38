import re

from django import forms
from django.conf import settings

from .constants import APPOINTMENT_SERVICES, SLOT_TEMPLATE, VERIFICATION_CODE_LENGTH
from .models import Appointment
from .phone import normalize_phone, prefix_for_country
from .utils.time_utils import business_today

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
NAME_RE = re.compile(r"^[A-Za-z\s\u00C0-\u024F\u1E00-\u1EFF]+$")

SERVICE_CHOICES = [(s, s) for s in APPOINTMENT_SERVICES]
SLOT_CHOICES = [(s, s) for s in SLOT_TEMPLATE]
LANGUAGE_CHOICES = [("en", "English"), ("es", "Español"), ("ar", "العربية"), ("fr", "Français")]


class IsoDateField(forms.DateField):
    """Strict 'YYYY-MM-DD' date."""
    input_formats = ["%Y-%m-%d"]
    default_error_messages = {
        "invalid": "Date must be in YYYY-MM-DD format",
    }

    def to_python(self, value):
        if isinstance(value, str) and value.strip() and not DATE_RE.match(value.strip()):
            raise forms.ValidationError(self.error_messages["invalid"], code="invalid")
        return super().to_python(value)


def clean_phone_value(value, country=None):
    """Normalize a phone field, turning ValueError into a form error."""
    prefix = prefix_for_country(country) or settings.DEFAULT_PHONE_PREFIX
    try:
        return normalize_phone(value, prefix)
    except ValueError as exc:
        raise forms.ValidationError(str(exc))


class BookingForm(forms.Form):
    """
    Public booking request. Status is never taken from the client;
    the store always creates the appointment as pending.
    """

    name = forms.CharField(min_length=2, max_length=100)
    email = forms.EmailField(required=False)
    # ISO country code for numbers typed without "+<code>"
    country = forms.CharField(required=False, max_length=2)
    phone = forms.CharField(max_length=30)
    service = forms.ChoiceField(choices=SERVICE_CHOICES)
    date = IsoDateField()
    time = forms.ChoiceField(
        choices=SLOT_CHOICES,
        error_messages={"invalid_choice": "Please select one of the available times"},
    )

    customerId = forms.CharField(required=False, max_length=64)
    customerEmail = forms.EmailField(required=False)
    customerPhone = forms.CharField(required=False, max_length=30)

    def clean_name(self):
        name = self.cleaned_data["name"]
        if not NAME_RE.match(name):
            raise forms.ValidationError("Name can only contain letters and spaces")
        return name

    def clean_phone(self):
        return clean_phone_value(self.cleaned_data["phone"], self.cleaned_data.get("country"))

    def clean_date(self):
        appt_date = self.cleaned_data["date"]
        if appt_date < business_today():
            raise forms.ValidationError("Cannot book appointments for past dates")
        return appt_date

    def clean_customerPhone(self):
        value = self.cleaned_data.get("customerPhone")
        if not value:
            return None
        return clean_phone_value(value, self.cleaned_data.get("country"))

    def store_kwargs(self):
        data = self.cleaned_data
        return {
            "name": data["name"],
            "email": data.get("email") or "",
            "phone": data["phone"],
            "service": data["service"],
            "date": data["date"],
            "time": data["time"],
            "customer_uid": data.get("customerId") or None,
            "customer_email": data.get("customerEmail") or None,
            "customer_phone": data.get("customerPhone") or None,
        }


class SlotsQueryForm(forms.Form):
    date = IsoDateField(error_messages={"required": "Date parameter is required"})


class StatusForm(forms.Form):
    status = forms.ChoiceField(
        choices=Appointment.STATUS_CHOICES,
        error_messages={
            "required": "Invalid status",
            "invalid_choice": "Invalid status",
        },
    )


class AppointmentUpdateForm(forms.Form):
    """Partial update; only keys present in the payload are applied."""

    id = forms.CharField()
    status = forms.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False)
    name = forms.CharField(min_length=2, max_length=100, required=False)
    # "" clears the email
    email = forms.EmailField(required=False)
    country = forms.CharField(required=False, max_length=2)
    phone = forms.CharField(max_length=30, required=False)
    service = forms.ChoiceField(choices=SERVICE_CHOICES, required=False)
    date = IsoDateField(required=False)
    time = forms.ChoiceField(choices=SLOT_CHOICES, required=False)

    def clean_phone(self):
        value = self.cleaned_data.get("phone")
        if not value:
            return value
        return clean_phone_value(value, self.cleaned_data.get("country"))

    def changes(self):
        data = self.cleaned_data
        changed = {
            field: data[field]
            for field in ("status", "name", "phone", "service", "date", "time")
            if field in self.data and data.get(field) not in (None, "")
        }
        if "email" in self.data:
            changed["email"] = data.get("email") or ""
        return changed


class LoginForm(forms.Form):
    username = forms.CharField(max_length=150)
    password = forms.CharField(max_length=128, strip=False)


class PhoneStartForm(forms.Form):
    country = forms.CharField(required=False, max_length=2)
    phone = forms.CharField(max_length=30)

    def clean_phone(self):
        return clean_phone_value(self.cleaned_data["phone"], self.cleaned_data.get("country"))


class PhoneVerifyForm(forms.Form):
    verificationId = forms.UUIDField(error_messages={"invalid": "Verification session not found"})
    code = forms.RegexField(
        regex=rf"^\d{{{VERIFICATION_CODE_LENGTH}}}$",
        error_messages={"invalid": f"Code must be {VERIFICATION_CODE_LENGTH} digits"},
    )
    displayName = forms.CharField(required=False, max_length=100)
    email = forms.EmailField(required=False)


class CustomerProfileForm(forms.Form):
    displayName = forms.CharField(required=False, max_length=100)
    email = forms.EmailField(required=False)
    language = forms.ChoiceField(choices=LANGUAGE_CHOICES, required=False)
