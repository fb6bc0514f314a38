import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from .exceptions import (
    AppointmentChanged,
    AppointmentNotFound,
    BookingError,
    InvalidStatusTransition,
    SlotUnavailable,
)
from .models import Appointment, Customer
from .slots import available_slots, occupied_times
from .utils.time_utils import business_now

logger = logging.getLogger(__name__)

VALID_STATUSES = {value for value, _ in Appointment.STATUS_CHOICES}

# fields an administrator may change through a partial update
UPDATABLE_FIELDS = ("name", "email", "phone", "service", "date", "time", "status")
# ...and the ones that may be set to blank
CLEARABLE_FIELDS = ("email",)


def get_appointment(appointment_id, for_update=False) -> Appointment:
    """``for_update`` locks the row; only meaningful inside transaction.atomic()."""
    qs = Appointment.objects.select_for_update() if for_update else Appointment.objects
    try:
        return qs.get(pk=appointment_id)
    except (Appointment.DoesNotExist, ValidationError, ValueError):
        raise AppointmentNotFound()


def create_appointment(
    *,
    name: str,
    phone: str,
    service: str,
    date: date,
    time: str,
    email: str = "",
    customer: Optional[Customer] = None,
    customer_uid: Optional[str] = None,
    customer_email: Optional[str] = None,
    customer_phone: Optional[str] = None,
) -> Appointment:
    """
    Store a new booking request. Status is always pending and created_at
    is the store's write time. A live booking already holding the same
    (date, time) makes the insert fail with SlotUnavailable.
    """
    if customer is not None:
        customer_uid = str(customer.uid)
        customer_email = customer.email or customer_email
        customer_phone = customer.phone

    try:
        with transaction.atomic():
            appt = Appointment.objects.create(
                name=name,
                phone=phone,
                email=email or "",
                service=service,
                date=date,
                time=time,
                status=Appointment.STATUS_PENDING,
                customer_uid=customer_uid or None,
                customer_email=customer_email or None,
                customer_phone=customer_phone or None,
            )
    except IntegrityError:
        logger.info("Slot %s %s already taken, rejecting booking", date, time)
        raise SlotUnavailable()

    logger.info("Appointment %s booked for %s %s (%s)", appt.id, appt.date, appt.time, appt.service)
    return appt


def list_appointments(status: Optional[str] = None, on_date: Optional[date] = None) -> List[Appointment]:
    """All appointments, ascending by (date, time); optionally filtered."""
    qs = Appointment.objects.all()
    if status:
        qs = qs.filter(status=status)
    if on_date:
        qs = qs.filter(date=on_date)
    return list(qs.order_by("date", "time", "created_at"))


def customer_appointments(customer: Customer) -> List[Appointment]:
    return list(
        Appointment.objects
        .filter(customer_uid=str(customer.uid))
        .order_by("date", "time", "created_at")
    )


def set_status(appointment_id, status: str) -> Appointment:
    """Move an appointment to ``status``, touching no other field."""
    if status not in VALID_STATUSES:
        raise BookingError("Invalid status")

    try:
        with transaction.atomic():
            appt = get_appointment(appointment_id, for_update=True)
            if not appt.can_transition_to(status):
                raise InvalidStatusTransition(appt.status, status)
            if appt.status == status:
                return appt
            _write_if_unchanged(appt, status, status=status)
    except IntegrityError:
        raise SlotUnavailable()

    appt.status = status
    logger.info("Appointment %s is now %s", appt.id, status)
    return appt


def update_appointment(appointment_id, changes: Dict) -> Appointment:
    """
    Partial update. Status changes follow the same transition rules as
    set_status; moving onto a live slot raises SlotUnavailable.
    """
    changes = {
        k: v for k, v in changes.items()
        if k in UPDATABLE_FIELDS and (v not in (None, "") or (k in CLEARABLE_FIELDS and v == ""))
    }
    new_status = changes.get("status")
    if new_status is not None and new_status not in VALID_STATUSES:
        raise BookingError("Invalid status")

    try:
        with transaction.atomic():
            appt = get_appointment(appointment_id, for_update=True)
            if new_status is not None and not appt.can_transition_to(new_status):
                raise InvalidStatusTransition(appt.status, new_status)
            if not changes:
                return appt
            _write_if_unchanged(appt, new_status, **changes)
    except IntegrityError:
        raise SlotUnavailable()

    for field, value in changes.items():
        setattr(appt, field, value)
    logger.info("Appointment %s updated: %s", appt.id, ", ".join(sorted(changes)))
    return appt


def _write_if_unchanged(appt: Appointment, target_status: Optional[str], **fields) -> None:
    """
    Write ``fields`` only while the row still has the status ``appt`` was
    read with, so a transition is never applied on top of a newer one.
    """
    if Appointment.objects.filter(pk=appt.pk, status=appt.status).update(**fields):
        return

    current = Appointment.objects.filter(pk=appt.pk).values_list("status", flat=True).first()
    if current is None:
        raise AppointmentNotFound()
    if target_status is not None and target_status != current and \
            target_status not in Appointment.ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransition(current, target_status)
    raise AppointmentChanged()


def delete_appointment(appointment_id) -> None:
    appt = get_appointment(appointment_id)
    appt.delete()
    logger.info("Appointment %s deleted", appointment_id)


def get_available_slots(target_date: date, now: Optional[datetime] = None) -> List[str]:
    now = now or business_now()
    return available_slots(target_date, occupied_times(target_date), now)
