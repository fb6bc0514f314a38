from datetime import date, datetime
from typing import Iterable, List

from .constants import LEAD_TIME_MINUTES, SLOT_TEMPLATE
from .models import Appointment
from .utils.time_utils import slot_to_minutes


def available_slots(
    target_date: date,
    occupied_times: Iterable[str],
    now: datetime,
    template: Iterable[str] = SLOT_TEMPLATE,
    lead_minutes: int = LEAD_TIME_MINUTES,
) -> List[str]:
    """
    Remaining bookable start times for ``target_date``, in template order.

    On the day of ``now`` a slot survives only if it starts more than
    ``lead_minutes`` after ``now``; other days keep the whole template.
    Occupied slots are removed either way. ``now`` must already be in the
    business time zone.
    """
    occupied = set(occupied_times)
    slots = list(template)

    if target_date == now.date():
        cutoff = now.hour * 60 + now.minute + lead_minutes
        slots = [s for s in slots if slot_to_minutes(s) > cutoff]

    return [s for s in slots if s not in occupied]


def occupied_times(target_date: date) -> set:
    """Slot times held by pending or confirmed appointments on that date."""
    return set(
        Appointment.objects
        .filter(date=target_date, status__in=Appointment.LIVE_STATUSES)
        .values_list("time", flat=True)
    )
