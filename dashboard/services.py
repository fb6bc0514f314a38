from datetime import timedelta
from typing import Dict, List

from django.db.models import Count

from booking.models import Appointment
from booking.utils.time_utils import business_today


def appointment_stats() -> Dict[str, int]:
    """
    Numbers for the dashboard stat cards: totals per status, today's live
    bookings, and live bookings over the next 7 days.
    """
    today = business_today()

    by_status = {
        row["status"]: row["count"]
        for row in (
            Appointment.objects
            .order_by()
            .values("status")
            .annotate(count=Count("id"))
        )
    }

    live = Appointment.objects.filter(status__in=Appointment.LIVE_STATUSES)

    return {
        "total": sum(by_status.values()),
        "pending": by_status.get(Appointment.STATUS_PENDING, 0),
        "confirmed": by_status.get(Appointment.STATUS_CONFIRMED, 0),
        "cancelled": by_status.get(Appointment.STATUS_CANCELLED, 0),
        "today": live.filter(date=today).count(),
        "upcomingWeek": live.filter(date__gte=today, date__lte=today + timedelta(days=7)).count(),
    }


def todays_schedule() -> List[Appointment]:
    """Live bookings for today in slot order."""
    return list(
        Appointment.objects
        .filter(date=business_today(), status__in=Appointment.LIVE_STATUSES)
        .order_by("time")
    )
