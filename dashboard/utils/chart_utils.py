from datetime import date, timedelta
from django.db.models import Count
from booking.models import Appointment

CHART_VIEWS = {"day", "week", "month"}


def _add_months(d: date, n: int) -> date:
    """Return a date n months from d (always day=1)."""
    y = d.year + (d.month - 1 + n) // 12
    m = (d.month - 1 + n) % 12 + 1
    return date(y, m, 1)


def _counts_by_date(start: date, end: date):
    qs = (
        Appointment.objects
        .filter(date__range=(start, end))
        .order_by()
        .values("date")
        .annotate(count=Count("id"))
    )
    return {row["date"]: row["count"] for row in qs}


def build_appointment_chart(view_mode: str, base: date):
    """
    Bookings per bucket ending at ``base``:
      day   - 7 daily buckets
      week  - 4 weekly buckets
      month - 6 monthly buckets
    plus the start dates for the previous/next window.
    """
    view_mode = (view_mode or "day").lower()
    if view_mode not in CHART_VIEWS:
        view_mode = "day"

    if view_mode == "day":
        window = 7
        start = base - timedelta(days=window - 1)
        counts = _counts_by_date(start, base)

        days = [start + timedelta(days=i) for i in range(window)]
        labels = [d.strftime("%d %b") for d in days]
        values = [counts.get(d, 0) for d in days]

        period_label = f"{start.strftime('%d %b')} - {base.strftime('%d %b %Y')}"
        prev_start = (start - timedelta(days=window)).isoformat()
        next_start = (base + timedelta(days=window)).isoformat()

    elif view_mode == "week":
        weeks = 4
        start = base - timedelta(days=weeks * 7 - 1)
        counts = _counts_by_date(start, base)

        values = [0] * weeks
        for d, n in counts.items():
            idx = (d - start).days // 7
            if 0 <= idx < weeks:
                values[idx] += n
        labels = [f"Week {i + 1}" for i in range(weeks)]

        period_label = f"{start.strftime('%d %b')} - {base.strftime('%d %b %Y')}"
        prev_start = (start - timedelta(days=weeks * 7)).isoformat()
        next_start = (base + timedelta(days=weeks * 7)).isoformat()

    else:  # month
        months = 6
        last_month = base.replace(day=1)
        first_month = _add_months(last_month, -(months - 1))
        counts = _counts_by_date(first_month, _add_months(last_month, 1) - timedelta(days=1))

        values = [0] * months
        for d, n in counts.items():
            idx = (d.year - first_month.year) * 12 + (d.month - first_month.month)
            if 0 <= idx < months:
                values[idx] += n
        labels = [_add_months(first_month, i).strftime("%b") for i in range(months)]

        period_label = f"{first_month.strftime('%b %Y')} - {last_month.strftime('%b %Y')}"
        prev_start = _add_months(last_month, -months).isoformat()
        next_start = _add_months(last_month, months).isoformat()

    return {
        "view": view_mode,
        "labels": labels,
        "values": values,
        "period_label": period_label,
        "prev_start": prev_start,
        "next_start": next_start,
    }
