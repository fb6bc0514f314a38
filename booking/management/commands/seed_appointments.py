from datetime import timedelta

from django.core.management.base import BaseCommand

from booking.models import Appointment
from booking.utils.time_utils import business_today

# (name, phone, service, days from today, time, status)
SAMPLE_APPOINTMENTS = [
    ("John Smith", "+1234567890", "haircut", 1, "10:00", Appointment.STATUS_PENDING),
    ("Maria Garcia", "+34612345678", "both", 2, "14:30", Appointment.STATUS_CONFIRMED),
    ("Ahmed Hassan", "+33123456789", "beard", 0, "16:00", Appointment.STATUS_CANCELLED),
    ("Lisa Johnson", "+44987654321", "haircut", 3, "11:00", Appointment.STATUS_PENDING),
    ("Carlos Rodriguez", "+52555123456", "both", 4, "15:30", Appointment.STATUS_CONFIRMED),
]


class Command(BaseCommand):
    help = "Add sample appointments relative to today (live slots that are already taken are skipped)."

    def handle(self, *args, **options):
        today = business_today()
        created = 0

        for name, phone, service, offset, slot, status in SAMPLE_APPOINTMENTS:
            day = today + timedelta(days=offset)
            taken = Appointment.objects.filter(
                date=day, time=slot, status__in=Appointment.LIVE_STATUSES
            ).exists()
            if taken and status in Appointment.LIVE_STATUSES:
                self.stdout.write(f"  - skipped {name}: {day} {slot} is already booked")
                continue

            Appointment.objects.create(
                name=name,
                phone=phone,
                service=service,
                date=day,
                time=slot,
                status=status,
            )
            created += 1

        total = Appointment.objects.count()
        self.stdout.write(self.style.SUCCESS(f"Added {created} sample appointments ({total} in total)."))
