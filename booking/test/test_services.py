from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from booking.exceptions import AppointmentChanged, InvalidStatusTransition
from booking.models import Appointment
from booking.services import set_status, update_appointment


class StaleWriteTests(TestCase):
    """A write based on an old read must not undo a newer status change."""

    def setUp(self):
        self.appt = Appointment.objects.create(
            name="Test Customer",
            phone="+34612345678",
            service="haircut",
            date=timezone.localdate() + timedelta(days=2),
            time="10:00",
        )

    def read_now(self):
        return Appointment.objects.get(pk=self.appt.pk)

    def test_confirm_from_old_read_does_not_revive_cancelled(self):
        print("\n[TEST] confirm based on an old read keeps the cancel")

        old_read = self.read_now()
        set_status(self.appt.id, Appointment.STATUS_CANCELLED)

        with patch("booking.services.get_appointment", return_value=old_read):
            with self.assertRaises(InvalidStatusTransition):
                set_status(self.appt.id, Appointment.STATUS_CONFIRMED)

        self.appt.refresh_from_db()
        print("  - stored status:", self.appt.status)
        self.assertEqual(self.appt.status, Appointment.STATUS_CANCELLED)

    def test_allowed_move_from_old_read_asks_for_reload(self):
        old_read = self.read_now()
        set_status(self.appt.id, Appointment.STATUS_CONFIRMED)

        with patch("booking.services.get_appointment", return_value=old_read):
            with self.assertRaises(AppointmentChanged):
                set_status(self.appt.id, Appointment.STATUS_CANCELLED)

        self.appt.refresh_from_db()
        self.assertEqual(self.appt.status, Appointment.STATUS_CONFIRMED)

    def test_edit_from_old_read_is_rejected(self):
        old_read = self.read_now()
        set_status(self.appt.id, Appointment.STATUS_CANCELLED)

        with patch("booking.services.get_appointment", return_value=old_read):
            with self.assertRaises(AppointmentChanged):
                update_appointment(self.appt.id, {"name": "Someone Else"})
            with self.assertRaises(InvalidStatusTransition):
                update_appointment(self.appt.id, {"status": Appointment.STATUS_CONFIRMED})

        self.appt.refresh_from_db()
        self.assertEqual(self.appt.name, "Test Customer")
        self.assertEqual(self.appt.status, Appointment.STATUS_CANCELLED)

    def test_fresh_writes_still_apply(self):
        set_status(self.appt.id, Appointment.STATUS_CONFIRMED)
        update_appointment(self.appt.id, {"name": "Renamed Customer", "email": ""})

        self.appt.refresh_from_db()
        self.assertEqual(self.appt.status, Appointment.STATUS_CONFIRMED)
        self.assertEqual(self.appt.name, "Renamed Customer")
