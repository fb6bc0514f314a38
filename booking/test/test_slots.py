from datetime import date, datetime, timedelta

from django.test import SimpleTestCase, TestCase

from booking.constants import SLOT_TEMPLATE
from booking.models import Appointment
from booking.services import get_available_slots
from booking.slots import available_slots, occupied_times
from booking.utils.time_utils import slot_to_minutes

SMALL_TEMPLATE = ("09:00", "09:30", "10:00")
DAY = date(2030, 5, 6)


class AvailableSlotsTests(SimpleTestCase):
    def test_other_day_is_template_minus_occupied_in_order(self):
        now = datetime(2030, 5, 5, 12, 0)
        occupied = {"16:30", "09:30", "14:00"}

        result = available_slots(DAY, occupied, now)

        self.assertEqual(result, [s for s in SLOT_TEMPLATE if s not in occupied])

    def test_future_day_ignores_clock_even_late_at_night(self):
        now = datetime(2030, 5, 5, 23, 50)
        self.assertEqual(available_slots(DAY, set(), now), list(SLOT_TEMPLATE))

    def test_same_day_slots_start_after_buffer(self):
        for hour, minute in [(8, 0), (9, 15), (10, 59), (13, 30), (16, 29), (17, 0)]:
            now = datetime(DAY.year, DAY.month, DAY.day, hour, minute)
            result = available_slots(DAY, set(), now)
            for slot in result:
                self.assertGreater(slot_to_minutes(slot), hour * 60 + minute + 30, (now, slot))

    def test_buffer_boundary_is_strict(self):
        # 09:30 + 30 min = 10:00, which is not strictly later
        now = datetime(DAY.year, DAY.month, DAY.day, 9, 30)
        self.assertEqual(available_slots(DAY, set(), now)[0], "10:30")

    def test_same_day_skips_lunch_gap_in_order(self):
        now = datetime(DAY.year, DAY.month, DAY.day, 11, 45)
        self.assertEqual(
            available_slots(DAY, set(), now),
            ["14:00", "14:30", "15:00", "15:30", "16:00", "16:30", "17:00"],
        )

    def test_after_closing_nothing_is_left(self):
        now = datetime(DAY.year, DAY.month, DAY.day, 16, 45)
        self.assertEqual(available_slots(DAY, set(), now), [])

    def test_occupied_result_is_subset_of_unoccupied(self):
        now = datetime(DAY.year, DAY.month, DAY.day, 10, 10)
        everything = available_slots(DAY, set(), now)
        for occupied in [set(), {"09:00"}, {"11:00", "15:30"}, set(SLOT_TEMPLATE)]:
            result = available_slots(DAY, occupied, now)
            self.assertTrue(set(result) <= set(everything))
            self.assertEqual(result, [s for s in everything if s in result])

    def test_past_and_occupied_slot_is_absent_once(self):
        now = datetime(DAY.year, DAY.month, DAY.day, 10, 0)
        result = available_slots(DAY, ["09:00", "09:00", "12:45"], now)
        self.assertNotIn("09:00", result)
        self.assertEqual(len(result), len(set(result)))

    def test_scenario_same_day_buffer_and_occupied(self):
        now = datetime(DAY.year, DAY.month, DAY.day, 9, 15)
        self.assertEqual(available_slots(DAY, {"10:00"}, now, template=SMALL_TEMPLATE), [])

    def test_scenario_tomorrow(self):
        now = datetime(DAY.year, DAY.month, DAY.day, 9, 15)
        tomorrow = DAY + timedelta(days=1)
        self.assertEqual(
            available_slots(tomorrow, {"09:30"}, now, template=SMALL_TEMPLATE),
            ["09:00", "10:00"],
        )

    def test_custom_lead_time(self):
        now = datetime(DAY.year, DAY.month, DAY.day, 9, 0)
        self.assertEqual(
            available_slots(DAY, set(), now, template=SMALL_TEMPLATE, lead_minutes=0),
            ["09:30", "10:00"],
        )


class OccupiedTimesTests(TestCase):
    def _book(self, slot, status, day=DAY):
        return Appointment.objects.create(
            name="Test Customer",
            phone="+34612345678",
            service="haircut",
            date=day,
            time=slot,
            status=status,
        )

    def test_only_live_bookings_on_that_date(self):
        self._book("09:00", Appointment.STATUS_PENDING)
        self._book("10:00", Appointment.STATUS_CONFIRMED)
        self._book("11:00", Appointment.STATUS_CANCELLED)
        self._book("14:00", Appointment.STATUS_CONFIRMED, day=DAY + timedelta(days=1))

        self.assertEqual(occupied_times(DAY), {"09:00", "10:00"})

    def test_get_available_slots_reads_the_store(self):
        self._book("09:30", Appointment.STATUS_PENDING)
        self._book("10:00", Appointment.STATUS_CANCELLED)
        now = datetime(DAY.year, DAY.month, DAY.day - 1, 18, 0)

        slots = get_available_slots(DAY, now=now)

        self.assertNotIn("09:30", slots)
        self.assertIn("10:00", slots)
        self.assertEqual(len(slots), len(SLOT_TEMPLATE) - 1)
