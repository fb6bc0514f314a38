import json
from datetime import datetime, timedelta
from unittest.mock import patch

from django.db import DatabaseError
from django.http import HttpResponse
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from booking.constants import SLOT_TEMPLATE
from booking.customers import set_customer_session
from booking.models import Appointment, Customer


def future_day(days=3):
    return timezone.localdate() + timedelta(days=days)


class BookAppointmentTests(TestCase):
    def setUp(self):
        self.url = reverse("booking:book")
        self.day = future_day()
        self.payload = {
            "name": "John Smith",
            "email": "john@test.com",
            "phone": "+34612345678",
            "service": "haircut",
            "date": self.day.isoformat(),
            "time": "10:00",
        }

    def post(self, payload):
        return self.client.post(self.url, data=json.dumps(payload), content_type="application/json")

    def test_booking_is_created_as_pending(self):
        print("\n[TEST] booking creates a pending appointment")

        response = self.post({**self.payload, "status": "confirmed"})
        body = response.json()
        print("  - response:", response.status_code, body)

        self.assertEqual(response.status_code, 201)
        self.assertTrue(body["success"])
        appt = Appointment.objects.get(pk=body["appointmentId"])
        self.assertEqual(appt.status, Appointment.STATUS_PENDING)
        self.assertEqual(appt.date, self.day)
        self.assertEqual(appt.time, "10:00")
        self.assertIsNotNone(appt.created_at)

    def test_past_date_is_rejected_before_store(self):
        print("\n[TEST] past dates are rejected")

        yesterday = timezone.localdate() - timedelta(days=1)
        response = self.post({**self.payload, "date": yesterday.isoformat()})
        print("  - response:", response.status_code, response.json())

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertIn("past", response.json()["error"])
        self.assertFalse(Appointment.objects.exists())

    def test_invalid_fields_are_reported(self):
        response = self.post({**self.payload, "service": "massage", "name": "J"})

        self.assertEqual(response.status_code, 400)
        details = response.json()["details"]
        self.assertIn("service", details)
        self.assertIn("name", details)
        self.assertFalse(Appointment.objects.exists())

    def test_time_must_come_from_template(self):
        response = self.post({**self.payload, "time": "12:15"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("time", response.json()["details"])

    def test_bad_date_format(self):
        response = self.post({**self.payload, "date": "06/05/2030"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"]["date"], "Date must be in YYYY-MM-DD format")

    def test_malformed_json(self):
        response = self.client.post(self.url, data="{not json", content_type="application/json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "error": "Request body must be a JSON object"})

    def test_get_is_not_allowed(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.json(), {"success": False, "error": "Method not allowed"})
        self.assertEqual(response["Allow"], "POST")

    def test_store_failure_is_a_generic_500(self):
        print("\n[TEST] store errors do not leak past the endpoint")

        with patch("booking.services.create_appointment", side_effect=DatabaseError("disk I/O error")):
            response = self.post(self.payload)
        print("  - response:", response.status_code, response.json())

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "error": "Internal server error"})

    def test_phone_is_normalized_with_country(self):
        print("\n[TEST] national phone number gets the country prefix")

        response = self.post({**self.payload, "phone": "612 34 56 78", "country": "ES"})
        self.assertEqual(response.status_code, 201)

        appt = Appointment.objects.get(pk=response.json()["appointmentId"])
        print("  - stored phone:", appt.phone)
        self.assertEqual(appt.phone, "+34612345678")

    def test_second_live_booking_of_same_slot_conflicts(self):
        print("\n[TEST] double booking is blocked for pending/confirmed")

        first = self.post(self.payload)
        second = self.post({**self.payload, "name": "Maria Garcia", "phone": "+34600000000"})
        print("  - second response:", second.status_code, second.json())

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 409)
        self.assertFalse(second.json()["success"])
        self.assertEqual(Appointment.objects.filter(date=self.day, time="10:00").count(), 1)

    def test_cancelled_booking_does_not_block_slot(self):
        print("\n[TEST] cancelled does NOT block booking")

        Appointment.objects.create(
            name="Old Customer",
            phone="+34600000000",
            service="beard",
            date=self.day,
            time="10:00",
            status=Appointment.STATUS_CANCELLED,
        )

        response = self.post(self.payload)
        self.assertEqual(response.status_code, 201, response.json())

    def test_customer_identity_fields_are_stored(self):
        response = self.post({
            **self.payload,
            "customerId": "abc123",
            "customerEmail": "john@test.com",
            "customerPhone": "+34612345678",
        })

        appt = Appointment.objects.get(pk=response.json()["appointmentId"])
        self.assertEqual(appt.customer_uid, "abc123")
        self.assertEqual(appt.customer_email, "john@test.com")
        self.assertEqual(appt.customer_phone, "+34612345678")

    def test_signed_in_customer_is_linked(self):
        customer = Customer.objects.create(phone="+34699999999", email="c@test.com", phone_verified=True)
        cookie_response = set_customer_session(HttpResponse(), customer)
        self.client.cookies.update(cookie_response.cookies)

        response = self.post({**self.payload, "customerId": "someone-else"})

        appt = Appointment.objects.get(pk=response.json()["appointmentId"])
        self.assertEqual(appt.customer_uid, str(customer.uid))
        self.assertEqual(appt.customer_phone, "+34699999999")


class SlotsEndpointTests(TestCase):
    def setUp(self):
        self.url = reverse("booking:slots")

    def _book(self, day, slot, status=Appointment.STATUS_PENDING):
        Appointment.objects.create(
            name="Booked", phone="+34612345678", service="both", date=day, time=slot, status=status
        )

    def test_missing_date(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Date parameter is required")

    def test_invalid_date(self):
        for value in ("2030-5-6", "tomorrow", "2030-02-30"):
            response = self.client.get(self.url, {"date": value})
            self.assertEqual(response.status_code, 400, value)

    def test_past_date(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        response = self.client.get(self.url, {"date": yesterday.isoformat()})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Cannot get slots for past dates")

    def test_future_date_excludes_live_bookings(self):
        day = future_day(5)
        self._book(day, "09:30")
        self._book(day, "15:00", Appointment.STATUS_CONFIRMED)
        self._book(day, "16:00", Appointment.STATUS_CANCELLED)

        response = self.client.get(self.url, {"date": day.isoformat()})
        body = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertTrue(body["success"])
        self.assertEqual(body["date"], day.isoformat())
        self.assertEqual(body["availableSlots"], [s for s in SLOT_TEMPLATE if s not in ("09:30", "15:00")])

    def test_response_is_cacheable_for_a_minute(self):
        response = self.client.get(self.url, {"date": future_day().isoformat()})

        self.assertIn("public", response["Cache-Control"])
        self.assertIn("max-age=60", response["Cache-Control"])

    def test_today_applies_lead_time(self):
        now = timezone.make_aware(datetime(2030, 5, 6, 9, 15))
        self._book(now.date(), "10:00")

        with patch("booking.views.business_now", return_value=now):
            response = self.client.get(self.url, {"date": "2030-05-06"})

        slots = response.json()["availableSlots"]
        self.assertEqual(slots[0], "10:30")
        self.assertNotIn("09:30", slots)
        self.assertNotIn("10:00", slots)
