import json
from datetime import timedelta
from io import StringIO
from unittest.mock import patch

from django.contrib.auth.hashers import check_password, make_password
from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from booking.models import Appointment

FAST_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


class AdminSessionMixin:
    def setUp(self):
        creds = override_settings(ADMIN_CREDENTIALS=[
            f"admin:{make_password('admin123')}",
            f"admin@barberbook.com:{make_password('admin123')}",
        ])
        creds.enable()
        self.addCleanup(creds.disable)

    def login(self, username="admin", password="admin123"):
        return self.client.post(
            reverse("dashboard:login"),
            data=json.dumps({"username": username, "password": password}),
            content_type="application/json",
        )

    def make_appointment(self, slot="10:00", status=Appointment.STATUS_PENDING, days=2, name="Test Customer"):
        return Appointment.objects.create(
            name=name,
            phone="+34612345678",
            service="haircut",
            date=timezone.localdate() + timedelta(days=days),
            time=slot,
            status=status,
        )


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class AdminAuthTests(AdminSessionMixin, TestCase):
    def test_login_sets_session_cookie(self):
        response = self.login()

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        cookie = response.cookies["auth-token"]
        self.assertTrue(cookie["httponly"])
        self.assertEqual(cookie["samesite"], "Lax")
        self.assertEqual(cookie["max-age"], 60 * 60 * 24)
        self.assertFalse(cookie["secure"])

    def test_second_allow_list_entry(self):
        self.assertEqual(self.login(username="admin@barberbook.com").status_code, 200)

    @override_settings(IS_PRODUCTION=True)
    def test_cookie_is_secure_in_production(self):
        response = self.login()
        self.assertTrue(response.cookies["auth-token"]["secure"])

    def test_bad_credentials_do_not_say_which_part_was_wrong(self):
        wrong_password = self.login(password="nope")
        unknown_user = self.login(username="ghost")

        for response in (wrong_password, unknown_user):
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.json(), {"success": False, "error": "Invalid username or password"})
            self.assertNotIn("auth-token", response.cookies)

    def test_check(self):
        url = reverse("dashboard:auth_check")
        self.assertEqual(self.client.get(url).status_code, 401)

        self.login()
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "authenticated": True})

    def test_forged_cookie_is_rejected(self):
        self.client.cookies["auth-token"] = "authenticated"

        self.assertEqual(self.client.get(reverse("dashboard:auth_check")).status_code, 401)
        self.assertEqual(self.client.get(reverse("dashboard:appointments")).status_code, 401)

    def test_logout_always_succeeds_and_clears_cookie(self):
        self.assertEqual(self.client.post(reverse("dashboard:logout")).status_code, 200)

        self.login()
        response = self.client.post(reverse("dashboard:logout"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get(reverse("dashboard:auth_check")).status_code, 401)

    def test_admin_credential_command(self):
        out = StringIO()
        call_command("admin_credential", "owner", "--password", "s3cret-pass", stdout=out)

        username, _, encoded = out.getvalue().strip().partition(":")
        self.assertEqual(username, "owner")
        self.assertTrue(check_password("s3cret-pass", encoded))


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class AdminAccessRequiredTests(AdminSessionMixin, TestCase):
    def test_every_admin_endpoint_requires_session(self):
        appt = self.make_appointment()
        detail = reverse("dashboard:appointment_detail", args=[appt.id])
        update = reverse("dashboard:update")

        responses = [
            self.client.get(reverse("dashboard:appointments")),
            self.client.get(reverse("dashboard:stats")),
            self.client.patch(detail, data=json.dumps({"status": "confirmed"}), content_type="application/json"),
            self.client.delete(detail),
            self.client.patch(update, data=json.dumps({"id": str(appt.id), "status": "cancelled"}),
                              content_type="application/json"),
            self.client.delete(f"{update}?id={appt.id}"),
        ]

        for response in responses:
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.json(), {"success": False, "error": "Unauthorized"})

        appt.refresh_from_db()
        self.assertEqual(appt.status, Appointment.STATUS_PENDING)


@override_settings(PASSWORD_HASHERS=FAST_HASHERS)
class AdminAppointmentTests(AdminSessionMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.login()

    def patch(self, url, payload):
        return self.client.patch(url, data=json.dumps(payload), content_type="application/json")

    def detail_url(self, appt):
        return reverse("dashboard:appointment_detail", args=[appt.id])

    def test_list_is_sorted_by_date_then_time(self):
        self.make_appointment("15:00", days=2, name="Third")
        self.make_appointment("09:00", days=3, name="Fourth")
        self.make_appointment("10:30", days=1, name="First")
        self.make_appointment("11:00", days=2, name="Second")

        response = self.client.get(reverse("dashboard:appointments"))

        self.assertEqual(response.status_code, 200)
        names = [a["name"] for a in response.json()["appointments"]]
        self.assertEqual(names, ["First", "Second", "Third", "Fourth"])

    def test_list_filters(self):
        self.make_appointment("09:00", name="Pending")
        self.make_appointment("09:30", status=Appointment.STATUS_CONFIRMED, name="Confirmed")
        self.make_appointment("10:00", status=Appointment.STATUS_CONFIRMED, days=0, name="Today")
        url = reverse("dashboard:appointments")

        confirmed = self.client.get(url, {"status": "confirmed"}).json()["appointments"]
        self.assertEqual({a["name"] for a in confirmed}, {"Confirmed", "Today"})

        today = self.client.get(url, {"date": "today"}).json()["appointments"]
        self.assertEqual([a["name"] for a in today], ["Today"])

        self.assertEqual(self.client.get(url, {"status": "done"}).status_code, 400)
        self.assertEqual(self.client.get(url, {"date": "soon"}).status_code, 400)

    def test_appointment_payload_shape(self):
        appt = self.make_appointment()

        item = self.client.get(reverse("dashboard:appointments")).json()["appointments"][0]

        self.assertEqual(item["id"], str(appt.id))
        self.assertEqual(item["date"], appt.date.isoformat())
        self.assertEqual(item["time"], "10:00")
        self.assertEqual(item["status"], "pending")
        self.assertIn("createdAt", item)
        self.assertIsNone(item["customerId"])

    def test_confirm_then_cancel(self):
        appt = self.make_appointment()

        response = self.patch(self.detail_url(appt), {"status": "confirmed"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Appointment updated successfully")
        appt.refresh_from_db()
        self.assertEqual(appt.status, Appointment.STATUS_CONFIRMED)

        self.patch(self.detail_url(appt), {"status": "cancelled"})
        appt.refresh_from_db()
        self.assertEqual(appt.status, Appointment.STATUS_CANCELLED)

    def test_invalid_status_is_rejected_without_mutation(self):
        appt = self.make_appointment()

        for payload in ({"status": "completed"}, {"status": ""}, {}):
            response = self.patch(self.detail_url(appt), payload)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json()["error"], "Invalid status")

        appt.refresh_from_db()
        self.assertEqual(appt.status, Appointment.STATUS_PENDING)

    def test_illegal_transitions(self):
        cancelled = self.make_appointment("09:00", status=Appointment.STATUS_CANCELLED)
        confirmed = self.make_appointment("09:30", status=Appointment.STATUS_CONFIRMED)

        self.assertEqual(self.patch(self.detail_url(cancelled), {"status": "confirmed"}).status_code, 400)
        self.assertEqual(self.patch(self.detail_url(cancelled), {"status": "pending"}).status_code, 400)
        self.assertEqual(self.patch(self.detail_url(confirmed), {"status": "pending"}).status_code, 400)

        cancelled.refresh_from_db()
        confirmed.refresh_from_db()
        self.assertEqual(cancelled.status, Appointment.STATUS_CANCELLED)
        self.assertEqual(confirmed.status, Appointment.STATUS_CONFIRMED)

    def test_status_update_leaves_other_fields(self):
        appt = self.make_appointment()
        before = appt.as_dict()

        self.patch(self.detail_url(appt), {"status": "confirmed"})

        appt.refresh_from_db()
        after = appt.as_dict()
        self.assertEqual({k: v for k, v in after.items() if k != "status"},
                         {k: v for k, v in before.items() if k != "status"})

    def test_unknown_appointment(self):
        for appointment_id in ("5f0c6e2a-9a55-4d43-9a8e-3f1f4c1f0e11", "not-a-uuid"):
            url = reverse("dashboard:appointment_detail", args=[appointment_id])
            self.assertEqual(self.patch(url, {"status": "confirmed"}).status_code, 404)
            self.assertEqual(self.client.delete(url).status_code, 404)

    def test_delete(self):
        appt = self.make_appointment()

        response = self.client.delete(self.detail_url(appt))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Appointment.objects.filter(pk=appt.pk).exists())

        self.assertEqual(self.client.delete(self.detail_url(appt)).status_code, 404)

    def test_update_surface(self):
        appt = self.make_appointment()
        url = reverse("dashboard:update")

        response = self.patch(url, {"id": str(appt.id), "status": "confirmed"})
        self.assertEqual(response.json()["message"], "Appointment confirmed successfully")

        response = self.patch(url, {"id": str(appt.id), "name": "Renamed Customer"})
        self.assertEqual(response.json()["message"], "Appointment updated successfully")
        appt.refresh_from_db()
        self.assertEqual(appt.name, "Renamed Customer")
        self.assertEqual(appt.status, Appointment.STATUS_CONFIRMED)

        response = self.patch(url, {"id": str(appt.id), "status": "cancelled"})
        self.assertEqual(response.json()["message"], "Appointment cancelled successfully")

    def test_update_cannot_move_onto_live_slot(self):
        taken = self.make_appointment("11:00")
        appt = self.make_appointment("11:30")

        response = self.patch(reverse("dashboard:update"), {"id": str(appt.id), "time": "11:00"})

        self.assertEqual(response.status_code, 409)
        appt.refresh_from_db()
        self.assertEqual(appt.time, "11:30")
        self.assertEqual(taken.time, "11:00")

    def test_update_validation(self):
        url = reverse("dashboard:update")

        self.assertEqual(self.patch(url, {"status": "confirmed"}).status_code, 400)
        self.assertEqual(self.client.delete(url).status_code, 400)
        self.assertEqual(self.client.delete(url).json()["error"], "Appointment ID is required")

    def test_update_delete(self):
        appt = self.make_appointment()

        response = self.client.delete(f"{reverse('dashboard:update')}?id={appt.id}")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Appointment.objects.exists())

    def test_stats(self):
        self.make_appointment("09:00")
        self.make_appointment("09:30", status=Appointment.STATUS_CONFIRMED, days=0)
        self.make_appointment("10:00", status=Appointment.STATUS_CANCELLED, days=0)

        body = self.client.get(reverse("dashboard:stats")).json()

        self.assertEqual(body["stats"]["total"], 3)
        self.assertEqual(body["stats"]["pending"], 1)
        self.assertEqual(body["stats"]["confirmed"], 1)
        self.assertEqual(body["stats"]["cancelled"], 1)
        self.assertEqual(body["stats"]["today"], 1)
        self.assertEqual([a["time"] for a in body["today"]], ["09:30"])
        self.assertEqual(body["chart"]["view"], "day")
        self.assertEqual(len(body["chart"]["values"]), 7)
        self.assertEqual(body["chart"]["values"][-1], 2)

    def test_stats_chart_views(self):
        self.make_appointment("09:00", days=0)
        url = reverse("dashboard:stats")

        week = self.client.get(url, {"view": "week"}).json()["chart"]
        self.assertEqual(week["labels"], ["Week 1", "Week 2", "Week 3", "Week 4"])
        self.assertEqual(week["values"][-1], 1)

        month = self.client.get(url, {"view": "month"}).json()["chart"]
        self.assertEqual(len(month["values"]), 6)
        self.assertEqual(month["values"][-1], 1)

    def test_store_failure_is_a_generic_500(self):
        with patch("booking.services.list_appointments", side_effect=DatabaseError("connection lost")):
            response = self.client.get(reverse("dashboard:appointments"))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "error": "Internal server error"})

    def test_wrong_method_gets_json_405(self):
        appt = self.make_appointment()

        response = self.client.post(self.detail_url(appt))

        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.json(), {"success": False, "error": "Method not allowed"})
        self.assertEqual(response["Allow"], "PATCH, DELETE")

    def test_update_can_clear_email(self):
        appt = self.make_appointment()
        Appointment.objects.filter(pk=appt.pk).update(email="old@test.com")

        response = self.patch(reverse("dashboard:update"), {"id": str(appt.id), "email": ""})

        self.assertEqual(response.status_code, 200)
        appt.refresh_from_db()
        self.assertEqual(appt.email, "")
        self.assertEqual(appt.name, "Test Customer")

    def test_update_phone_uses_country(self):
        appt = self.make_appointment()

        response = self.patch(reverse("dashboard:update"), {
            "id": str(appt.id),
            "phone": "07911 123456",
            "country": "GB",
        })

        self.assertEqual(response.status_code, 200)
        appt.refresh_from_db()
        self.assertEqual(appt.phone, "+447911123456")
