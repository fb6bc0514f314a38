import uuid

from django.db import models
from django.db.models import Q

from .constants import SERVICE_BEARD, SERVICE_BOTH, SERVICE_HAIRCUT


class Appointment(models.Model):
	STATUS_PENDING   = "pending"
	STATUS_CONFIRMED = "confirmed"
	STATUS_CANCELLED = "cancelled"

	STATUS_CHOICES = [
		(STATUS_PENDING, "Pending"),
		(STATUS_CONFIRMED, "Confirmed"),
		(STATUS_CANCELLED, "Cancelled"),
	]

	# statuses that occupy a slot
	LIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

	# status -> statuses it may move to
	ALLOWED_TRANSITIONS = {
		STATUS_PENDING: {STATUS_CONFIRMED, STATUS_CANCELLED},
		STATUS_CONFIRMED: {STATUS_CANCELLED},
		STATUS_CANCELLED: set(),
	}

	SERVICE_CHOICES = [
		(SERVICE_HAIRCUT, "Haircut"),
		(SERVICE_BEARD, "Beard"),
		(SERVICE_BOTH, "Haircut & Beard"),
	]

	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	name = models.CharField(max_length=100)
	phone = models.CharField(max_length=20)
	email = models.EmailField(blank=True)
	service = models.CharField(max_length=10, choices=SERVICE_CHOICES)
	date = models.DateField()
	# slot start, "HH:MM"
	time = models.CharField(max_length=5)

	status = models.CharField(
		max_length=10,
		choices=STATUS_CHOICES,
		default=STATUS_PENDING,
	)
	created_at = models.DateTimeField(auto_now_add=True)

	# set when the booking was made by a signed-in customer
	customer_uid = models.CharField(max_length=64, blank=True, null=True)
	customer_email = models.EmailField(blank=True, null=True)
	customer_phone = models.CharField(max_length=20, blank=True, null=True)

	class Meta:
		indexes = [
			models.Index(fields=["date"], name="booking_app_date_2f8e1c_idx"),
			models.Index(fields=["customer_uid"], name="booking_app_custome_7a4b90_idx"),
		]
		constraints = [
			models.UniqueConstraint(
				fields=["date", "time"],
				condition=Q(status__in=["pending", "confirmed"]),
				name="unique_live_appointment_slot",
			),
		]
		ordering = ["date", "time", "created_at"]

	def __str__(self):
		return f"{self.name} - {self.date} {self.time} ({self.status})"

	def can_transition_to(self, status):
		if status == self.status:
			return True
		return status in self.ALLOWED_TRANSITIONS.get(self.status, set())

	def as_dict(self):
		return {
			"id": str(self.id),
			"name": self.name,
			"email": self.email or None,
			"phone": self.phone,
			"service": self.service,
			"date": self.date.isoformat(),
			"time": self.time,
			"status": self.status,
			"createdAt": self.created_at.isoformat() if self.created_at else None,
			"customerId": self.customer_uid,
			"customerEmail": self.customer_email,
			"customerPhone": self.customer_phone,
		}


class Customer(models.Model):
	uid = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	phone = models.CharField(max_length=20, unique=True)
	email = models.EmailField(blank=True)
	display_name = models.CharField(max_length=100, blank=True)
	phone_verified = models.BooleanField(default=False)
	language = models.CharField(max_length=8, default="en")

	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ["-created_at"]

	def __str__(self):
		return self.display_name or self.phone

	def as_dict(self):
		return {
			"uid": str(self.uid),
			"phoneNumber": self.phone,
			"email": self.email or None,
			"displayName": self.display_name or None,
			"phoneVerified": self.phone_verified,
			"language": self.language,
			"createdAt": self.created_at.isoformat() if self.created_at else None,
			"updatedAt": self.updated_at.isoformat() if self.updated_at else None,
		}


class PhoneVerification(models.Model):
	"""
	One pending phone sign-in. The id is handed to the client when the
	code is sent and must be presented together with the code.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	phone = models.CharField(max_length=20)
	code_hash = models.CharField(max_length=256)
	attempts = models.PositiveSmallIntegerField(default=0)

	created_at = models.DateTimeField(auto_now_add=True)
	expires_at = models.DateTimeField()
	verified_at = models.DateTimeField(blank=True, null=True)

	class Meta:
		indexes = [
			models.Index(fields=["phone"], name="booking_pho_phone_3c9d51_idx"),
		]

	def __str__(self):
		return f"{self.phone} ({self.id})"
