# Services offered at the shop
SERVICE_HAIRCUT = "haircut"
SERVICE_BEARD = "beard"
SERVICE_BOTH = "both"

APPOINTMENT_SERVICES = [SERVICE_HAIRCUT, SERVICE_BEARD, SERVICE_BOTH]

# Bookable start times for any day, in scheduling order (lunch gap 12:00-14:00)
SLOT_TEMPLATE = (
    "09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
    "14:00", "14:30", "15:00", "15:30", "16:00", "16:30", "17:00",
)

# Same-day slots must start more than this many minutes after "now"
LEAD_TIME_MINUTES = 30

# Phone verification
VERIFICATION_CODE_LENGTH = 6
VERIFICATION_TTL_MINUTES = 10
VERIFICATION_MAX_ATTEMPTS = 5

# One code per phone per cooldown, and a cap per rolling hour
VERIFICATION_RESEND_SECONDS = 60
VERIFICATION_HOURLY_LIMIT = 5
