class BookingError(Exception):
    """Base error for booking operations; carries the HTTP status it maps to."""
    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AppointmentNotFound(BookingError):
    status_code = 404
    default_message = "Appointment not found"


class SlotUnavailable(BookingError):
    status_code = 409
    default_message = "The selected time slot is already booked. Please choose a different time."


class InvalidStatusTransition(BookingError):
    status_code = 400

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from '{current}' to '{target}'")


class VerificationError(BookingError):
    status_code = 400
    default_message = "Invalid verification code"


class SmsDeliveryError(BookingError):
    status_code = 503
    default_message = "Could not send verification code. Please try again later."


class AppointmentChanged(BookingError):
    status_code = 409
    default_message = "Appointment was changed by someone else. Please reload and try again."


class VerificationThrottled(BookingError):
    status_code = 429
    default_message = "Too many verification requests. Please wait before requesting another code."
