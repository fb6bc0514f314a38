import logging

import requests as http_requests
from django.conf import settings

from .exceptions import SmsDeliveryError

logger = logging.getLogger(__name__)


def send_sms(phone: str, message: str) -> None:
    """
    Deliver a text message through the configured HTTP SMS gateway.
    Without SMS_GATEWAY_URL the message is only logged (full text when DEBUG).
    """
    if not settings.SMS_GATEWAY_URL:
        if settings.DEBUG:
            logger.info("SMS to %s (no gateway configured): %s", phone, message)
        else:
            logger.warning("SMS_GATEWAY_URL is not set; message to %s was not sent", phone)
        return

    headers = {}
    if settings.SMS_GATEWAY_TOKEN:
        headers["Authorization"] = f"Bearer {settings.SMS_GATEWAY_TOKEN}"

    try:
        r = http_requests.post(
            settings.SMS_GATEWAY_URL,
            json={"to": phone, "from": settings.SMS_SENDER_NAME, "message": message},
            headers=headers,
            timeout=5,
        )
        r.raise_for_status()
    except http_requests.RequestException as exc:
        logger.error("SMS gateway failed for %s: %s", phone, exc)
        raise SmsDeliveryError() from exc
