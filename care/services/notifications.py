"""
Outbound patient notifications (SMS / WhatsApp).

Every message is logged.  When Twilio credentials are configured the
message is also posted to the Twilio Messages REST endpoint; otherwise the
log line is the only effect.  ``send_notification`` never raises: callers
treat notifications as best effort.
"""
import logging
from typing import Optional

import requests
from django.conf import settings

from care.models import LabTest, PatientVisit

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = 'https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json'

CHANNEL_SMS = 'sms'
CHANNEL_WHATSAPP = 'whatsapp'


def _twilio_configured() -> bool:
    return bool(settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_PHONE_NUMBER)


def _post_twilio(to: str, message: str, channel: str) -> Optional[str]:
    if channel == CHANNEL_WHATSAPP:
        if not settings.TWILIO_WHATSAPP_NUMBER:
            logger.warning('TWILIO_WHATSAPP_NUMBER missing; whatsapp message to %s not sent', to)
            return None
        sender, to = f'whatsapp:{settings.TWILIO_WHATSAPP_NUMBER}', f'whatsapp:{to}'
    else:
        sender = settings.TWILIO_PHONE_NUMBER
    r = requests.post(
        TWILIO_MESSAGES_URL.format(sid=settings.TWILIO_ACCOUNT_SID),
        data={'From': sender, 'To': to, 'Body': message},
        auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
        timeout=settings.NOTIFY_TIMEOUT,
    )
    r.raise_for_status()
    return r.json().get('sid')


def send_notification(to: Optional[str], message: Optional[str], channel: str = CHANNEL_SMS) -> bool:
    """Send ``message`` to ``to``.  Returns True only if a provider accepted it."""
    if not to or not message:
        return False
    logger.info('%s to %s: %s', channel.upper(), to, message)
    if not _twilio_configured():
        logger.debug('real sending skipped; TWILIO_* settings are not configured')
        return False
    try:
        sid = _post_twilio(to, message, channel)
    except (requests.RequestException, ValueError) as e:
        logger.error('failed to send %s to %s: %s', channel, to, e)
        return False
    if sid:
        logger.info('%s accepted by provider (sid=%s)', channel, sid)
    return bool(sid)


def _brand() -> str:
    return getattr(settings, 'HOSPITAL_BRAND', 'MedFlow')


def send_appointment_confirmation(visit: PatientVisit) -> bool:
    message = (
        f"Welcome to {_brand()}, {visit.name}. Your registration is confirmed. "
        f"Token: #{visit.token}. Please wait for your turn."
    )
    return send_notification(visit.phone, message, CHANNEL_SMS)


def send_follow_up_reminder(visit: PatientVisit, doctor_name: str) -> bool:
    message = (
        f"Hello {visit.name}, {doctor_name} has scheduled your follow-up visit on "
        f"{visit.follow_up_date}. Please visit {_brand()} Hospital."
    )
    return send_notification(visit.phone, message, CHANNEL_SMS)


def send_prescription_ready(visit: PatientVisit, link: str) -> bool:
    message = f"Hello {visit.name}, your prescription is ready. View it here: {link}"
    # links render better on WhatsApp
    return send_notification(visit.phone, message, CHANNEL_WHATSAPP)


def send_lab_result_ready(test: LabTest) -> bool:
    message = (
        f"{_brand()}: Your lab report for {test.test_name} is now ready. "
        "Please collect it from the counter or view online."
    )
    return send_notification(test.patient.phone, message, CHANNEL_SMS)
