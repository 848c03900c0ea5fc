"""
WhatsApp messaging via the Twilio REST API.

When Twilio is not configured the service runs in demo mode: messages are
logged and reported as sent.
"""

import base64
import hashlib
import hmac
import logging
import re
from urllib.parse import urlparse

import httpx

from atsboost.config import settings
from atsboost.tools.errors import MediaRejected, MediaTooLarge

logger = logging.getLogger(__name__)

TWILIO_API_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
TWILIO_MEDIA_HOST = "api.twilio.com"

SA_PHONE_PATTERN = re.compile(r"^(\+27|0)[6-8][0-9]{8}$")

TEMPLATES = {
    "cv_analysis_complete": (
        'ATSBoost: Your CV "{cv_name}" analysis is complete! Your ATS score is {score}%. '
        "View details: {dashboard_url}"
    ),
    "job_match": (
        "ATSBoost: We found a job match for you! {job_title} at {company} in {location}. "
        "View details: {job_url}"
    ),
    "subscription_confirmation": (
        "ATSBoost: Thank you for subscribing to our {plan_name} plan! Your subscription is active "
        "until {expiry_date}. View your account: {dashboard_url}"
    ),
    "payment_confirmation": (
        "ATSBoost: We received your payment of R{amount} for {service_type}. "
        "View your account: {dashboard_url}"
    ),
    "verification_code": (
        "ATSBoost: Your verification code is {verification_code}. It is valid for {valid_minutes} minutes."
    ),
}


def is_enabled() -> bool:
    return bool(settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_whatsapp_number)


def is_valid_sa_number(phone_number: str) -> bool:
    return bool(SA_PHONE_PATTERN.match(phone_number.replace(" ", "")))


def normalize_sa_number(phone_number: str) -> str:
    """0821234567 -> +27821234567. Expects a valid SA number."""
    number = phone_number.replace(" ", "")
    if number.startswith("0"):
        return "+27" + number[1:]
    return number


def format_template(template_name: str, data: dict) -> str:
    template = TEMPLATES.get(template_name)
    if template is None:
        return f'ATSBoost notification: Template "{template_name}" not found.'
    return template.format(**data)


def send_message(phone_number: str, body: str) -> bool:
    """Send a free-form WhatsApp message; False on invalid number or API failure."""
    if not is_valid_sa_number(phone_number):
        logger.error(f"Invalid South African phone number: {phone_number}")
        return False

    to = normalize_sa_number(phone_number)

    if not is_enabled():
        logger.info(f"WhatsApp message to {to} (demo mode): {body}")
        return True

    try:
        with httpx.Client(timeout=settings.http_timeout) as client:
            response = client.post(
                TWILIO_API_URL.format(sid=settings.twilio_account_sid),
                auth=(settings.twilio_account_sid, settings.twilio_auth_token),
                data={
                    "From": f"whatsapp:{settings.twilio_whatsapp_number}",
                    "To": f"whatsapp:{to}",
                    "Body": body,
                },
            )
            response.raise_for_status()
            logger.info(f"WhatsApp message sent with SID: {response.json().get('sid')}")
        return True

    except httpx.HTTPStatusError as e:
        logger.error(f"Twilio HTTP error: {e.response.status_code} {e.response.text[:200]}")
        return False
    except httpx.HTTPError as e:
        logger.error(f"Twilio request failed: {e}")
        return False


def send_template(phone_number: str, template_name: str, data: dict) -> bool:
    return send_message(phone_number, format_template(template_name, data))


def send_cv_analysis_notification(phone_number: str, score: int, cv_name: str) -> bool:
    return send_template(
        phone_number,
        "cv_analysis_complete",
        {"cv_name": cv_name, "score": score, "dashboard_url": f"{settings.app_url}/dashboard"},
    )


def send_job_match_notification(phone_number: str, job_title: str, company: str, location: str) -> bool:
    return send_template(
        phone_number,
        "job_match",
        {"job_title": job_title, "company": company, "location": location, "job_url": f"{settings.app_url}/jobs/match"},
    )


def send_subscription_confirmation(phone_number: str, plan_name: str, expiry_date: str) -> bool:
    return send_template(
        phone_number,
        "subscription_confirmation",
        {"plan_name": plan_name, "expiry_date": expiry_date, "dashboard_url": f"{settings.app_url}/dashboard"},
    )


def send_payment_confirmation(phone_number: str, service_type: str, amount: str) -> bool:
    return send_template(
        phone_number,
        "payment_confirmation",
        {"service_type": service_type, "amount": amount, "dashboard_url": f"{settings.app_url}/dashboard"},
    )


def send_verification_code(phone_number: str, code: str, valid_minutes: int = 10) -> bool:
    return send_template(
        phone_number,
        "verification_code",
        {"verification_code": code, "valid_minutes": valid_minutes},
    )


def validate_request_signature(url: str, params: dict, signature: str | None) -> bool:
    """
    Check X-Twilio-Signature: base64 HMAC-SHA1, keyed with the auth token,
    over the webhook URL followed by each form field as name+value sorted by
    name.
    """
    if not signature or not settings.twilio_auth_token:
        return False
    payload = url + "".join(f"{key}{params[key]}" for key in sorted(params))
    digest = hmac.new(settings.twilio_auth_token.encode("utf-8"), payload.encode("utf-8"), hashlib.sha1).digest()
    return hmac.compare_digest(base64.b64encode(digest).decode("ascii"), signature)


def download_media(media_url: str, max_bytes: int) -> bytes:
    """
    Fetch an inbound media attachment from Twilio.

    Only https URLs on the Twilio API host are fetched, since they get the
    account credentials. The body is streamed and abandoned past max_bytes.
    """
    parsed = urlparse(media_url)
    if parsed.scheme != "https" or parsed.hostname != TWILIO_MEDIA_HOST:
        raise MediaRejected(f"Not a Twilio media URL: {media_url}")

    auth = (settings.twilio_account_sid, settings.twilio_auth_token) if is_enabled() else None
    content = bytearray()
    # httpx drops the Authorization header when a redirect leaves the origin
    with httpx.Client(timeout=settings.http_timeout, follow_redirects=True) as client:
        with client.stream("GET", media_url, auth=auth) as response:
            response.raise_for_status()
            for chunk in response.iter_bytes():
                content.extend(chunk)
                if len(content) > max_bytes:
                    raise MediaTooLarge(f"Media exceeds {max_bytes} bytes: {media_url}")
    return bytes(content)
