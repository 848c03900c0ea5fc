"""
Transactional email via the SendGrid v3 REST API.

Every sender returns False when SENDGRID_API_KEY is not set or the API call
fails, so callers can carry on without email.
"""

import logging
from datetime import UTC, datetime

import httpx

from atsboost.config import settings

logger = logging.getLogger(__name__)

SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"

_HTML_WRAPPER = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{title}</title></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto;">
  <div style="padding: 20px; border-bottom: 4px solid #ffca28; text-align: center;"><strong>ATSBoost</strong></div>
  <div style="padding: 20px;">{body}</div>
  <div style="font-size: 12px; color: #666; text-align: center; border-top: 1px solid #eee; padding-top: 20px;">
    <p>&copy; {year} ATSBoost. All rights reserved.</p>
    <p>South Africa's premier career advancement platform.</p>
  </div>
</body>
</html>"""

_BUTTON = (
    '<a href="{url}" style="display: inline-block; background-color: #1a73e8; color: white; '
    'padding: 12px 24px; text-decoration: none; border-radius: 4px; margin: 20px 0;">{label}</a>'
)


def _html(title: str, body: str) -> str:
    return _HTML_WRAPPER.format(title=title, body=body, year=datetime.now(UTC).year)


def is_enabled() -> bool:
    return bool(settings.sendgrid_api_key)


def send_email(to: str, subject: str, text: str, html: str | None = None) -> bool:
    """Send one email through SendGrid."""
    if not is_enabled():
        logger.warning(f"Email to {to} not sent: SENDGRID_API_KEY not set")
        return False

    content = [{"type": "text/plain", "value": text}]
    if html:
        content.append({"type": "text/html", "value": html})

    payload = {
        "personalizations": [{"to": [{"email": to}]}],
        "from": {"email": settings.email_from, "name": "ATSBoost"},
        "subject": subject,
        "content": content,
    }

    try:
        with httpx.Client(timeout=settings.http_timeout) as client:
            response = client.post(
                SENDGRID_API_URL,
                headers={"Authorization": f"Bearer {settings.sendgrid_api_key}"},
                json=payload,
            )
            response.raise_for_status()
        logger.info(f"Email sent to {to}: {subject}")
        return True

    except httpx.HTTPStatusError as e:
        logger.error(f"SendGrid HTTP error: {e.response.status_code} {e.response.text[:200]}")
        return False
    except httpx.HTTPError as e:
        logger.error(f"SendGrid request failed: {e}")
        return False


def send_welcome_email(to: str, name: str | None) -> bool:
    name = name or "there"
    dashboard = f"{settings.app_url}/dashboard"
    text = (
        f"Hello {name},\n\n"
        "Welcome to ATSBoost - Your South African career acceleration platform!\n\n"
        "To get started:\n"
        "1. Upload your CV for an instant ATS compatibility score\n"
        "2. Use our premium tools to boost your job search\n"
        "3. Complete your profile to get personalized recommendations\n\n"
        "If you have any questions, simply reply to this email.\n\n"
        "Best regards,\nThe ATSBoost Team"
    )
    body = (
        f"<h1>Welcome to ATSBoost, {name}!</h1>"
        "<ol><li>Upload your CV for an instant ATS compatibility score</li>"
        "<li>Use our premium tools to boost your job search</li>"
        "<li>Complete your profile to get personalized recommendations</li></ol>"
        + _BUTTON.format(url=dashboard, label="Go to My Dashboard")
    )
    return send_email(to, "Welcome to ATSBoost - Let's Boost Your Career!", text, _html("Welcome to ATSBoost", body))


def send_password_reset_email(to: str, name: str | None, token: str) -> bool:
    name = name or "there"
    link = f"{settings.app_url}/reset-password?token={token}"
    text = (
        f"Hello {name},\n\n"
        "You recently requested to reset your password for your ATSBoost account. "
        f"Click the link below to reset it:\n\n{link}\n\n"
        f"This password reset link is only valid for the next {settings.password_reset_minutes} minutes.\n\n"
        "If you did not request a password reset, please ignore this email.\n\n"
        "Best regards,\nThe ATSBoost Team"
    )
    body = (
        f"<h1>Reset your password</h1><p>Hello {name},</p>"
        "<p>You recently requested to reset your password for your ATSBoost account.</p>"
        + _BUTTON.format(url=link, label="Reset Password")
        + f"<p>This link is only valid for the next {settings.password_reset_minutes} minutes.</p>"
    )
    return send_email(to, "ATSBoost - Reset Your Password", text, _html("Reset Your ATSBoost Password", body))


def send_verification_email(to: str, name: str | None, token: str) -> bool:
    name = name or "there"
    link = f"{settings.app_url}/verify-email?token={token}"
    text = (
        f"Hello {name},\n\n"
        f"Please confirm your email address for ATSBoost by opening this link:\n\n{link}\n\n"
        f"The link expires in {settings.email_verification_hours} hours.\n\n"
        "Best regards,\nThe ATSBoost Team"
    )
    body = (
        f"<h1>Confirm your email</h1><p>Hello {name},</p>"
        + _BUTTON.format(url=link, label="Verify Email")
        + f"<p>The link expires in {settings.email_verification_hours} hours.</p>"
    )
    return send_email(to, "ATSBoost - Verify Your Email", text, _html("Verify Your Email", body))


def send_payment_receipt(to: str, name: str | None, description: str, amount: float, transaction_id: str) -> bool:
    name = name or "there"
    text = (
        f"Hello {name},\n\n"
        f"We received your payment of R{amount:.2f} for {description}.\n"
        f"Reference: {transaction_id}\n\n"
        "Best regards,\nThe ATSBoost Team"
    )
    body = (
        f"<h1>Payment received</h1><p>Hello {name},</p>"
        f"<p>We received your payment of <strong>R{amount:.2f}</strong> for {description}.</p>"
        f"<p>Reference: {transaction_id}</p>"
    )
    return send_email(to, "ATSBoost - Payment Confirmation", text, _html("Payment Confirmation", body))
