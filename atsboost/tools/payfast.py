"""
PayFast payment gateway integration.

Builds signed checkout URLs and verifies Instant Transaction Notifications
(ITN). Signatures are MD5 over the url-encoded key=value pairs in field order,
with the passphrase appended when one is configured. Checkout signatures leave
blank values out; ITN signatures cover every posted field except the
signature itself.
"""

import hashlib
import hmac
import logging
from datetime import UTC, datetime
from urllib.parse import quote_plus, urlencode

import httpx

from atsboost.config import settings

logger = logging.getLogger(__name__)

LIVE_URL = "https://www.payfast.co.za"
SANDBOX_URL = "https://sandbox.payfast.co.za"

FREQUENCIES = {
    "monthly": 3,
    "quarterly": 4,
    "biannual": 5,
    "annual": 6,
}


def base_url() -> str:
    return SANDBOX_URL if settings.payfast_sandbox else LIVE_URL


def _sign(pairs: list[str], passphrase: str | None) -> str:
    payload = "&".join(pairs)
    if passphrase:
        payload += f"&passphrase={quote_plus(passphrase.strip())}"
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def generate_signature(data: dict, passphrase: str | None = None) -> str:
    """MD5 signature of checkout fields in the order given, blanks skipped."""
    pairs = [
        f"{key}={quote_plus(str(value).strip())}"
        for key, value in data.items()
        if key != "signature" and value is not None and str(value).strip() != ""
    ]
    return _sign(pairs, passphrase)


def generate_itn_signature(data: dict, passphrase: str | None = None) -> str:
    """
    MD5 signature of an ITN. PayFast signs every posted field in posted
    order, blank ones included.
    """
    pairs = [
        f"{key}={quote_plus('' if value is None else str(value).strip())}"
        for key, value in data.items()
        if key != "signature"
    ]
    return _sign(pairs, passphrase)


def verify_itn_signature(data: dict, passphrase: str | None = None) -> bool:
    signature = data.get("signature")
    if not signature:
        return False
    return hmac.compare_digest(generate_itn_signature(data, passphrase), str(signature))


def build_payment_fields(
    reference: str,
    amount: float,
    item_name: str,
    email: str,
    item_description: str = "",
    first_name: str | None = None,
    last_name: str | None = None,
    subscription: bool = False,
    frequency: str = "monthly",
    cycles: int = 0,
) -> dict:
    """
    Checkout form fields, signed.

    The transaction reference goes in both m_payment_id and custom_str1 so
    the ITN handler can find the payment either way.
    """
    amount_str = f"{float(amount):.2f}"
    fields = {
        "merchant_id": settings.payfast_merchant_id,
        "merchant_key": settings.payfast_merchant_key,
        "return_url": f"{settings.app_url}/payment/success",
        "cancel_url": f"{settings.app_url}/payment/cancel",
        "notify_url": f"{settings.api_url}/payments/notify",
        "name_first": first_name,
        "name_last": last_name,
        "email_address": email,
        "m_payment_id": reference,
        "amount": amount_str,
        "item_name": item_name,
        "item_description": item_description,
        "custom_str1": reference,
    }

    if subscription:
        fields["subscription_type"] = 1
        fields["billing_date"] = datetime.now(UTC).strftime("%Y-%m-%d")
        fields["recurring_amount"] = amount_str
        fields["frequency"] = FREQUENCIES.get(frequency, FREQUENCIES["monthly"])
        fields["cycles"] = cycles

    fields = {k: v for k, v in fields.items() if v is not None and str(v) != ""}
    fields["signature"] = generate_signature(fields, settings.payfast_passphrase)
    return fields


def create_payment_url(**kwargs) -> str:
    fields = build_payment_fields(**kwargs)
    return f"{base_url()}/eng/process?{urlencode(fields)}"


def validate_with_payfast(data: dict) -> bool:
    """Post the ITN data back to PayFast; it answers VALID for genuine notifications."""
    try:
        with httpx.Client(timeout=settings.http_timeout) as client:
            response = client.post(
                f"{base_url()}/eng/query/validate",
                content=urlencode(data),
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "User-Agent": "ATSBoost/1.0",
                },
            )
            response.raise_for_status()
        return response.text.strip() == "VALID"

    except httpx.HTTPError as e:
        logger.error(f"Error validating PayFast payment data: {e}")
        return False


def verify_notification(data: dict) -> bool:
    """
    Verify an ITN: signature, then the server-side validate call (skipped
    when PAYFAST_VALIDATE_ITN is off, e.g. local development).
    """
    if not verify_itn_signature(data, settings.payfast_passphrase):
        logger.warning(f"PayFast ITN signature mismatch for {data.get('m_payment_id')}")
        return False

    if settings.payfast_validate_itn and not validate_with_payfast(data):
        logger.warning(f"PayFast ITN rejected by validate endpoint for {data.get('m_payment_id')}")
        return False

    return True
