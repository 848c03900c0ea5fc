"""PayFast signing and ITN verification."""

import hashlib
from urllib.parse import parse_qs, quote_plus, urlparse

import pytest

from atsboost.config import settings
from atsboost.tools import payfast


@pytest.fixture
def merchant(monkeypatch):
    monkeypatch.setattr(settings, "payfast_merchant_id", "10000100")
    monkeypatch.setattr(settings, "payfast_merchant_key", "46f0cd694581a")
    monkeypatch.setattr(settings, "payfast_sandbox", True)


def md5(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def test_signature_uses_field_order_and_skips_blanks():
    data = {"merchant_id": "10000100", "amount": "100.00", "item_name": "CV Scan Pack", "name_last": "", "signature": "x"}
    assert payfast.generate_signature(data) == md5("merchant_id=10000100&amount=100.00&item_name=CV+Scan+Pack")

    reordered = {"item_name": "CV Scan Pack", "merchant_id": "10000100", "amount": "100.00"}
    assert payfast.generate_signature(reordered) != payfast.generate_signature(data)


def test_signature_with_passphrase():
    data = {"merchant_id": "10000100", "amount": "50.00"}
    assert payfast.generate_signature(data, "jt7NOE43FZPn") == md5(
        "merchant_id=10000100&amount=50.00&passphrase=jt7NOE43FZPn"
    )


def test_verify_itn_signature():
    data = {"m_payment_id": "ATS_1_ABCDEF", "payment_status": "COMPLETE", "amount_gross": "50.00"}
    data["signature"] = payfast.generate_itn_signature(data, "secret")

    assert payfast.verify_itn_signature(data, "secret")
    assert not payfast.verify_itn_signature(data, "other")
    assert not payfast.verify_itn_signature({**data, "amount_gross": "5.00"}, "secret")
    assert not payfast.verify_itn_signature({"m_payment_id": "ATS_1_ABCDEF"})


def test_build_payment_fields(merchant):
    fields = payfast.build_payment_fields(
        reference="ATS_1_ABCDEF",
        amount=50,
        item_name="Premium Job Matching Access",
        email="thandi@example.co.za",
        first_name="Thandi",
    )
    assert fields["amount"] == "50.00"
    assert fields["m_payment_id"] == fields["custom_str1"] == "ATS_1_ABCDEF"
    assert fields["notify_url"].endswith("/payments/notify")
    assert "name_last" not in fields
    assert "subscription_type" not in fields
    assert fields["signature"] == payfast.generate_signature(fields, settings.payfast_passphrase)


def test_subscription_fields(merchant):
    fields = payfast.build_payment_fields(
        reference="ATS_2_ABCDEF",
        amount=100,
        item_name="Subscription",
        email="thandi@example.co.za",
        subscription=True,
        frequency="annual",
    )
    assert fields["subscription_type"] == 1
    assert fields["recurring_amount"] == "100.00"
    assert fields["frequency"] == 6
    assert fields["cycles"] == 0


def test_create_payment_url(merchant):
    url = payfast.create_payment_url(reference="ATS_3_ABCDEF", amount=200, item_name="Premium Candidate Access", email="hr@acme.co.za")
    parsed = urlparse(url)
    assert f"{parsed.scheme}://{parsed.netloc}" == payfast.SANDBOX_URL
    assert parsed.path == "/eng/process"
    query = parse_qs(parsed.query)
    assert query["amount"] == ["200.00"]
    assert query["item_name"] == ["Premium Candidate Access"]
    assert "signature" in query


def test_verify_notification_without_remote_validation():
    data = {"m_payment_id": "ATS_4_ABCDEF", "payment_status": "COMPLETE"}
    data["signature"] = payfast.generate_itn_signature(data)
    assert payfast.verify_notification(data)
    assert not payfast.verify_notification({**data, "signature": "0" * 32})


def sandbox_itn(passphrase: str = "") -> dict:
    """A sandbox ITN as PayFast posts it, blank fields included, signed over every field."""
    data = {
        "m_payment_id": "ATS_5_ABCDEF",
        "pf_payment_id": "1089250",
        "payment_status": "COMPLETE",
        "item_name": "Premium Job Matching Access",
        "item_description": "",
        "amount_gross": "50.00",
        "amount_fee": "-2.30",
        "amount_net": "47.70",
        "custom_str1": "ATS_5_ABCDEF",
        "custom_str2": "",
        "name_first": "Thandi",
        "name_last": "",
        "email_address": "thandi@example.co.za",
        "merchant_id": "10000100",
    }
    payload = "&".join(f"{key}={quote_plus(value)}" for key, value in data.items())
    if passphrase:
        payload += f"&passphrase={quote_plus(passphrase)}"
    data["signature"] = md5(payload)
    return data


def test_itn_signature_includes_blank_fields():
    data = sandbox_itn()
    assert payfast.generate_itn_signature(data) == data["signature"]
    assert payfast.verify_itn_signature(data)
    assert payfast.generate_signature(data) != data["signature"]
    assert not payfast.verify_itn_signature({key: value for key, value in data.items() if value != ""})


def test_verify_notification_with_blank_fields(monkeypatch):
    monkeypatch.setattr(settings, "payfast_passphrase", "jt7NOE43FZPn")
    data = sandbox_itn("jt7NOE43FZPn")
    assert payfast.verify_notification(data)
    assert not payfast.verify_notification({**data, "name_last": "Mokoena"})
