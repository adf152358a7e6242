from __future__ import annotations

import pytest

from config.settings import mask_sensitive_data

pytestmark = pytest.mark.unit


def _mask(**event_dict):
    return mask_sensitive_data(None, None, event_dict)


@pytest.mark.parametrize("key", ["password", "token", "refresh", "Authorization"])
def test_secret_keys_are_masked(key):
    assert _mask(**{key: "s3cr3t"})[key] == "***MASKED***"


def test_phone_keeps_last_two_digits():
    assert _mask(customer_phone="9876500001")["customer_phone"] == "***01"


def test_email_keeps_first_letter_and_domain():
    assert _mask(customer_email="ananya@example.com")["customer_email"] == "a***@example.com"


def test_inline_secrets_are_masked():
    result = _mask(event="login failed password=hunter2 for user")
    assert "hunter2" not in result["event"]
    assert "***MASKED***" in result["event"]


def test_other_values_untouched():
    result = _mask(order_number="ORD-2026-000001", total=1249)
    assert result == {"order_number": "ORD-2026-000001", "total": 1249}
