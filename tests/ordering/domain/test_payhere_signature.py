"""Tests for PayHere notification verification and checkout signing."""

import hashlib
from dataclasses import replace

import pytest
from ordering.config import PaymentSettings
from ordering.gateway.payhere_adapter import PayHereProvider

MERCHANT_ID = "1211149"
SECRET = "test-merchant-secret"


def _md5_upper(value):
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()


@pytest.fixture()
def provider():
    return PayHereProvider(PaymentSettings(merchant_id=MERCHANT_ID, merchant_secret=SECRET))


@pytest.fixture()
def signed(notification):
    return notification("ord-001", "1000.00", merchant_id=MERCHANT_ID, secret=SECRET)


class TestVerify:
    def test_accepts_correct_signature(self, provider, signed):
        assert provider.verify(signed) is True

    def test_signature_follows_provider_formula(self, provider, signed):
        expected = _md5_upper(MERCHANT_ID + "ord-001" + "1000.00" + "LKR" + "2" + _md5_upper(SECRET))
        assert signed.signature == expected
        assert provider.notification_signature(signed) == expected

    def test_rejects_lowercased_signature(self, provider, signed):
        assert provider.verify(replace(signed, signature=signed.signature.lower())) is False

    @pytest.mark.parametrize("position", [0, 9, 16, 31])
    def test_rejects_single_character_change(self, provider, signed, position):
        original = signed.signature[position]
        swapped = "A" if original != "A" else "B"
        mutated = signed.signature[:position] + swapped + signed.signature[position + 1 :]
        assert provider.verify(replace(signed, signature=mutated)) is False

    @pytest.mark.parametrize(
        "field, value",
        [
            ("order_id", "ord-002"),
            ("amount", "1.00"),
            ("currency", "USD"),
            ("status_code", "-2"),
        ],
    )
    def test_rejects_tampered_field(self, provider, signed, field, value):
        assert provider.verify(replace(signed, **{field: value})) is False

    def test_rejects_signature_made_with_other_secret(self, provider, notification):
        forged = notification("ord-001", "1000.00", merchant_id=MERCHANT_ID, secret="guess")
        assert provider.verify(forged) is False

    def test_rejects_other_merchant(self, provider, notification):
        other = notification("ord-001", "1000.00", merchant_id="9999999", secret=SECRET)
        assert provider.verify(other) is False

    def test_rejects_empty_signature(self, provider, signed):
        assert provider.verify(replace(signed, signature="")) is False

    def test_rejects_everything_without_secret(self, notification):
        unconfigured = PayHereProvider(PaymentSettings(merchant_id=MERCHANT_ID, merchant_secret=""))
        assert unconfigured.verify(notification("ord-001", "1000.00", merchant_id=MERCHANT_ID, secret="")) is False

    def test_non_ascii_signature_is_rejected_not_raised(self, provider, signed):
        assert provider.verify(replace(signed, signature="ÄÖÜ")) is False


class TestCheckoutHash:
    def test_matches_provider_formula(self, provider):
        expected = _md5_upper(MERCHANT_ID + "ord-001" + "1000.00" + "LKR" + _md5_upper(SECRET))
        assert provider.checkout_hash("ord-001", "1000.00", "LKR") == expected

    def test_success_status_code(self, provider):
        assert provider.success_status_code == "2"
