import hashlib

import pytest
from ordering.catalogue.registration import RegisterProduct
from ordering.config import PaymentSettings
from ordering.gateway import PaymentNotification, reset_provider
from protean import current_domain
from protean.integrations.pytest import DomainFixture

MERCHANT_ID = "1211149"
MERCHANT_SECRET = "test-merchant-secret"


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        # Clear all databases and drain the event store
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def payment_settings(monkeypatch):
    """Known provider credentials for every test."""
    monkeypatch.setenv("PAYHERE_MERCHANT_ID", MERCHANT_ID)
    monkeypatch.setenv("PAYHERE_MERCHANT_SECRET", MERCHANT_SECRET)
    monkeypatch.setenv("PAYHERE_CURRENCY", "LKR")
    monkeypatch.setenv("FRONTEND_URL", "https://shop.example.com")
    monkeypatch.setenv("API_URL", "https://api.example.com")
    reset_provider()
    yield PaymentSettings.from_env()
    reset_provider()


def _md5_upper(value):
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()


def sign(merchant_id, order_id, amount, currency, status_code, secret=MERCHANT_SECRET):
    return _md5_upper(merchant_id + order_id + amount + currency + status_code + _md5_upper(secret))


@pytest.fixture()
def notification():
    """Factory for correctly signed provider notifications."""

    def _make(order_id, amount, status_code="2", currency="LKR", merchant_id=MERCHANT_ID, secret=MERCHANT_SECRET):
        return PaymentNotification(
            merchant_id=merchant_id,
            order_id=order_id,
            amount=amount,
            currency=currency,
            status_code=status_code,
            signature=sign(merchant_id, order_id, amount, currency, status_code, secret),
        )

    return _make


@pytest.fixture()
def register_product():
    """Factory that registers a product and returns its id."""

    def _register(product_id, price=500.0, stock=5, title=None):
        return current_domain.process(
            RegisterProduct(
                product_id=product_id,
                title=title or f"Candle {product_id}",
                price=price,
                stock=stock,
            ),
            asynchronous=False,
        )

    return _register
