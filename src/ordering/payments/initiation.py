"""Checkout payload for the provider's hosted payment page.

The client posts this payload to the provider; the provider later calls
back with a settlement notification, reconciled in
``ordering.payments.reconciliation``.
"""

import structlog

from ordering.config import PaymentSettings
from ordering.errors import InvalidTransition
from ordering.gateway import SettlementProvider, get_provider
from ordering.order.order import Order, OrderStatus, format_amount

logger = structlog.get_logger(__name__)

DEFAULT_EMAIL = "customer@example.com"


def build_checkout(
    order: Order,
    email: str | None = None,
    settings: PaymentSettings | None = None,
    provider: SettlementProvider | None = None,
) -> dict:
    """Build the signed redirect payload for a Pending, unpaid order."""
    if order.status != OrderStatus.PENDING.value or order.is_paid:
        raise InvalidTransition(
            order.status,
            "PAID",
            reason="Only pending, unpaid orders can start a payment",
        )

    settings = settings or PaymentSettings.from_env()
    provider = provider or get_provider()

    order_id = str(order.id)
    amount = format_amount(order.total_amount)
    currency = order.currency or settings.currency

    logger.info("Payment initiated", order_id=order_id, amount=amount, currency=currency)
    return {
        "merchant_id": settings.merchant_id,
        "return_url": settings.return_url,
        "cancel_url": settings.cancel_url,
        "notify_url": settings.notify_url,
        "order_id": order_id,
        "items": settings.checkout_title,
        "currency": currency,
        "amount": amount,
        "first_name": "Customer",
        "last_name": "",
        "email": email or DEFAULT_EMAIL,
        "phone": "0000000000",
        "address": "N/A",
        "city": "N/A",
        "country": "Sri Lanka",
        "hash": provider.checkout_hash(order_id, amount, currency),
    }
