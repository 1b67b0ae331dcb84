"""Settlement provider port (abstract interface).

Defines what the ordering service needs from its payment provider: a way
to authenticate inbound settlement notifications and a way to sign the
checkout redirect. Only one provider protocol is supported; the port exists
so tests and local development can run against known credentials.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentNotification:
    """An inbound settlement notification. Never persisted.

    Delivered at least once; ``(order_id, status_code)`` identifies a
    delivery for idempotency purposes.
    """

    merchant_id: str
    order_id: str
    amount: str
    currency: str
    status_code: str
    signature: str


class SettlementProvider(ABC):
    """Abstract settlement provider interface."""

    @property
    @abstractmethod
    def success_status_code(self) -> str:
        """Status code the provider uses for a completed payment."""
        ...

    @abstractmethod
    def verify(self, notification: PaymentNotification) -> bool:
        """Return True if the notification is authentically from the provider."""
        ...

    @abstractmethod
    def checkout_hash(self, order_id: str, amount: str, currency: str) -> str:
        """Sign a checkout request for the provider's hosted payment page."""
        ...
