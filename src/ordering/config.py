"""Runtime configuration for the ordering service.

Protean's own settings live in ``domain.toml`` next to the domain module;
everything environment-specific (payment provider credentials, public URLs,
database location) is read from environment variables here.
"""

import os
from dataclasses import dataclass

import structlog
from protean.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

PAYHERE_SUCCESS_CODE = "2"


@dataclass(frozen=True)
class PaymentSettings:
    """Credentials and URLs agreed with the payment provider."""

    merchant_id: str
    merchant_secret: str
    currency: str = "LKR"
    frontend_url: str = "http://localhost:5173"
    api_url: str = "http://localhost:8000"
    success_status_code: str = PAYHERE_SUCCESS_CODE
    checkout_title: str = "Bovita Candles Order"

    @classmethod
    def from_env(cls) -> "PaymentSettings":
        return cls(
            merchant_id=os.getenv("PAYHERE_MERCHANT_ID", ""),
            merchant_secret=os.getenv("PAYHERE_MERCHANT_SECRET", ""),
            currency=os.getenv("PAYHERE_CURRENCY", "LKR"),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/"),
            api_url=os.getenv("API_URL", "http://localhost:8000").rstrip("/"),
        )

    @property
    def return_url(self) -> str:
        return f"{self.frontend_url}/payment-success"

    @property
    def cancel_url(self) -> str:
        return f"{self.frontend_url}/payment-cancel"

    @property
    def notify_url(self) -> str:
        return f"{self.api_url}/payments/payhere/notify"


def cors_origins() -> list[str]:
    """Allowed CORS origins, comma separated in ``CORS_ORIGINS``."""
    raw = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def apply_database_settings(domain) -> None:
    """Point persistence at durable stores from the environment.

    ``DATABASE_URL`` moves the default provider (products, projections) to
    PostgreSQL; ``EVENT_STORE_URL`` moves the event store (orders) to Message
    DB. Orders are event-sourced, so a database without an event store would
    leave every order in one process's memory: that combination is refused.

    Must run before ``domain.init()``.
    """
    database_uri = os.getenv("DATABASE_URL")
    event_store_uri = os.getenv("EVENT_STORE_URL")

    if database_uri and not event_store_uri:
        raise ConfigurationError("DATABASE_URL is set but EVENT_STORE_URL is not; orders need a durable event store")

    if database_uri:
        domain.config["databases"]["default"] = {
            "provider": "postgresql",
            "database_uri": database_uri,
        }
        logger.info("Using PostgreSQL provider", database=database_uri.rsplit("@", 1)[-1])

    if event_store_uri:
        domain.config["event_store"] = {
            "provider": "message_db",
            "database_uri": event_store_uri,
        }
        logger.info("Using Message DB event store", database=event_store_uri.rsplit("@", 1)[-1])
