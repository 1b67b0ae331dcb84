"""Settlement provider factory.

Provides get_provider() / set_provider() to swap implementations. The
default is a PayHereProvider configured from the environment.
"""

from ordering.config import PaymentSettings
from ordering.gateway.port import PaymentNotification, SettlementProvider

__all__ = ["PaymentNotification", "SettlementProvider", "get_provider", "reset_provider", "set_provider"]

_current_provider: SettlementProvider | None = None


def get_provider() -> SettlementProvider:
    """Return the current settlement provider."""
    global _current_provider
    if _current_provider is None:
        from ordering.gateway.payhere_adapter import PayHereProvider

        _current_provider = PayHereProvider(PaymentSettings.from_env())
    return _current_provider


def set_provider(provider: SettlementProvider) -> None:
    """Override the active settlement provider (useful for tests)."""
    global _current_provider
    _current_provider = provider


def reset_provider() -> None:
    """Reset to default provider."""
    global _current_provider
    _current_provider = None
