"""Ordering bounded context: order lifecycle, stock ledger and payment reconciliation.

Handles order placement (event-sourced), the stock counters orders reserve
against, and the settlement notifications that confirm payment.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
