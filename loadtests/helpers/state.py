"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; nothing is shared across
users.
"""

from dataclasses import dataclass, field


@dataclass
class OrderState:
    """Tracks state for a single order lifecycle."""

    order_id: str | None = None
    headers: dict = field(default_factory=dict)
    amount: str | None = None
    currency: str = "LKR"
    current_status: str = "PENDING"
