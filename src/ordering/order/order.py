"""Order aggregate (Event Sourced): the core of the ordering domain.

All state changes are captured as domain events and the current state is
rebuilt by replaying them through @apply handlers. The event store's
expected-version check makes every transition a compare-and-swap: two
writers that loaded the same version cannot both append.

State Machine:
    PENDING → CONFIRMED → SHIPPED
    PENDING → CANCELLED
    CONFIRMED → CANCELLED (only while UNPAID)

Payment is a separate axis (UNPAID → PAID). PAID is only ever reached
through a verified settlement and implies CONFIRMED or SHIPPED.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import apply
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from ordering.domain import ordering
from ordering.errors import InvalidTransition
from ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderPlaced,
    OrderShipped,
    PaymentNoticeRecorded,
    PaymentSettled,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    CANCELLED = "CANCELLED"


class PaymentStatus(Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def order_total(lines) -> float:
    """Sum of unit price times quantity, rounded to cents."""
    return round(sum(line["unit_price"] * line["quantity"] for line in lines), 2)


def format_amount(amount) -> str:
    """Two-decimal string used on the wire with the payment provider."""
    return f"{float(amount):.2f}"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class LineItem:
    """An immutable snapshot of one product's title, price and quantity.

    Prices are captured at placement time; later catalogue price changes
    never reach an existing order.
    """

    product_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root (Event Sourced)
# ---------------------------------------------------------------------------
@ordering.aggregate(is_event_sourced=True)
class Order:
    owner_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    payment_status = String(
        choices=PaymentStatus,
        default=PaymentStatus.UNPAID.value,
    )
    items = HasMany(LineItem)
    total_amount = Float(default=0.0)
    currency = String(max_length=3, default="LKR")
    last_payment_status_code = String(max_length=10)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, owner_id, lines, currency="LKR"):
        """Record a new Pending order from priced line snapshots.

        Args:
            owner_id: The account placing the order.
            lines: List of dicts with product_id, title, unit_price, quantity.
                   Prices must already come from the catalogue.
            currency: Settlement currency for the order total.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one line item"]})

        # Pre-generate item IDs for deterministic replay
        items_with_ids = [{**line, "id": str(uuid4())} for line in lines]

        order = cls._create_new()
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                owner_id=str(owner_id),
                items=json.dumps(items_with_ids),
                total_amount=order_total(lines),
                currency=currency,
                placed_at=datetime.now(UTC),
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    @property
    def is_paid(self):
        return self.payment_status == PaymentStatus.PAID.value

    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(current.value, target_status.value)

        if current == OrderStatus.CONFIRMED and target_status == OrderStatus.CANCELLED and self.is_paid:
            raise InvalidTransition(
                current.value,
                target_status.value,
                reason="Cannot cancel a paid order; issue a refund instead",
            )

    def transition_to(self, target, reason=None):
        """Apply an administrative status change named by a status string."""
        try:
            target_status = OrderStatus(target)
        except ValueError:
            raise InvalidTransition(self.status, target, reason=f"Unknown order status: {target}") from None

        self._assert_can_transition(target_status)

        if target_status == OrderStatus.CONFIRMED:
            self.confirm()
        elif target_status == OrderStatus.SHIPPED:
            self.ship()
        else:
            self.cancel(reason)

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def confirm(self):
        """Confirm the order without a payment settlement (admin path)."""
        self._assert_can_transition(OrderStatus.CONFIRMED)
        self.raise_(
            OrderConfirmed(
                order_id=str(self.id),
                confirmed_at=datetime.now(UTC),
            )
        )

    def ship(self):
        """Record that fulfillment dispatched the order."""
        self._assert_can_transition(OrderStatus.SHIPPED)
        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                shipped_at=datetime.now(UTC),
            )
        )

    def cancel(self, reason=None):
        """Cancel the order. Reserved stock must be restored by the caller."""
        self._assert_can_transition(OrderStatus.CANCELLED)
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                items=json.dumps([{"product_id": str(i.product_id), "quantity": i.quantity} for i in self.items]),
                reason=reason,
                cancelled_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def settle_payment(self, amount, currency, status_code):
        """Mark the order Paid after a verified success notification.

        Returns False without raising an event when the order is already
        Paid, so redelivered notifications are harmless.
        """
        if self.is_paid:
            return False

        current = OrderStatus(self.status)
        if current == OrderStatus.CANCELLED:
            raise InvalidTransition(
                current.value,
                OrderStatus.CONFIRMED.value,
                reason="Cannot settle payment for a cancelled order",
            )

        try:
            settled_amount = format_amount(amount)
        except (TypeError, ValueError):
            raise ValidationError({"amount": [f"Invalid amount: {amount}"]}) from None

        if settled_amount != format_amount(self.total_amount):
            raise ValidationError(
                {"amount": [f"Settled amount {settled_amount} does not match order total {format_amount(self.total_amount)}"]}
            )
        if currency != self.currency:
            raise ValidationError({"currency": [f"Settled currency {currency} does not match order currency {self.currency}"]})

        self.raise_(
            PaymentSettled(
                order_id=str(self.id),
                amount=float(settled_amount),
                currency=currency,
                status_code=str(status_code),
                settled_at=datetime.now(UTC),
            )
        )
        return True

    def record_payment_notice(self, status_code):
        """Record a non-success provider status. No status change.

        Returns False when the same code was the last one recorded.
        """
        if self.last_payment_status_code == str(status_code):
            return False

        self.raise_(
            PaymentNoticeRecorded(
                order_id=str(self.id),
                status_code=str(status_code),
                recorded_at=datetime.now(UTC),
            )
        )
        return True

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_order_placed(self, event: OrderPlaced):
        self.id = event.order_id
        self.owner_id = event.owner_id
        self.status = OrderStatus.PENDING.value
        self.payment_status = PaymentStatus.UNPAID.value
        self.total_amount = event.total_amount
        self.currency = event.currency or "LKR"
        self.created_at = event.placed_at
        self.updated_at = event.placed_at

        items_data = json.loads(event.items) if isinstance(event.items, str) else []
        self.items = [LineItem(**item_data) for item_data in items_data]

    @apply
    def _on_order_confirmed(self, event: OrderConfirmed):
        self.status = OrderStatus.CONFIRMED.value
        self.updated_at = event.confirmed_at

    @apply
    def _on_payment_settled(self, event: PaymentSettled):
        if self.status == OrderStatus.PENDING.value:
            self.status = OrderStatus.CONFIRMED.value
        self.payment_status = PaymentStatus.PAID.value
        self.updated_at = event.settled_at

    @apply
    def _on_payment_notice_recorded(self, event: PaymentNoticeRecorded):
        self.last_payment_status_code = event.status_code
        self.updated_at = event.recorded_at

    @apply
    def _on_order_shipped(self, event: OrderShipped):
        self.status = OrderStatus.SHIPPED.value
        self.updated_at = event.shipped_at

    @apply
    def _on_order_cancelled(self, event: OrderCancelled):
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = event.reason
        self.updated_at = event.cancelled_at
