"""Domain events for the Order aggregate.

Events are persisted to the event store and used for:
- Rebuilding aggregate state via @apply (event sourcing)
- Updating the OrderSummary projection
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was priced, its stock reserved, and an order recorded as Pending."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line item dicts
    total_amount = Float(required=True)
    currency = String(default="LKR")
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderConfirmed:
    """An administrator confirmed the order without a payment settlement."""

    __version__ = 1

    order_id = Identifier(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentSettled:
    """The payment provider settled the order's total.

    Moves a Pending order to Confirmed; orders already confirmed by an
    administrator keep their status and only become Paid.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    status_code = String(required=True)
    settled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentNoticeRecorded:
    """The provider reported a non-success status code for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    status_code = String(required=True)
    recorded_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    """Fulfillment dispatched the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    shipped_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its reserved stock handed back."""

    __version__ = 1

    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: product_id/quantity pairs to restore
    reason = String()
    cancelled_at = DateTime(required=True)
