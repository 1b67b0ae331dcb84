"""Order placement: command and handler.

Placement validates the cart, prices every line from the catalogue, reserves
stock line by line and records a Pending order. Lines are reserved strictly
in cart order; if anything fails after the first reservation, the reserved
lines are handed back in reverse order before the failure is reported.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import InsufficientStock, OrderCreationFailed
from ordering.order.builder import OrderBuilder, validate_cart
from ordering.order.order import Order
from ordering.stock.ledger import StockLedger

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    owner_id = Identifier(required=True)
    items = Text(required=True)  # JSON: raw cart lines as submitted
    currency = String(max_length=3, default="LKR")


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        raw_items = json.loads(command.items) if isinstance(command.items, str) else command.items
        lines = validate_cart(raw_items)
        priced = OrderBuilder().price(lines)

        ledger = StockLedger()
        reserved = []
        try:
            for line in priced:
                ledger.reserve(line["product_id"], line["quantity"])
                reserved.append(line)

            order = Order.place(
                owner_id=command.owner_id,
                lines=priced,
                currency=command.currency or "LKR",
            )
            current_domain.repository_for(Order).add(order)
        except Exception as exc:
            if not reserved:
                raise

            self._compensate(ledger, reserved, command.owner_id)
            if isinstance(exc, InsufficientStock):
                reason = f"Insufficient stock for product {exc.product_id}"
            else:
                reason = "Order could not be placed"
            raise OrderCreationFailed(reason, cause=exc) from exc

        logger.info(
            "Order placed",
            order_id=str(order.id),
            owner_id=str(command.owner_id),
            total_amount=order.total_amount,
            line_count=len(priced),
        )
        return str(order.id)

    @staticmethod
    def _compensate(ledger, reserved, owner_id):
        """Restore every reserved line, newest first.

        A failed restore is logged for manual reconciliation and the
        remaining lines are still restored.
        """
        for line in reversed(reserved):
            try:
                ledger.restore(line["product_id"], line["quantity"])
            except Exception:
                logger.exception(
                    "Stock compensation failed",
                    owner_id=str(owner_id),
                    product_id=line["product_id"],
                    quantity=line["quantity"],
                )
