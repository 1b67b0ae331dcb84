"""Administrative status changes: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import OrderNotFound
from ordering.order.order import Order, OrderStatus
from ordering.stock.ledger import StockLedger

logger = structlog.get_logger(__name__)


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound(order_id) from None


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    reason = String(max_length=500)


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        order = load_order(command.order_id)
        previous = order.status

        order.transition_to(command.status, reason=command.reason)

        if order.status == OrderStatus.CANCELLED.value:
            ledger = StockLedger()
            for item in order.items:
                ledger.restore(item.product_id, item.quantity)

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order status changed",
            order_id=str(order.id),
            from_status=previous,
            to_status=order.status,
        )
        return order.status
