"""Order payment: commands and handler.

Both commands are only ever issued after the payment notification they
carry has passed signature verification.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.status import load_order


@ordering.command(part_of="Order")
class SettlePayment:
    order_id = Identifier(required=True)
    amount = String(required=True, max_length=20)  # Two-decimal string as notified
    currency = String(required=True, max_length=3)
    status_code = String(required=True, max_length=10)


@ordering.command(part_of="Order")
class RecordPaymentNotice:
    order_id = Identifier(required=True)
    status_code = String(required=True, max_length=10)


@ordering.command_handler(part_of=Order)
class PaymentHandler:
    @handle(SettlePayment)
    def settle_payment(self, command):
        order = load_order(command.order_id)
        settled = order.settle_payment(
            amount=command.amount,
            currency=command.currency,
            status_code=command.status_code,
        )
        if settled:
            current_domain.repository_for(Order).add(order)
        return settled

    @handle(RecordPaymentNotice)
    def record_payment_notice(self, command):
        order = load_order(command.order_id)
        recorded = order.record_payment_notice(command.status_code)
        if recorded:
            current_domain.repository_for(Order).add(order)
        return recorded
