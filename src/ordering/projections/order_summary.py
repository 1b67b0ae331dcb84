"""Order summary: listing view for "my orders" and the admin dashboard."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderPlaced,
    OrderShipped,
    PaymentNoticeRecorded,
    PaymentSettled,
)
from ordering.order.order import Order, OrderStatus, PaymentStatus


@ordering.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    owner_id = Identifier(required=True)
    status = String(required=True)
    payment_status = String(default=PaymentStatus.UNPAID.value)
    item_count = Integer(default=0)
    total_amount = Float()
    currency = String(default="LKR")
    placed_at = DateTime()
    updated_at = DateTime()


@ordering.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                owner_id=event.owner_id,
                status=OrderStatus.PENDING.value,
                payment_status=PaymentStatus.UNPAID.value,
                item_count=sum(item["quantity"] for item in items),
                total_amount=event.total_amount,
                currency=event.currency or "LKR",
                placed_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    def _update(self, order_id, updated_at=None, **changes):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(order_id)
        for field, value in changes.items():
            setattr(summary, field, value)
        if updated_at:
            summary.updated_at = updated_at
        repo.add(summary)

    @on(OrderConfirmed)
    def on_order_confirmed(self, event):
        self._update(event.order_id, event.confirmed_at, status=OrderStatus.CONFIRMED.value)

    @on(PaymentSettled)
    def on_payment_settled(self, event):
        summary = current_domain.repository_for(OrderSummary).get(event.order_id)
        changes = {"payment_status": PaymentStatus.PAID.value}
        if summary.status == OrderStatus.PENDING.value:
            changes["status"] = OrderStatus.CONFIRMED.value
        self._update(event.order_id, event.settled_at, **changes)

    @on(PaymentNoticeRecorded)
    def on_payment_notice_recorded(self, event):
        self._update(event.order_id, event.recorded_at)

    @on(OrderShipped)
    def on_order_shipped(self, event):
        self._update(event.order_id, event.shipped_at, status=OrderStatus.SHIPPED.value)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update(event.order_id, event.cancelled_at, status=OrderStatus.CANCELLED.value)
