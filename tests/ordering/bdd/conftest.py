"""Shared BDD fixtures and step definitions for the Ordering domain."""

import json
from datetime import UTC, datetime

import pytest
from ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderPlaced,
    OrderShipped,
    PaymentNoticeRecorded,
    PaymentSettled,
)
from ordering.order.order import Order
from ordering.order.payment import RecordPaymentNotice, SettlePayment
from ordering.order.status import UpdateOrderStatus
from protean.exceptions import ValidationError
from protean.testing import given as given_
from pytest_bdd import given, parsers, then, when

# Map event name strings to classes for dynamic lookup in Then steps
_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderConfirmed": OrderConfirmed,
    "PaymentSettled": PaymentSettled,
    "PaymentNoticeRecorded": PaymentNoticeRecorded,
    "OrderShipped": OrderShipped,
    "OrderCancelled": OrderCancelled,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_id():
    return "ord-001"


@pytest.fixture()
def owner_id():
    return "acct-001"


# ---------------------------------------------------------------------------
# Event fixtures (past tense: what happened)
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_placed(order_id, owner_id):
    return OrderPlaced(
        order_id=order_id,
        owner_id=owner_id,
        items=json.dumps(
            [
                {
                    "id": "item-1",
                    "product_id": "P1",
                    "title": "Test Candle",
                    "unit_price": 500.0,
                    "quantity": 2,
                }
            ]
        ),
        total_amount=1000.0,
        currency="LKR",
        placed_at=datetime.now(UTC),
    )


@pytest.fixture()
def order_confirmed(order_id):
    return OrderConfirmed(order_id=order_id, confirmed_at=datetime.now(UTC))


@pytest.fixture()
def payment_settled(order_id):
    return PaymentSettled(
        order_id=order_id,
        amount=1000.0,
        currency="LKR",
        status_code="2",
        settled_at=datetime.now(UTC),
    )


@pytest.fixture()
def order_shipped(order_id):
    return OrderShipped(order_id=order_id, shipped_at=datetime.now(UTC))


# ---------------------------------------------------------------------------
# Given steps: Order (event-sourced, using protean.testing.given)
# ---------------------------------------------------------------------------
@given("an order was placed", target_fixture="order")
def _(order_placed):
    return given_(Order, order_placed)


@given("the order was confirmed", target_fixture="order")
def _(order, order_confirmed):
    return order.after(order_confirmed)


@given("the order was paid", target_fixture="order")
def _(order, payment_settled):
    return order.after(payment_settled)


@given("the order was shipped", target_fixture="order")
def _(order, order_shipped):
    return order.after(order_shipped)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the administrator sets the status to "{status}"'), target_fixture="order")
def _(order, order_id, status):
    return order.process(UpdateOrderStatus(order_id=order_id, status=status))


@when(parsers.cfparse("the payment of {amount} is settled"), target_fixture="order")
def _(order, order_id, amount):
    return order.process(SettlePayment(order_id=order_id, amount=amount, currency="LKR", status_code="2"))


@when(parsers.cfparse('the provider reports status code "{status_code}"'), target_fixture="order")
def _(order, order_id, status_code):
    return order.process(RecordPaymentNotice(order_id=order_id, status_code=status_code))


# ---------------------------------------------------------------------------
# Then steps: Order (shared, plain assertions)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order, status):
    assert order.status == status


@then(parsers.cfparse('the order payment status is "{payment_status}"'))
def _(order, payment_status):
    assert order.payment_status == payment_status


@then("the order action fails with a validation error")
def _(order):
    assert order.rejected
    assert isinstance(order.rejection, ValidationError)


@then(parsers.cfparse("an {event_type} order event is raised"))
def _(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert event_cls in order.events


@then(parsers.cfparse("a {event_type} order event is raised"))
def _(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert event_cls in order.events


@then("no order event is raised")
def _(order):
    assert not order.rejected
    assert not any(event_cls in order.events for event_cls in _ORDER_EVENT_CLASSES.values())
