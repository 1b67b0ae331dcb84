"""Tests for the error kinds and the messages they carry."""

import pytest
from ordering.errors import (
    InsufficientStock,
    InternalFailure,
    InvalidSignature,
    InvalidTransition,
    OrderCreationFailed,
    OrderNotFound,
    ProductNotFound,
)


class TestErrorMessages:
    @pytest.mark.parametrize(
        "make_error, key",
        [
            (lambda: ProductNotFound("prod-9"), "product_id"),
            (lambda: OrderNotFound("ord-9"), "order_id"),
            (lambda: InvalidTransition("SHIPPED", "CANCELLED"), "status"),
            (lambda: InsufficientStock("prod-9", requested=4, available=1), "quantity"),
            (InvalidSignature, "signature"),
            (lambda: OrderCreationFailed("Order could not be placed"), "order"),
            (lambda: InternalFailure("Store unavailable"), "_service"),
        ],
    )
    def test_every_error_carries_field_messages(self, make_error, key):
        error = make_error()
        assert list(error.messages) == [key]
        assert isinstance(error.messages[key], list)
        assert error.messages[key][0]

    def test_insufficient_stock_names_quantities(self):
        error = InsufficientStock("prod-9", requested=4, available=1)
        assert error.messages["quantity"] == ["Insufficient stock for prod-9: requested 4, available 1"]

    def test_signature_error_is_generic(self):
        assert InvalidSignature().messages == {"signature": ["Invalid signature"]}

    def test_creation_failure_keeps_its_cause(self):
        cause = InsufficientStock("prod-9", requested=4, available=1)
        error = OrderCreationFailed("Insufficient stock for product prod-9", cause=cause)
        assert error.cause is cause
        assert error.messages == {"order": ["Insufficient stock for product prod-9"]}
