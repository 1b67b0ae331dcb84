"""Error kinds raised by the ordering domain.

Every error sets its own Protean-style ``messages`` dict (field -> list of
strings); only ``ValidationError`` stores one in the base class. The API layer
renders them uniformly.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class ProductNotFound(ObjectNotFoundError):
    def __init__(self, product_id):
        self.product_id = str(product_id)
        self.messages = {"product_id": [f"Product not found: {product_id}"]}
        super().__init__(self.messages)


class OrderNotFound(ObjectNotFoundError):
    def __init__(self, order_id):
        self.order_id = str(order_id)
        self.messages = {"order_id": [f"Order not found: {order_id}"]}
        super().__init__(self.messages)


class InvalidTransition(ValidationError):
    """An illegal or unrecognised order status change."""

    def __init__(self, current, target, reason=None):
        self.current = current
        self.target = target
        message = reason or f"Cannot transition from {current} to {target}"
        super().__init__({"status": [message]})


class InsufficientStock(InvalidOperationError):
    def __init__(self, product_id, requested, available):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        self.messages = {
            "quantity": [f"Insufficient stock for {product_id}: requested {requested}, available {available}"]
        }
        super().__init__(self.messages)


class InvalidSignature(InvalidOperationError):
    """A payment notification failed its integrity check.

    The message is deliberately generic: callers never learn which part of
    the notification was wrong.
    """

    def __init__(self):
        self.messages = {"signature": ["Invalid signature"]}
        super().__init__(self.messages)


class OrderCreationFailed(InvalidOperationError):
    """Order placement failed after stock had started to be reserved.

    Raised only once every reserved line has been restored. ``cause`` is the
    error that stopped placement.
    """

    def __init__(self, reason, cause=None):
        self.reason = reason
        self.cause = cause
        self.messages = {"order": [reason]}
        super().__init__(self.messages)


class InternalFailure(Exception):
    """Storage or catalogue unavailability that the caller cannot fix."""

    def __init__(self, message):
        self.messages = {"_service": [message]}
        super().__init__(message)
