"""Payment reconciliation: applies verified settlement notifications.

Notifications are untrusted until their signature checks out; nothing is
read from or written to the store before that. Verified notifications are
turned into order commands:

- the provider's success code settles the order (Pending → Confirmed, Paid)
- any other code is recorded on the order without changing its status

Delivery is at least once, so every outcome is idempotent on
``(order_id, status_code)``. Two deliveries racing on the same order are
serialized by the event store: the loser's append fails the expected-version
check and the notification is processed again against the fresh state,
where it becomes a no-op.
"""

from enum import Enum

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from ordering.errors import InternalFailure, InvalidSignature
from ordering.gateway import PaymentNotification, SettlementProvider, get_provider
from ordering.order.payment import RecordPaymentNotice, SettlePayment

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3


class ReconciliationOutcome(str, Enum):
    SETTLED = "settled"
    ALREADY_SETTLED = "already_settled"
    RECORDED = "recorded"
    ALREADY_RECORDED = "already_recorded"


class PaymentReconciliationGateway:
    def __init__(self, provider: SettlementProvider | None = None, max_attempts: int = MAX_ATTEMPTS) -> None:
        self.provider = provider or get_provider()
        self.max_attempts = max_attempts

    def reconcile(self, notification: PaymentNotification) -> ReconciliationOutcome:
        if not self.provider.verify(notification):
            logger.warning(
                "Payment notification failed verification",
                order_id=notification.order_id,
                status_code=notification.status_code,
            )
            raise InvalidSignature()

        for attempt in range(1, self.max_attempts + 1):
            try:
                outcome = self._apply(notification)
            except ExpectedVersionError:
                logger.info(
                    "Order changed concurrently, re-processing notification",
                    order_id=notification.order_id,
                    attempt=attempt,
                )
                continue

            logger.info(
                "Payment notification reconciled",
                order_id=notification.order_id,
                status_code=notification.status_code,
                outcome=outcome.value,
            )
            return outcome

        logger.error(
            "Payment notification could not be applied after repeated conflicts",
            order_id=notification.order_id,
            status_code=notification.status_code,
        )
        raise InternalFailure(f"Order {notification.order_id} is under contention, redeliver later")

    def _apply(self, notification: PaymentNotification) -> ReconciliationOutcome:
        if notification.status_code == self.provider.success_status_code:
            settled = current_domain.process(
                SettlePayment(
                    order_id=notification.order_id,
                    amount=notification.amount,
                    currency=notification.currency,
                    status_code=notification.status_code,
                ),
                asynchronous=False,
            )
            return ReconciliationOutcome.SETTLED if settled else ReconciliationOutcome.ALREADY_SETTLED

        recorded = current_domain.process(
            RecordPaymentNotice(
                order_id=notification.order_id,
                status_code=notification.status_code,
            ),
            asynchronous=False,
        )
        return ReconciliationOutcome.RECORDED if recorded else ReconciliationOutcome.ALREADY_RECORDED
