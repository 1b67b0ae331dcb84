"""PayHere settlement provider.

PayHere signs its notifications with an uppercase hex MD5 digest over the
concatenated notification fields and the uppercase MD5 of the merchant
secret:

    md5sig = UPPER(MD5(merchant_id + order_id + amount + currency
                       + status_code + UPPER(MD5(merchant_secret))))

The supplied signature is compared byte for byte, so a lowercase or
otherwise re-cased digest does not verify. Checkout requests are signed the
same way, without the status code.
"""

import hashlib
import hmac

from ordering.config import PaymentSettings
from ordering.gateway.port import PaymentNotification, SettlementProvider


def _md5_upper(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()


def _same(left: str, right: str) -> bool:
    return hmac.compare_digest((left or "").encode("utf-8"), (right or "").encode("utf-8"))


class PayHereProvider(SettlementProvider):
    def __init__(self, settings: PaymentSettings) -> None:
        self.settings = settings

    @property
    def success_status_code(self) -> str:
        return self.settings.success_status_code

    @property
    def _hashed_secret(self) -> str:
        return _md5_upper(self.settings.merchant_secret)

    def notification_signature(self, notification: PaymentNotification) -> str:
        return _md5_upper(
            notification.merchant_id
            + notification.order_id
            + notification.amount
            + notification.currency
            + notification.status_code
            + self._hashed_secret
        )

    def verify(self, notification: PaymentNotification) -> bool:
        if not self.settings.merchant_secret:
            return False
        if not _same(notification.merchant_id, self.settings.merchant_id):
            return False

        expected = self.notification_signature(notification)
        return _same(expected, notification.signature or "")

    def checkout_hash(self, order_id: str, amount: str, currency: str) -> str:
        return _md5_upper(self.settings.merchant_id + order_id + amount + currency + self._hashed_secret)
