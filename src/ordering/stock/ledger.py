"""Stock Ledger: the only writer of ``Product.stock``.

Reservations and restores are applied as compare-and-set updates against the
data store: the new value is written only if the stored value still equals
the one that was read. Two service instances racing on the same product can
therefore never both decrement from the same observed stock; the loser
re-reads and tries again, and fails with ``InsufficientStock`` once the
remaining stock no longer covers its request.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from ordering.catalogue.product import Product
from ordering.errors import InsufficientStock, InternalFailure, ProductNotFound

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 5


class StockLedger:
    """Atomically reserves and restores product stock."""

    def __init__(self, max_attempts: int = MAX_ATTEMPTS) -> None:
        self.max_attempts = max_attempts

    @property
    def _dao(self):
        return current_domain.repository_for(Product)._dao

    def _read_stock(self, product_id) -> int:
        try:
            product = self._dao.get(product_id)
        except ObjectNotFoundError:
            raise ProductNotFound(product_id) from None
        return product.stock

    def _compare_and_set(self, product_id, expected: int, new: int) -> bool:
        """Write ``new`` only if the stored stock is still ``expected``."""
        updated = self._dao._update_all(Q(id=product_id, stock=expected), stock=new)
        return updated == 1

    @staticmethod
    def _check_quantity(quantity) -> None:
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be a positive integer"]})

    def reserve(self, product_id, quantity: int) -> int:
        """Decrement stock by ``quantity``. Returns the remaining stock."""
        self._check_quantity(quantity)

        for attempt in range(1, self.max_attempts + 1):
            current = self._read_stock(product_id)
            if quantity > current:
                raise InsufficientStock(product_id, requested=quantity, available=current)

            if self._compare_and_set(product_id, current, current - quantity):
                logger.debug(
                    "Stock reserved",
                    product_id=str(product_id),
                    quantity=quantity,
                    remaining=current - quantity,
                )
                return current - quantity

            logger.info(
                "Stock changed concurrently, retrying reservation",
                product_id=str(product_id),
                attempt=attempt,
            )

        logger.error(
            "Stock reservation gave up after repeated conflicts",
            product_id=str(product_id),
            quantity=quantity,
            attempts=self.max_attempts,
        )
        raise InternalFailure(f"Stock for product {product_id} is under contention, try again")

    def restore(self, product_id, quantity: int) -> int:
        """Increment stock by ``quantity``. Returns the new stock.

        Not idempotent: callers restore each reservation exactly once.
        """
        self._check_quantity(quantity)

        for attempt in range(1, self.max_attempts + 1):
            try:
                current = self._read_stock(product_id)
            except ProductNotFound:
                logger.error(
                    "Cannot restore stock for missing product",
                    product_id=str(product_id),
                    quantity=quantity,
                )
                raise

            if self._compare_and_set(product_id, current, current + quantity):
                logger.debug(
                    "Stock restored",
                    product_id=str(product_id),
                    quantity=quantity,
                    stock=current + quantity,
                )
                return current + quantity

            logger.info(
                "Stock changed concurrently, retrying restore",
                product_id=str(product_id),
                attempt=attempt,
            )

        logger.error(
            "Stock restore gave up after repeated conflicts",
            product_id=str(product_id),
            quantity=quantity,
            attempts=self.max_attempts,
        )
        raise InternalFailure(f"Could not restore stock for product {product_id}")
